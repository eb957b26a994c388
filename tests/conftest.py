"""
Pytest configuration and fixtures.
"""

import json
import sys
from pathlib import Path

import pytest
import requests

# Add project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from harvest_hours.login_helper import CredentialStore
from harvest_hours.storage import MemoryStorage

VALID_CREDENTIALS = {
    "HarvestAccountID": "123456",
    "HarvestAPIToken": "token-abc",
    "HarvestUserAgent": "HarvestTimeReport (me@example.com)",
}


def make_response(status=200, body=None):
    response = requests.Response()
    response.status_code = status
    if body is None:
        response._content = b""
    elif isinstance(body, bytes):
        response._content = body
    else:
        response._content = json.dumps(body).encode("utf-8")
    response.encoding = "utf-8"
    return response


class FakeSession(requests.Session):
    """Session that records prepared requests instead of sending them."""

    def __init__(self, response=None, error=None):
        super().__init__()
        self.response = response
        self.error = error
        self.sent = []

    def send(self, request, **kwargs):
        self.sent.append(request)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def storage():
    return MemoryStorage(VALID_CREDENTIALS)


@pytest.fixture
def store(storage):
    return CredentialStore(storage)
