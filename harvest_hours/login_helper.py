"""login_helper

Holds the Harvest credentials (account ID, API token, user agent) and the
helpers that prompt for them.

- `CredentialStore` reads the three values from a storage backend and keeps an
  immutable snapshot in memory. Missing values are empty strings, never errors.
- `ensure_credentials(store, force_login=False)` prompts for whatever is missing
  (or everything, when `force_login` is True) and saves it back.
- `clear_stored_credentials(store)` forgets all three values.

This keeps secret handling centralized.
"""

from __future__ import annotations

import getpass
from dataclasses import dataclass

ACCOUNT_ID_KEY = "HarvestAccountID"
API_TOKEN_KEY = "HarvestAPIToken"
USER_AGENT_KEY = "HarvestUserAgent"
CREDENTIAL_KEYS = (ACCOUNT_ID_KEY, API_TOKEN_KEY, USER_AGENT_KEY)

DEFAULT_USER_AGENT = "HarvestTimeReport (your-email@example.com)"


@dataclass(frozen=True)
class Credentials:
    account_id: str = ""
    api_token: str = ""
    user_agent: str = ""

    def valid(self) -> bool:
        return all(v.strip() for v in (self.account_id, self.api_token, self.user_agent))


class CredentialStore:
    def __init__(self, storage):
        self.storage = storage
        self._credentials = Credentials()
        self.load()

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    def load(self) -> Credentials:
        self._credentials = Credentials(
            account_id=self.storage.get(ACCOUNT_ID_KEY) or "",
            api_token=self.storage.get(API_TOKEN_KEY) or "",
            user_agent=self.storage.get(USER_AGENT_KEY) or "",
        )
        return self._credentials

    def update(self) -> Credentials:
        """Re-read the credentials after something else wrote to storage."""
        return self.load()

    def save(self, account_id: str, api_token: str, user_agent: str) -> Credentials:
        self.storage.set(ACCOUNT_ID_KEY, account_id.strip())
        self.storage.set(API_TOKEN_KEY, api_token.strip())
        self.storage.set(USER_AGENT_KEY, user_agent.strip())
        return self.update()

    def clear(self) -> None:
        try:
            for key in CREDENTIAL_KEYS:
                self.storage.delete(key)
        finally:
            self._credentials = Credentials()

    def valid(self) -> bool:
        return self._credentials.valid()


def prompt_visible(prompt: str) -> str:
    try:
        return input(prompt).strip()
    except EOFError:
        return ""


def prompt_hidden(prompt: str) -> str:
    try:
        return getpass.getpass(prompt).strip()
    except EOFError:
        return ""


def ensure_credentials(store: CredentialStore, force_login: bool = False,
                       prompt=prompt_visible, secret_prompt=prompt_hidden) -> Credentials:
    """Make sure the store holds a full set of credentials.

    Prompts only for the values that are missing unless `force_login` is True.
    Blank answers keep the current value. Returns the resulting snapshot,
    which may still be invalid if the user skipped a field.
    """
    current = store.credentials
    if current.valid() and not force_login:
        return current

    print("Enter your Harvest API credentials.")
    print("You can find these in Harvest under Settings > Integrations > Personal Access Tokens.")

    account_id = current.account_id
    if force_login or not account_id.strip():
        account_id = prompt("Account ID: ") or account_id

    api_token = current.api_token
    if force_login or not api_token.strip():
        api_token = secret_prompt("API Token: ") or api_token

    user_agent = current.user_agent
    if force_login or not user_agent.strip():
        # The user agent should include the app name and a contact email.
        default = user_agent or DEFAULT_USER_AGENT
        user_agent = prompt(f"User Agent [{default}]: ") or default

    return store.save(account_id, api_token, user_agent)


def clear_stored_credentials(store: CredentialStore) -> None:
    """Clear stored credentials. Useful for testing or switching accounts."""
    store.clear()
    print("All Harvest API credentials have been removed. Use 'Edit login details' to reconfigure.")
