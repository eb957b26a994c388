"""storage

Small key/value backends used for credentials and preferences.

- KeyringStorage keeps values in the OS keyring (service `harvest-hours`).
- EnvironmentStorage reads `HARVEST_*` variables, loading a `.env` file first.
- LayeredStorage reads through several backends and writes to the last one.
- MemoryStorage is a plain dict, handy for tests and `--no-keyring` runs.
"""

from __future__ import annotations

import logging
import os
import re

import keyring
from keyring.errors import KeyringError, PasswordDeleteError
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

SERVICE = "harvest-hours"


def env_name(key: str, prefix: str = "HARVEST_") -> str:
    """Map a storage key to its environment variable.

    `HarvestAccountID` -> `HARVEST_ACCOUNT_ID`, `RefreshInterval` -> `HARVEST_REFRESH_INTERVAL`.
    """
    if key.startswith("Harvest"):
        key = key[len("Harvest"):]
    key = key.replace("API", "Api").replace("ID", "Id")
    words = re.findall(r"[A-Z][a-z0-9]*", key)
    return prefix + "_".join(w.upper() for w in words)


class KeyringStorage:
    def __init__(self, service: str = SERVICE):
        self.service = service

    def get(self, key: str) -> str | None:
        try:
            return keyring.get_password(self.service, key)
        except KeyringError as e:
            logger.warning("Could not read %s from keyring: %s", key, e)
            return None

    def set(self, key: str, value: str) -> None:
        try:
            keyring.set_password(self.service, key, value)
        except KeyringError as e:
            logger.warning("Could not save %s to keyring: %s", key, e)

    def delete(self, key: str) -> None:
        try:
            keyring.delete_password(self.service, key)
        except PasswordDeleteError:
            logger.debug("%s was not stored in keyring", key)
        except KeyringError as e:
            logger.warning("Could not remove %s from keyring: %s", key, e)


class EnvironmentStorage:
    def __init__(self, prefix: str = "HARVEST_", dotenv: bool = True):
        self.prefix = prefix
        if dotenv:
            load_dotenv()

    def get(self, key: str) -> str | None:
        return os.environ.get(env_name(key, self.prefix))

    def set(self, key: str, value: str) -> None:
        os.environ[env_name(key, self.prefix)] = value

    def delete(self, key: str) -> None:
        os.environ.pop(env_name(key, self.prefix), None)


class MemoryStorage:
    def __init__(self, values: dict[str, str] | None = None):
        self.values = dict(values or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


class LayeredStorage:
    """Read from the first layer holding a non-empty value; persist to the last.

    Writes also go to every earlier layer that currently holds the key, so a
    saved value is not shadowed by an older one in front of it.
    """

    def __init__(self, *layers):
        if not layers:
            raise ValueError("LayeredStorage needs at least one layer")
        self.layers = layers

    def get(self, key: str) -> str | None:
        for layer in self.layers:
            value = layer.get(key)
            if value:
                return value
        return None

    def set(self, key: str, value: str) -> None:
        for layer in self.layers[:-1]:
            if layer.get(key):
                layer.set(key, value)
        self.layers[-1].set(key, value)

    def delete(self, key: str) -> None:
        for layer in self.layers:
            layer.delete(key)


def default_storage() -> LayeredStorage:
    return LayeredStorage(EnvironmentStorage(), KeyringStorage())
