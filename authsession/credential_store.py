from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from .constants import ACCESS_TOKEN_KEY, CREDENTIAL_KEYS, REFRESH_TOKEN_KEY
from .models import CredentialPair


def _check_key(key: str) -> None:
    if key not in CREDENTIAL_KEYS:
        raise KeyError(f"Unknown credential key {key!r}; expected one of {CREDENTIAL_KEYS}.")


def _check_value(key: str, value: str) -> None:
    if not isinstance(value, str) or not value:
        raise ValueError(f"Credential {key!r} must be a non-empty string.")


class CredentialStore(ABC):
    """Holds the access/refresh strings; the single source of truth for both."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def clear(self, key: str) -> None:
        raise NotImplementedError

    async def load(self) -> CredentialPair:
        return CredentialPair(
            access_token=await self.get(ACCESS_TOKEN_KEY),
            refresh_token=await self.get(REFRESH_TOKEN_KEY),
        )

    async def save(self, access_token: str, refresh_token: str | None = None) -> None:
        """Store a new access credential, replacing the refresh credential only if given."""
        _check_value(ACCESS_TOKEN_KEY, access_token)
        if refresh_token is not None:
            _check_value(REFRESH_TOKEN_KEY, refresh_token)
        await self.set(ACCESS_TOKEN_KEY, access_token)
        if refresh_token is not None:
            await self.set(REFRESH_TOKEN_KEY, refresh_token)

    async def clear_all(self) -> None:
        for key in CREDENTIAL_KEYS:
            await self.clear(key)


class MemoryCredentialStore(CredentialStore):
    def __init__(self, pair: CredentialPair | None = None) -> None:
        self._values: dict[str, str] = {}
        if pair is not None:
            if pair.access_token:
                self._values[ACCESS_TOKEN_KEY] = pair.access_token
            if pair.refresh_token:
                self._values[REFRESH_TOKEN_KEY] = pair.refresh_token

    async def get(self, key: str) -> str | None:
        _check_key(key)
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        _check_key(key)
        _check_value(key, value)
        self._values[key] = value

    async def clear(self, key: str) -> None:
        _check_key(key)
        self._values.pop(key, None)

    async def save(self, access_token: str, refresh_token: str | None = None) -> None:
        _check_value(ACCESS_TOKEN_KEY, access_token)
        updates = {ACCESS_TOKEN_KEY: access_token}
        if refresh_token is not None:
            _check_value(REFRESH_TOKEN_KEY, refresh_token)
            updates[REFRESH_TOKEN_KEY] = refresh_token
        self._values.update(updates)

    async def clear_all(self) -> None:
        self._values.clear()


class FileCredentialStore(CredentialStore):
    def __init__(self, path: str | Path = ".credentials.json") -> None:
        self._path = Path(path)

    async def get(self, key: str) -> str | None:
        _check_key(key)
        return self._read_all().get(key)

    async def set(self, key: str, value: str) -> None:
        _check_key(key)
        _check_value(key, value)
        values = self._read_all()
        values[key] = value
        self._write_all(values)

    async def clear(self, key: str) -> None:
        _check_key(key)
        values = self._read_all()
        if values.pop(key, None) is not None:
            self._write_all(values)

    async def save(self, access_token: str, refresh_token: str | None = None) -> None:
        _check_value(ACCESS_TOKEN_KEY, access_token)
        values = self._read_all()
        values[ACCESS_TOKEN_KEY] = access_token
        if refresh_token is not None:
            _check_value(REFRESH_TOKEN_KEY, refresh_token)
            values[REFRESH_TOKEN_KEY] = refresh_token
        self._write_all(values)

    async def clear_all(self) -> None:
        if self._path.exists():
            self._write_all({})

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}

        raw = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise RuntimeError("Credential store file is invalid; expected top-level JSON object.")
        return {key: value for key, value in raw.items() if key in CREDENTIAL_KEYS and value}

    def _write_all(self, payload: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f"{self._path.name}.",
            suffix=".tmp",
            dir=self._path.parent,
        )
        tmp_path = Path(tmp_name)

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, sort_keys=True)
            os.replace(tmp_path, self._path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
