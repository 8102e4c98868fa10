"""
Secure key/value storage for the settings blob.

Storage convention:
    {base_path}/.key          Fernet master key (0600), unless one is supplied
    {base_path}/{key}.enc     Fernet token of {"value": ..., "accessible": ...}

Usage:
    storage = EncryptedFileStorage()
    storage.set("zeus-settings", blob, Accessibility.WHEN_UNLOCKED)
    blob = storage.get("zeus-settings")  # None on first run
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from enum import Enum
from pathlib import Path
from typing import Protocol

from cryptography.fernet import Fernet, InvalidToken

from ..config import default_config
from ..errors import StorageUnavailableError

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"[^A-Za-z0-9._-]")


class Accessibility(str, Enum):
    """When a stored value may be read back."""

    WHEN_UNLOCKED = "when_unlocked"
    AFTER_FIRST_UNLOCK = "after_first_unlock"
    ALWAYS = "always"


class SecureStore(Protocol):
    """Synchronous secure store consumed by CredentialVault."""

    def get(self, key: str) -> str | None: ...

    def set(
        self, key: str, value: str, accessible: Accessibility = Accessibility.WHEN_UNLOCKED
    ) -> bool: ...

    def delete(self, key: str) -> bool: ...


class EncryptedFileStorage:
    """
    Fernet-encrypted file per key.

    A missing file is a normal miss (``None``). A file that exists but cannot
    be read or decrypted raises StorageUnavailableError, so callers can tell
    "nothing stored" apart from "store unreachable".
    """

    def __init__(
        self,
        base_path: str | Path | None = None,
        encryption_key: str | bytes | None = None,
    ) -> None:
        self._base_path = Path(base_path) if base_path else default_config.credentials_path
        self._key = encryption_key if encryption_key is not None else default_config.credential_key
        self._fernet: Fernet | None = None

    @property
    def base_path(self) -> Path:
        return self._base_path

    # ------------------------------------------------------------------
    # SecureStore
    # ------------------------------------------------------------------

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            logger.debug("No stored entry for %s", key)
            return None

        try:
            token = path.read_bytes()
            payload = json.loads(self._get_fernet().decrypt(token))
        except InvalidToken as exc:
            raise StorageUnavailableError(f"Cannot decrypt entry {key!r}: wrong key?") from exc
        except (OSError, ValueError) as exc:
            raise StorageUnavailableError(f"Cannot read entry {key!r}: {exc}") from exc

        return payload.get("value")

    def set(
        self, key: str, value: str, accessible: Accessibility = Accessibility.WHEN_UNLOCKED
    ) -> bool:
        payload = json.dumps({"value": value, "accessible": Accessibility(accessible).value})
        try:
            token = self._get_fernet().encrypt(payload.encode("utf-8"))
            self._atomic_write(self._path_for(key), token)
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot write entry {key!r}: {exc}") from exc
        return True

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot delete entry {key!r}: {exc}") from exc
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _path_for(self, key: str) -> Path:
        return self._base_path / f"{_SAFE_KEY.sub('_', key)}.enc"

    def _get_fernet(self) -> Fernet:
        if self._fernet is None:
            try:
                self._fernet = Fernet(self._key or self._load_or_create_key())
            except ValueError as exc:
                raise StorageUnavailableError(f"Invalid encryption key: {exc}") from exc
            except OSError as exc:
                raise StorageUnavailableError(f"Cannot access encryption key: {exc}") from exc
        return self._fernet

    def _load_or_create_key(self) -> bytes:
        key_path = self._base_path / ".key"
        if key_path.exists():
            return key_path.read_bytes().strip()

        key = Fernet.generate_key()
        self._atomic_write(key_path, key)
        logger.info("Generated new encryption key at %s", key_path)
        return key

    def _atomic_write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
