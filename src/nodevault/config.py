"""Runtime configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

SETTINGS_KEY = "zeus-settings"
"""Fixed store key for the settings blob. Changing it orphans existing installs."""

DEFAULT_HOME = Path.home() / ".nodevault"
DEFAULT_TIMEOUT = 30.0


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass
class VaultConfig:
    """
    Where and how settings are stored.

    Attributes:
        home: Root directory; encrypted entries live in ``home / "credentials"``
        credential_key: Fernet master key. ``None`` means generate/read ``.key``
        settings_key: Store key for the settings blob
        timeout: Seconds allowed for each HTTP request
    """

    home: Path = field(default_factory=lambda: DEFAULT_HOME)
    credential_key: str | None = None
    settings_key: str = SETTINGS_KEY
    timeout: float = DEFAULT_TIMEOUT

    @property
    def credentials_path(self) -> Path:
        return self.home / "credentials"

    @classmethod
    def from_env(cls) -> VaultConfig:
        home = os.environ.get("NODEVAULT_HOME")
        return cls(
            home=Path(home).expanduser() if home else DEFAULT_HOME,
            credential_key=os.environ.get("NODEVAULT_CREDENTIAL_KEY") or None,
            timeout=_env_float("NODEVAULT_TIMEOUT", DEFAULT_TIMEOUT),
        )


default_config = VaultConfig.from_env()
