"""
CoinEx API credential providers.

The session only needs get_credentials(); whether the values can sign a
request is decided by is_usable(), which rejects empty values and the
placeholder secrets shipped in example configs.
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

import msgspec

from config.structs import ExchangeCredentials
from infrastructure.logging import get_logger

PLACEHOLDER_SECRETS = frozenset({'your-api-secret-here', 'temp'})

API_KEY_ENV = 'COINEX_API_KEY'
API_SECRET_ENV = 'COINEX_API_SECRET'


def is_usable(credentials: Optional[ExchangeCredentials]) -> bool:
    """True when both values are present and the secret is not a placeholder."""
    if credentials is None:
        return False
    api_key = credentials.api_key.strip()
    secret = credentials.secret_key.strip()
    return bool(api_key) and bool(secret) and secret not in PLACEHOLDER_SECRETS


class CredentialProvider(ABC):

    @abstractmethod
    def get_credentials(self) -> ExchangeCredentials:
        """Current key/secret pair; may be empty or a placeholder."""
        pass

    def is_configured(self) -> bool:
        return is_usable(self.get_credentials())


class ApiCredentialStore(CredentialProvider):
    """
    Key-value credential store.

    Values are trimmed on write. When storage_path is given the pair is
    persisted as JSON and reloaded on construction.
    """

    def __init__(self, api_key: str = "", secret_key: str = "",
                 storage_path: Optional[Union[str, Path]] = None):
        self.logger = get_logger('coinex.credentials')
        self.storage_path = Path(storage_path) if storage_path else None
        self._credentials = ExchangeCredentials(api_key=api_key.strip(), secret_key=secret_key.strip())

        if self.storage_path and not self._credentials.has_private_api:
            self._load()

    def set_credentials(self, api_key: str, secret_key: str) -> None:
        self._credentials = ExchangeCredentials(api_key=api_key.strip(), secret_key=secret_key.strip())
        self.logger.info("API credentials updated",
                         preview=self._credentials.get_preview(),
                         configured=self.is_configured())
        self._save()

    def clear(self) -> None:
        self._credentials = ExchangeCredentials()
        if self.storage_path and self.storage_path.exists():
            self.storage_path.unlink()
        self.logger.info("API credentials cleared")

    def get_credentials(self) -> ExchangeCredentials:
        return self._credentials

    def _save(self) -> None:
        if not self.storage_path:
            return
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        self.storage_path.write_bytes(msgspec.json.encode(self._credentials))

    def _load(self) -> None:
        if not self.storage_path.exists():
            return
        try:
            stored = msgspec.json.decode(self.storage_path.read_bytes(), type=ExchangeCredentials)
        except (msgspec.DecodeError, msgspec.ValidationError) as e:
            self.logger.warning("Ignoring unreadable credential file",
                                path=str(self.storage_path), error_message=str(e))
            return
        if stored.api_key and stored.secret_key:
            self._credentials = ExchangeCredentials(api_key=stored.api_key.strip(),
                                                    secret_key=stored.secret_key.strip())


class EnvCredentialProvider(CredentialProvider):
    """Reads COINEX_API_KEY / COINEX_API_SECRET on every call."""

    def __init__(self, key_var: str = API_KEY_ENV, secret_var: str = API_SECRET_ENV):
        self.key_var = key_var
        self.secret_var = secret_var

    def get_credentials(self) -> ExchangeCredentials:
        return ExchangeCredentials(
            api_key=os.getenv(self.key_var, '').strip(),
            secret_key=os.getenv(self.secret_var, '').strip(),
        )
