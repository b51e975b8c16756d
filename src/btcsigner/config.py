"""
Configuration management using pydantic-settings.
"""

import json
from pathlib import Path
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from btcsigner.errors import PaymentError


def load_mnemonic_from_secret(secret_string: str | None) -> str:
    """
    Extract BTC_MNEMONIC from a JSON secret.

    Raises:
        PaymentError: If the secret is empty, not JSON or lacks the key
    """
    if not secret_string:
        raise PaymentError("SecretString is empty, expected JSON in SecretString")
    try:
        secret = json.loads(secret_string)
    except json.JSONDecodeError as e:
        raise PaymentError("SecretString is not valid JSON") from e

    mnemonic = secret.get("BTC_MNEMONIC") if isinstance(secret, dict) else None
    if not isinstance(mnemonic, str) or not mnemonic.strip():
        raise PaymentError("BTC_MNEMONIC is missing from secret")
    return mnemonic


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    network: Literal["mainnet", "testnet"] = "testnet"

    btc_mnemonic: SecretStr | None = None
    # JSON secret of the form {"BTC_MNEMONIC": "..."}
    secret_file: Path | None = None

    log_level: str = "INFO"

    def get_mnemonic(self) -> str:
        """Mnemonic from BTC_MNEMONIC, else from the secret file."""
        if self.btc_mnemonic is not None and self.btc_mnemonic.get_secret_value():
            return self.btc_mnemonic.get_secret_value()
        if self.secret_file is not None:
            if not self.secret_file.exists():
                raise PaymentError(f"Secret file not found: {self.secret_file}")
            return load_mnemonic_from_secret(self.secret_file.read_text())
        raise PaymentError("Mnemonic required. Set BTC_MNEMONIC or SECRET_FILE")


def get_settings() -> Settings:
    return Settings()
