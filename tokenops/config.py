"""
Settings loaded from the environment.

Environment Variables:
    TOKENOPS_HOME: State and ledger root directory - default: ~/.tokenops
    TOKENOPS_NETWORK: mainnet, testnet, previewnet, localnet - default: testnet
    TOKENOPS_KEY_ALGORITHM: ecdsa, ed25519 - default: ecdsa
    TOKENOPS_TOKEN_INPUT_DIR: Directory of token.<name>.json files - default: ./input
    TOKENOPS_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR - default: WARNING
    TOKENOPS_LOG_FORMAT: json, text - default: text
    <NETWORK>_OPERATOR_ID / <NETWORK>_OPERATOR_KEY: default operator bootstrap
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from .core.errors import ConfigurationError
from .core.models import SUPPORTED_NETWORKS

KEY_ALGORITHMS = ("ecdsa", "ed25519")
LOG_FORMATS = ("json", "text")


def get_default_home() -> Path:
    """Default state root (~/.tokenops)."""
    return Path.home() / ".tokenops"


@dataclass(frozen=True)
class Settings:
    home: Path
    network: str = "testnet"
    key_algorithm: str = "ecdsa"
    token_input_dir: Optional[Path] = None
    log_level: str = "WARNING"
    log_format: str = "text"

    def __post_init__(self) -> None:
        if self.network not in SUPPORTED_NETWORKS:
            raise ConfigurationError(
                f"Unsupported network: {self.network} (expected one of {', '.join(SUPPORTED_NETWORKS)})"
            )
        if self.key_algorithm not in KEY_ALGORITHMS:
            raise ConfigurationError(f"Unsupported key algorithm: {self.key_algorithm}")
        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(f"Unsupported log format: {self.log_format}")

    @classmethod
    def from_env(cls, network: Optional[str] = None) -> "Settings":
        home = os.getenv("TOKENOPS_HOME")
        input_dir = os.getenv("TOKENOPS_TOKEN_INPUT_DIR")
        return cls(
            home=Path(home).expanduser() if home else get_default_home(),
            network=(network or os.getenv("TOKENOPS_NETWORK", "testnet")).strip().lower(),
            key_algorithm=os.getenv("TOKENOPS_KEY_ALGORITHM", "ecdsa").strip().lower(),
            token_input_dir=Path(input_dir).expanduser() if input_dir and input_dir.strip() else None,
            log_level=os.getenv("TOKENOPS_LOG_LEVEL", "WARNING").upper(),
            log_format=os.getenv("TOKENOPS_LOG_FORMAT", "text").lower(),
        )

    @property
    def state_dir(self) -> Path:
        return self.home / "state"

    @property
    def ledger_dir(self) -> Path:
        return self.home / "ledger"

    @property
    def input_dir(self) -> Path:
        return self.token_input_dir or Path.cwd() / "input"


def operator_from_env(network: str) -> Optional[Tuple[str, str]]:
    """
    Read (account_id, private_key) for network from <NETWORK>_OPERATOR_ID/KEY.

    Returns:
        Tuple or None when either variable is unset
    """
    prefix = network.upper()
    account_id = os.getenv(f"{prefix}_OPERATOR_ID")
    private_key = os.getenv(f"{prefix}_OPERATOR_KEY")
    if account_id and private_key:
        return account_id.strip(), private_key.strip()
    return None
