"""Configuration loading and validation for ticketfee."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any

from .constants import (
    DEFAULT_BLOCKS_TO_AVG,
    DEFAULT_FEE_SOURCE,
    DEFAULT_FEE_TARGET_SCALING,
    DEFAULT_HTTP_TIMEOUT_SECS,
    DEFAULT_LOG_BACKUP_COUNT,
    DEFAULT_LOG_MAX_BYTES,
    DEFAULT_MAX_FEE_ATOMS,
    DEFAULT_MIN_FEE_ATOMS,
    DEFAULT_NETWORK,
    DEFAULT_RPC_URL,
    FEE_SOURCES,
    WINDOWS_TO_CONSIDER,
)
from .networks import NetParams, get_network


class Config:
    """Configuration container with environment variable overrides."""

    def __init__(self, config_path: str = None, create_if_missing: bool = True):
        """
        Load configuration from YAML file with environment variable overrides.

        Configuration precedence (highest to lowest):
        1. Environment variables (TF_* prefix)
        2. config.local.yaml (if exists, local overrides)
        3. config.yaml (main config file)
        4. Default values

        Args:
            config_path: Path to config.yaml. If None, searches for config.yaml
                        in current directory and parent directories.
            create_if_missing: If True and config_path is None, create default config
                              if not found. If config_path is explicitly provided,
                              this is ignored (file must exist).
        """
        if config_path is None:
            config_path = self._find_config_file()
            config_file_path = Path(config_path)
            # Only create default if auto-discovered and missing
            if create_if_missing and not config_file_path.exists():
                self._create_default_config(config_path)
        else:
            # Explicit path provided - must exist
            config_file_path = Path(config_path)
            if not config_file_path.exists():
                raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, 'r') as f:
            self._raw = yaml.safe_load(f) or {}

        # config.local.yaml is gitignored and holds RPC credentials
        local_config_path = Path(config_path).parent / "config.local.yaml"
        if local_config_path.exists():
            with open(local_config_path, 'r') as f:
                local_config = yaml.safe_load(f) or {}
                self._deep_merge(self._raw, local_config)

        self._apply_env_overrides()
        self._validate()

    def _find_config_file(self) -> str:
        """Find config.yaml in current directory or parents."""
        current = Path.cwd()
        for path in [current] + list(current.parents):
            config_file = path / "config.yaml"
            if config_file.exists():
                return str(config_file)
        return str(current / "config.yaml")

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        """Recursively merge override dict into base dict."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _create_default_config(self, path: str):
        """Create a default config.yaml file."""
        default_config = {
            "rpc": {
                "url": DEFAULT_RPC_URL,
                "user": "",
                "password": "",
                "timeout_secs": DEFAULT_HTTP_TIMEOUT_SECS,
                "verify_tls": True
            },
            "network": DEFAULT_NETWORK,
            "fees": {
                "fee_source": DEFAULT_FEE_SOURCE,
                "blocks_to_avg": DEFAULT_BLOCKS_TO_AVG,
                "windows_to_consider": WINDOWS_TO_CONSIDER,
                "min_fee": DEFAULT_MIN_FEE_ATOMS,
                "max_fee": DEFAULT_MAX_FEE_ATOMS,
                "fee_target_scaling": DEFAULT_FEE_TARGET_SCALING
            },
            "logging": {
                "level": "INFO",
                "log_dir": "logs",
                "console_level": "INFO",
                "rotation": {
                    "max_bytes": DEFAULT_LOG_MAX_BYTES,
                    "backup_count": DEFAULT_LOG_BACKUP_COUNT,
                    "when": "midnight"
                }
            }
        }
        with open(path, 'w') as f:
            yaml.dump(default_config, f, default_flow_style=False, sort_keys=False)

    def _apply_env_overrides(self):
        """Apply environment variable overrides using TF_ prefix."""
        # RPC settings
        if os.getenv("TF_RPC_URL"):
            self._raw.setdefault("rpc", {})["url"] = os.getenv("TF_RPC_URL")
        if os.getenv("TF_RPC_USER"):
            self._raw.setdefault("rpc", {})["user"] = os.getenv("TF_RPC_USER")
        if os.getenv("TF_RPC_PASS"):
            self._raw.setdefault("rpc", {})["password"] = os.getenv("TF_RPC_PASS")
        if os.getenv("TF_RPC_TIMEOUT"):
            self._raw.setdefault("rpc", {})["timeout_secs"] = float(os.getenv("TF_RPC_TIMEOUT"))
        if os.getenv("TF_RPC_VERIFY_TLS"):
            verify = os.getenv("TF_RPC_VERIFY_TLS")
            # "true"/"false", or a path to the daemon's CA certificate
            if verify.lower() in ("true", "false"):
                verify = verify.lower() == "true"
            self._raw.setdefault("rpc", {})["verify_tls"] = verify
        if os.getenv("TF_NETWORK"):
            self._raw["network"] = os.getenv("TF_NETWORK")

        # Fee settings
        if os.getenv("TF_FEE_SOURCE"):
            self._raw.setdefault("fees", {})["fee_source"] = os.getenv("TF_FEE_SOURCE")
        if os.getenv("TF_BLOCKS_TO_AVG"):
            self._raw.setdefault("fees", {})["blocks_to_avg"] = int(os.getenv("TF_BLOCKS_TO_AVG"))
        if os.getenv("TF_WINDOWS_TO_CONSIDER"):
            self._raw.setdefault("fees", {})["windows_to_consider"] = int(os.getenv("TF_WINDOWS_TO_CONSIDER"))
        if os.getenv("TF_MIN_FEE"):
            self._raw.setdefault("fees", {})["min_fee"] = int(os.getenv("TF_MIN_FEE"))
        if os.getenv("TF_MAX_FEE"):
            self._raw.setdefault("fees", {})["max_fee"] = int(os.getenv("TF_MAX_FEE"))
        if os.getenv("TF_FEE_TARGET_SCALING"):
            self._raw.setdefault("fees", {})["fee_target_scaling"] = float(os.getenv("TF_FEE_TARGET_SCALING"))

        # Logging settings
        if os.getenv("TF_LOG_DIR"):
            self._raw.setdefault("logging", {})["log_dir"] = os.getenv("TF_LOG_DIR")
        if os.getenv("TF_LOG_LEVEL"):
            self._raw.setdefault("logging", {})["level"] = os.getenv("TF_LOG_LEVEL")
        if os.getenv("TF_CONSOLE_LEVEL"):
            self._raw.setdefault("logging", {})["console_level"] = os.getenv("TF_CONSOLE_LEVEL")

    def _validate(self):
        """Validate and normalize configuration values."""
        get_network(self.network_name)
        if self.fee_source not in FEE_SOURCES:
            raise ValueError(
                f"Invalid fee_source {self.fee_source!r} (expected one of: {', '.join(FEE_SOURCES)})"
            )
        if self.blocks_to_avg <= 0:
            raise ValueError(f"blocks_to_avg must be positive, got {self.blocks_to_avg}")
        if self.windows_to_consider <= 0:
            raise ValueError(f"windows_to_consider must be positive, got {self.windows_to_consider}")
        if self.min_fee < 0:
            raise ValueError(f"min_fee must not be negative, got {self.min_fee}")
        if self.max_fee < 0:
            raise ValueError(f"max_fee must not be negative, got {self.max_fee}")
        if self.fee_target_scaling < 0:
            raise ValueError(f"fee_target_scaling must not be negative, got {self.fee_target_scaling}")
        if self.max_fee and self.max_fee < self.min_fee:
            raise ValueError(f"max_fee ({self.max_fee}) is below min_fee ({self.min_fee})")

    @property
    def rpc_url(self) -> str:
        return self._raw.get("rpc", {}).get("url", DEFAULT_RPC_URL)

    @property
    def rpc_user(self) -> str:
        return self._raw.get("rpc", {}).get("user", "")

    @property
    def rpc_password(self) -> str:
        return self._raw.get("rpc", {}).get("password", "")

    @property
    def rpc_timeout_secs(self) -> float:
        return float(self._raw.get("rpc", {}).get("timeout_secs", DEFAULT_HTTP_TIMEOUT_SECS))

    @property
    def rpc_verify_tls(self):
        """True, False, or a path to a CA bundle for the daemon's certificate."""
        return self._raw.get("rpc", {}).get("verify_tls", True)

    @property
    def network_name(self) -> str:
        return str(self._raw.get("network", DEFAULT_NETWORK))

    @property
    def net_params(self) -> NetParams:
        return get_network(self.network_name)

    @property
    def fee_source(self) -> str:
        return str(self._raw.get("fees", {}).get("fee_source", DEFAULT_FEE_SOURCE)).lower()

    @property
    def use_median(self) -> bool:
        return self.fee_source == "median"

    @property
    def blocks_to_avg(self) -> int:
        return int(self._raw.get("fees", {}).get("blocks_to_avg", DEFAULT_BLOCKS_TO_AVG))

    @property
    def windows_to_consider(self) -> int:
        return int(self._raw.get("fees", {}).get("windows_to_consider", WINDOWS_TO_CONSIDER))

    @property
    def min_fee(self) -> int:
        return int(self._raw.get("fees", {}).get("min_fee", DEFAULT_MIN_FEE_ATOMS))

    @property
    def max_fee(self) -> int:
        return int(self._raw.get("fees", {}).get("max_fee", DEFAULT_MAX_FEE_ATOMS))

    @property
    def fee_target_scaling(self) -> float:
        return float(self._raw.get("fees", {}).get("fee_target_scaling", DEFAULT_FEE_TARGET_SCALING))

    @property
    def log_level(self) -> str:
        return self._raw.get("logging", {}).get("level", "INFO")

    @property
    def log_dir(self) -> str:
        return self._raw.get("logging", {}).get("log_dir", "logs")

    @property
    def console_level(self) -> str:
        return self._raw.get("logging", {}).get("console_level", "INFO")

    @property
    def log_rotation(self) -> Dict[str, Any]:
        """Get log rotation configuration with defaults."""
        rotation = self._raw.get("logging", {}).get("rotation", {})
        return {
            "max_bytes": rotation.get("max_bytes", DEFAULT_LOG_MAX_BYTES),
            "backup_count": rotation.get("backup_count", DEFAULT_LOG_BACKUP_COUNT),
            "when": rotation.get("when", "midnight")
        }
