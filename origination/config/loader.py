"""Layered TOML configuration.

``config/default.toml`` is merged with ``config/{ORIGINATION_ENV}.toml``.
A production configuration is refused when its files select a backend
that would let unverified applicant data through: the mock KYC provider
approves everything and the in-memory ledger loses locks on restart.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

ENVIRONMENTS = frozenset({"development", "test", "production"})

# Dotted config key -> values a production deployment must not use
PRODUCTION_FORBIDDEN: dict[str, frozenset[str]] = {
    "providers.kyc.provider": frozenset({"mock"}),
    "storage.verification": frozenset({"inmemory"}),
}


def get_config_dir() -> Path:
    """Locate the directory holding ``default.toml``.

    ORIGINATION_CONFIG_DIR wins when set. Otherwise the working directory
    and up to four parents are searched for a ``config/default.toml``.
    """
    config_dir_env = os.environ.get("ORIGINATION_CONFIG_DIR")
    if config_dir_env:
        path = Path(config_dir_env)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {config_dir_env}")
        return path

    current = Path.cwd()
    for directory in (current, *list(current.parents)[:4]):
        if (directory / "config" / "default.toml").is_file():
            return directory / "config"

    return Path("config")


def get_environment() -> str:
    """Deployment environment from ORIGINATION_ENV (default ``development``).

    Raises:
        ValueError: The name is not one of ENVIRONMENTS
    """
    env = os.environ.get("ORIGINATION_ENV", "development").strip().lower()
    if env not in ENVIRONMENTS:
        raise ValueError(
            f"Unknown ORIGINATION_ENV '{env}', expected one of {', '.join(sorted(ENVIRONMENTS))}"
        )
    return env


def load_toml(file_path: Path) -> dict[str, Any]:
    """Read one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; tables merge key by key."""
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def lookup(config: dict[str, Any], dotted_key: str) -> Any:
    """Value at ``a.b.c`` in a nested config, or None when any part is missing."""
    node: Any = config
    for part in dotted_key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def check_production(config: dict[str, Any]) -> None:
    """Raise ValueError when a production config selects a forbidden backend."""
    problems = [
        f"{key} = {lookup(config, key)!r}"
        for key, forbidden in PRODUCTION_FORBIDDEN.items()
        if lookup(config, key) in forbidden
    ]
    if problems:
        raise ValueError(f"Not allowed in production: {'; '.join(problems)}")


def load_config(environment: str | None = None) -> dict[str, Any]:
    """Load and merge the configuration files for ``environment``.

    Loading order:
    1. config/default.toml (required)
    2. config/{environment}.toml (optional)

    ``environment`` defaults to ORIGINATION_ENV.
    """
    config_dir = get_config_dir()
    env = environment or get_environment()

    default_path = config_dir / "default.toml"
    if not default_path.exists():
        raise FileNotFoundError(
            f"Default configuration file not found: {default_path}. "
            "Create config/default.toml or set ORIGINATION_CONFIG_DIR."
        )

    config = load_toml(default_path)
    env_path = config_dir / f"{env}.toml"
    if env_path.exists():
        config = deep_merge(config, load_toml(env_path))

    if env == "production":
        check_production(config)
    return config
