"""Configuration loader for snipmate.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .core.extract import DEFAULT_TAG
from .settings import DEFAULT_DOCUMENT_PATH

CONFIG_FILE_NAME = "snipmate.toml"


@dataclass
class VaultConfig:
    """Vault-specific configuration."""
    root: Path
    settings: Path


@dataclass
class SnippetsConfig:
    """Snippet document configuration."""
    document: str = DEFAULT_DOCUMENT_PATH
    tag: str = DEFAULT_TAG


@dataclass
class WatchConfig:
    """Watch mode configuration."""
    debounce_ms: int = 150


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "WARNING"


@dataclass
class SnipConfig:
    """Complete snipmate configuration."""
    vault: VaultConfig
    snippets: SnippetsConfig
    watch: WatchConfig
    log: LogConfig


def load_config(config_path: Path | None = None, vault_path: Path | None = None) -> SnipConfig:
    """
    Load configuration from snipmate.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/snipmate.toml
    3. vault_path/snipmate.toml

    Args:
        config_path: Explicit path to config file
        vault_path: Vault root path for fallback search

    Returns:
        SnipConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_FILE_NAME)
    if vault_path:
        search_paths.append(vault_path / CONFIG_FILE_NAME)

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    vault_data = toml_data.get("vault", {})
    vault_root = Path(vault_path or vault_data.get("root", "./vault"))
    settings_path = Path(
        vault_data.get("settings", vault_root / ".snipmate" / "data.json")
    )
    vault_config = VaultConfig(root=vault_root, settings=settings_path)

    snippets_data = toml_data.get("snippets", {})
    snippets_config = SnippetsConfig(
        document=snippets_data.get("document", DEFAULT_DOCUMENT_PATH),
        tag=snippets_data.get("tag", DEFAULT_TAG),
    )

    watch_data = toml_data.get("watch", {})
    watch_config = WatchConfig(debounce_ms=int(watch_data.get("debounce_ms", 150)))

    log_data = toml_data.get("log", {})
    log_config = LogConfig(level=str(log_data.get("level", "WARNING")).upper())

    return SnipConfig(
        vault=vault_config,
        snippets=snippets_config,
        watch=watch_config,
        log=log_config,
    )
