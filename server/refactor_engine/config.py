"""
Configuration management for the refactoring engine.

This module provides configuration loading with sensible defaults for
enabled refactors and fixes, formatting preferences and logging.
"""

from dataclasses import dataclass
from typing import List, Optional
import logging
import os

import yaml

logger = logging.getLogger(__name__)

QUOTE_PREFERENCES = ("auto", "double", "single")

CONFIG_NAMES = [".refactor.yml", ".refactor.yaml", "refactor.yml", "refactor.yaml"]


@dataclass
class EngineConfig:
    """Configuration for the refactoring engine."""

    # Refactor names / fix ids to offer; "*" means all registered
    enabled_refactors: List[str] = None
    enabled_code_fixes: List[str] = None

    # Formatting of generated code
    quote_preference: str = "auto"  # "auto", "double", "single"
    new_line: str = "\n"
    indent_size: int = 4

    # Extra global names the checker never reports
    globals: List[str] = None

    log_level: str = "WARNING"

    def __post_init__(self):
        if self.enabled_refactors is None:
            object.__setattr__(self, 'enabled_refactors', ["*"])
        if self.enabled_code_fixes is None:
            object.__setattr__(self, 'enabled_code_fixes', ["*"])
        if self.globals is None:
            object.__setattr__(self, 'globals', [])
        if self.quote_preference not in QUOTE_PREFERENCES:
            logger.warning(f"Unknown quote_preference '{self.quote_preference}', using 'auto'")
            object.__setattr__(self, 'quote_preference', "auto")

    def is_refactor_enabled(self, name: str) -> bool:
        return "*" in self.enabled_refactors or name in self.enabled_refactors

    def is_code_fix_enabled(self, fix_id: str) -> bool:
        return "*" in self.enabled_code_fixes or fix_id in self.enabled_code_fixes


def load_config(config_path: Optional[str] = None) -> EngineConfig:
    """
    Load configuration from file or use defaults.

    Args:
        config_path: Path to config file (YAML). If None, uses defaults.

    Returns:
        EngineConfig instance
    """
    defaults = {
        "enabled_refactors": ["*"],
        "enabled_code_fixes": ["*"],
        "quote_preference": "auto",
        "new_line": "\n",
        "indent_size": 4,
        "globals": [],
        "log_level": "WARNING",
    }

    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f) or {}

            merged_config = defaults.copy()
            merged_config.update({k: v for k, v in file_config.items() if k in defaults})

            unknown = sorted(set(file_config) - set(defaults))
            if unknown:
                logger.warning(f"Ignoring unknown config keys in {config_path}: {unknown}")

            return EngineConfig(**merged_config)

        except (OSError, yaml.YAMLError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            logger.warning("Using default configuration.")

    return EngineConfig(**defaults)


def get_default_config() -> EngineConfig:
    """Get default configuration without loading from file."""
    return load_config(None)


def save_config(config: EngineConfig, config_path: str) -> None:
    """
    Save configuration to file.

    Args:
        config: EngineConfig to save
        config_path: Path where to save the config
    """
    config_dict = {
        "enabled_refactors": config.enabled_refactors,
        "enabled_code_fixes": config.enabled_code_fixes,
        "quote_preference": config.quote_preference,
        "new_line": config.new_line,
        "indent_size": config.indent_size,
        "globals": config.globals,
        "log_level": config.log_level,
    }

    directory = os.path.dirname(config_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.dump(config_dict, f, default_flow_style=False, indent=2)


def find_config_file(start_path: str = ".") -> Optional[str]:
    """
    Find configuration file by walking up the directory tree.

    Looks for files in this order:
    1. .refactor.yml
    2. .refactor.yaml
    3. refactor.yml
    4. refactor.yaml

    Args:
        start_path: File or directory to start searching from

    Returns:
        Path to config file or None if not found
    """
    current_path = os.path.abspath(start_path)
    if os.path.isfile(current_path):
        current_path = os.path.dirname(current_path)

    while True:
        for config_name in CONFIG_NAMES:
            config_path = os.path.join(current_path, config_name)
            if os.path.exists(config_path):
                return config_path

        parent_path = os.path.dirname(current_path)
        if parent_path == current_path:
            # Reached the root directory
            break
        current_path = parent_path

    return None
