"""
Constants and configuration defaults for modeguard.
"""
from pathlib import Path
from typing import Final

APP_NAME: Final[str] = "modeguard"
APP_VERSION: Final[str] = "1.0.0"
APP_DESCRIPTION: Final[str] = "Operating modes and tool permissions for AI coding assistants"

CONFIG_DIR: Final[Path] = Path.home() / ".modeguard"
GLOBAL_RULES_DIR: Final[Path] = CONFIG_DIR / "rules"

# Workspace-relative locations read by the instruction aggregator
LOCAL_CONFIG_DIR: Final[str] = ".modeguard"
LOCAL_RULES_DIR: Final[str] = ".modeguard/rules"
MODE_RULES_DIR_TEMPLATE: Final[str] = ".modeguard/rules-{slug}"
LEGACY_RULES_FILE: Final[str] = ".modeguardrules"
LEGACY_MODE_RULES_FILE_TEMPLATE: Final[str] = ".modeguardrules-{slug}"

STATE_VERSION: Final[str] = "1.0"

SLUG_PATTERN: Final[str] = r"^[a-zA-Z0-9-]+$"
MAX_SLUG_LENGTH: Final[int] = 50
MAX_NAME_LENGTH: Final[int] = 100

EXIT_ALLOWED: Final[int] = 0
EXIT_DENIED: Final[int] = 1
EXIT_PATH_VIOLATION: Final[int] = 2
EXIT_USAGE_ERROR: Final[int] = 3
