"""
Mode management module.

Provides mode definitions, the built-in modes and the registry operations
that merge them with custom modes.
"""

from .schema import (
    GroupEntry,
    GroupOptions,
    MODE_SCHEMA,
    ModeConfig,
    ModeValidationError,
    PromptComponent,
    ScopedGroup,
    SimpleGroup,
    get_group_name,
    get_group_options,
    parse_group_entry,
    validate_mode_config,
)
from .builtin import (
    ARCHITECT_MODE,
    ASK_MODE,
    BUILTIN_MODES,
    CODE_MODE,
    DEBUG_MODE,
    DEFAULT_MODE_SLUG,
    DEFAULT_PROMPTS,
    ORCHESTRATOR_MODE,
    REVIEWER_MODE,
    get_builtin_mode,
    get_builtin_modes,
)
from .registry import (
    ModeContextOptions,
    ModeNotFoundError,
    get_all_modes,
    get_all_modes_with_prompts,
    get_custom_instructions,
    get_mode_by_slug,
    get_mode_config,
    get_role_definition,
    is_custom_mode,
    resolve_effective_mode,
)
from .manager import ModeManager

__all__ = [
    # Schema
    "GroupEntry",
    "GroupOptions",
    "MODE_SCHEMA",
    "ModeConfig",
    "ModeValidationError",
    "PromptComponent",
    "ScopedGroup",
    "SimpleGroup",
    "get_group_name",
    "get_group_options",
    "parse_group_entry",
    "validate_mode_config",
    # Built-in modes
    "ARCHITECT_MODE",
    "ASK_MODE",
    "BUILTIN_MODES",
    "CODE_MODE",
    "DEBUG_MODE",
    "DEFAULT_MODE_SLUG",
    "DEFAULT_PROMPTS",
    "ORCHESTRATOR_MODE",
    "REVIEWER_MODE",
    "get_builtin_mode",
    "get_builtin_modes",
    # Registry
    "ModeContextOptions",
    "ModeNotFoundError",
    "get_all_modes",
    "get_all_modes_with_prompts",
    "get_custom_instructions",
    "get_mode_by_slug",
    "get_mode_config",
    "get_role_definition",
    "is_custom_mode",
    "resolve_effective_mode",
    # Manager
    "ModeManager",
]
