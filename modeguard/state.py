"""
Mode state module.

Provides the ModeState snapshot of user mode configuration (current mode,
custom modes, prompt overrides, experiment flags) and its JSON
serialization with validation. Where the JSON comes from is up to the
caller.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from .constants import STATE_VERSION
from .experiments import EXPERIMENT_IDS
from .modes.builtin import DEFAULT_MODE_SLUG
from .modes.schema import (
    ModeConfig,
    ModeValidationError,
    PromptComponent,
    validate_mode_config,
)


logger = logging.getLogger(__name__)


class StateError(Exception):
    """Raised when mode state parsing or validation fails."""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        errors: Optional[list[str]] = None,
    ):
        self.line = line
        self.column = column
        self.errors = errors or []

        if line is not None and column is not None:
            full_message = f"{message} (line {line}, column {column})"
        elif line is not None:
            full_message = f"{message} (line {line})"
        else:
            full_message = message

        super().__init__(full_message)


# JSON Schema for persisted mode state
STATE_SCHEMA = {
    "type": "object",
    "required": ["version"],
    "properties": {
        "version": {"type": "string"},
        "mode": {"type": "string"},
        "customModes": {"type": "array", "items": {"type": "object"}},
        "customModePrompts": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "roleDefinition": {"type": "string"},
                    "customInstructions": {"type": "string"},
                },
            },
        },
        "experiments": {
            "type": "object",
            "additionalProperties": {"type": "boolean"},
        },
    },
}


@dataclass
class ModeState:
    """Snapshot of a user's mode configuration.

    Attributes:
        mode: Slug of the current mode.
        custom_modes: Custom modes, overriding or extending the built-ins.
        custom_mode_prompts: Prompt overrides keyed by mode slug.
        experiments: Experiment flags keyed by experiment id.

    Example:
        state = ModeState(
            mode="architect",
            experiments={"search_and_replace": True},
        )
    """
    mode: str = DEFAULT_MODE_SLUG
    custom_modes: tuple[ModeConfig, ...] = ()
    custom_mode_prompts: dict[str, PromptComponent] = field(default_factory=dict)
    experiments: dict[str, bool] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert the state to a dictionary for serialization."""
        return {
            "version": STATE_VERSION,
            "mode": self.mode,
            "customModes": [m.to_dict() for m in self.custom_modes],
            "customModePrompts": {
                slug: component.to_dict()
                for slug, component in self.custom_mode_prompts.items()
            },
            "experiments": dict(self.experiments),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModeState":
        """Create a ModeState from an already validated dictionary.

        Raises:
            ModeValidationError: If a custom mode is invalid.
        """
        return cls(
            mode=data.get("mode", DEFAULT_MODE_SLUG),
            custom_modes=tuple(load_custom_modes(data.get("customModes", []))),
            custom_mode_prompts={
                slug: PromptComponent.from_dict(component)
                for slug, component in data.get("customModePrompts", {}).items()
            },
            experiments=dict(data.get("experiments", {})),
        )


def load_custom_modes(data: Sequence[Any]) -> list[ModeConfig]:
    """Parse already-loaded custom mode definitions.

    Args:
        data: List of mode dictionaries.

    Returns:
        The parsed modes in the order given.

    Raises:
        ModeValidationError: If any definition is invalid or two definitions
            share a slug. ``errors`` lists every problem found.
    """
    modes: list[ModeConfig] = []
    errors: list[str] = []
    seen: set[str] = set()

    for i, mode_data in enumerate(data):
        is_valid, validation_errors = validate_mode_config(mode_data)
        if not is_valid:
            errors.extend(f"Mode {i}: {error}" for error in validation_errors)
            continue

        mode = ModeConfig.from_dict(mode_data)
        if mode.slug in seen:
            errors.append(f"Mode {i}: duplicate slug '{mode.slug}'")
            continue
        seen.add(mode.slug)
        modes.append(mode)

    if errors:
        raise ModeValidationError(
            f"Invalid custom modes: {'; '.join(errors)}", errors
        )

    logger.debug(f"Loaded {len(modes)} custom modes")
    return modes


def validate_state(data: Any) -> tuple[bool, list[str]]:
    """Validate a mode state dictionary.

    Args:
        data: Dictionary containing the state to validate.

    Returns:
        A tuple of (is_valid, errors) where errors is empty if valid.
    """
    errors: list[str] = []

    if not isinstance(data, dict):
        return False, ["State must be a dictionary"]

    if "version" not in data:
        errors.append("Missing required field: 'version'")
    elif not isinstance(data["version"], str):
        errors.append("Field 'version' must be a string")

    if "mode" in data and not isinstance(data["mode"], str):
        errors.append("Field 'mode' must be a string")

    if "customModes" in data:
        custom_modes = data["customModes"]
        if not isinstance(custom_modes, list):
            errors.append("Field 'customModes' must be an array")
        else:
            slugs: set[Any] = set()
            for i, mode_data in enumerate(custom_modes):
                _, mode_errors = validate_mode_config(mode_data)
                errors.extend(f"customModes[{i}]: {error}" for error in mode_errors)
                if isinstance(mode_data, dict) and isinstance(mode_data.get("slug"), str):
                    if mode_data["slug"] in slugs:
                        errors.append(f"customModes[{i}]: duplicate slug '{mode_data['slug']}'")
                    slugs.add(mode_data["slug"])

    if "customModePrompts" in data:
        prompts = data["customModePrompts"]
        if not isinstance(prompts, dict):
            errors.append("Field 'customModePrompts' must be an object")
        else:
            for slug, component in prompts.items():
                if not isinstance(component, dict):
                    errors.append(f"Prompt override '{slug}' must be an object")
                    continue
                for key in ("roleDefinition", "customInstructions"):
                    if key in component and not isinstance(component[key], str):
                        errors.append(f"Prompt override '{slug}.{key}' must be a string")

    if "experiments" in data:
        experiments = data["experiments"]
        if not isinstance(experiments, dict):
            errors.append("Field 'experiments' must be an object")
        else:
            for key, value in experiments.items():
                if not isinstance(value, bool):
                    errors.append(f"Experiment '{key}' must be a boolean")
                if key not in EXPERIMENT_IDS:
                    logger.warning(f"Unknown experiment in state: {key}")

    return len(errors) == 0, errors


def export_state(state: ModeState) -> str:
    """Serialize a ModeState to a JSON string."""
    return json.dumps(state.to_dict(), indent=2, ensure_ascii=False)


def import_state(json_str: str) -> ModeState:
    """Deserialize a ModeState from a JSON string.

    Raises:
        StateError: If the JSON is malformed or validation fails.

    Example:
        state = import_state('{"version": "1.0", "mode": "ask"}')
    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise StateError(
            f"Invalid JSON: {e.msg}",
            line=e.lineno,
            column=e.colno,
        ) from e

    is_valid, errors = validate_state(data)
    if not is_valid:
        raise StateError(
            f"State validation failed: {'; '.join(errors)}", errors=errors
        )

    return ModeState.from_dict(data)
