"""
Mode configuration schema and validation.

Provides the ModeConfig dataclass, the group entry variants a mode grants
its tool groups through, and validation for persisted mode definitions.
"""

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

from ..constants import MAX_NAME_LENGTH, MAX_SLUG_LENGTH, SLUG_PATTERN
from ..tools.catalog import ToolGroup, VALID_TOOL_GROUPS


class ModeValidationError(Exception):
    """Raised when mode configuration validation fails."""

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = errors or []


@dataclass(frozen=True)
class GroupOptions:
    """Scoping attached to a group grant.

    Attributes:
        file_regex: Regular expression a file path must match for the edit
            group's tools to write to it.
        description: Human-readable description of the restriction.
    """
    file_regex: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GroupOptions":
        """Create GroupOptions from a persisted options object."""
        return cls(
            file_regex=_get(data, "fileRegex", "file_regex"),
            description=data.get("description"),
        )

    def to_dict(self) -> dict[str, str]:
        """Convert to the persisted options object, omitting unset fields."""
        data: dict[str, str] = {}
        if self.file_regex is not None:
            data["fileRegex"] = self.file_regex
        if self.description is not None:
            data["description"] = self.description
        return data


@dataclass(frozen=True)
class SimpleGroup:
    """Unrestricted grant of a tool group."""
    group: ToolGroup


@dataclass(frozen=True)
class ScopedGroup:
    """Grant of a tool group restricted by options."""
    group: ToolGroup
    options: GroupOptions


GroupEntry = Union[SimpleGroup, ScopedGroup]


def get_group_name(entry: GroupEntry) -> ToolGroup:
    """Get the group id of an entry regardless of its variant."""
    return entry.group


def get_group_options(entry: GroupEntry) -> Optional[GroupOptions]:
    """Get the options of an entry, or None for an unrestricted grant."""
    if isinstance(entry, ScopedGroup):
        return entry.options
    return None


def _to_tool_group(value: Any) -> ToolGroup:
    try:
        return ToolGroup(value)
    except ValueError:
        raise ModeValidationError(
            f"Unknown tool group '{value}'. "
            f"Valid values are: {', '.join(sorted(VALID_TOOL_GROUPS))}"
        ) from None


def parse_group_entry(raw: Any) -> GroupEntry:
    """Normalize any accepted group entry shape into a GroupEntry.

    Accepted shapes are an existing entry, a ``ToolGroup`` member or its
    string value, and a two-item sequence of group and options (a
    ``GroupOptions`` or a persisted options object).

    Raises:
        ModeValidationError: If the shape or the group id is invalid.
    """
    if isinstance(raw, (SimpleGroup, ScopedGroup)):
        return raw

    if isinstance(raw, str):
        return SimpleGroup(_to_tool_group(raw))

    if isinstance(raw, Sequence) and len(raw) == 2:
        group = _to_tool_group(raw[0])
        options = raw[1]
        if isinstance(options, GroupOptions):
            return ScopedGroup(group, options)
        if isinstance(options, Mapping):
            return ScopedGroup(group, GroupOptions.from_dict(options))
        raise ModeValidationError(
            f"Options of group '{group.value}' must be an object, got {type(options).__name__}"
        )

    raise ModeValidationError(f"Invalid group entry: {raw!r}")


def group_entry_to_raw(entry: GroupEntry) -> Union[str, list[Any]]:
    """Convert a GroupEntry to its persisted shape."""
    if isinstance(entry, ScopedGroup):
        return [entry.group.value, entry.options.to_dict()]
    return entry.group.value


@dataclass(frozen=True)
class ModeConfig:
    """Configuration for an operating mode.

    Modes bundle the role text and instructions the assistant works under
    with the tool groups it may use (e.g. "code", "ask", "architect").

    Attributes:
        slug: Unique identifier for the mode.
        name: Human-readable display name.
        role_definition: Description of the assistant's role in this mode.
        groups: Tool group entries granted by the mode, in declaration
            order. The order decides which entry applies when several
            groups contain the same tool.
        custom_instructions: Additional instructions for this mode.

    Example:
        docs_mode = ModeConfig(
            slug="docs",
            name="Docs Writer",
            role_definition="You are a technical writer...",
            groups=["read", ("edit", {"fileRegex": r"\\.md$"})],
        )
    """
    slug: str
    name: str
    role_definition: str
    groups: tuple[GroupEntry, ...] = ()
    custom_instructions: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "groups", tuple(parse_group_entry(g) for g in self.groups)
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert the mode config to its persisted dictionary shape."""
        data: dict[str, Any] = {
            "slug": self.slug,
            "name": self.name,
            "roleDefinition": self.role_definition,
            "groups": [group_entry_to_raw(g) for g in self.groups],
        }
        if self.custom_instructions is not None:
            data["customInstructions"] = self.custom_instructions
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModeConfig":
        """Create a ModeConfig from a dictionary.

        Both the persisted camelCase keys and snake_case keys are accepted.

        Raises:
            ModeValidationError: If a required field is missing or a group
                entry is invalid.
        """
        missing = [
            name for name, keys in _REQUIRED_FIELDS.items()
            if not any(key in data for key in keys)
        ]
        if missing:
            raise ModeValidationError(
                f"Missing required field(s): {', '.join(missing)}",
                [f"Missing required field: '{name}'" for name in missing],
            )

        return cls(
            slug=data["slug"],
            name=data["name"],
            role_definition=_get(data, "roleDefinition", "role_definition"),
            groups=tuple(data["groups"]),
            custom_instructions=_get(data, "customInstructions", "custom_instructions"),
        )


@dataclass(frozen=True)
class PromptComponent:
    """Caller-supplied override of a mode's prompt texts."""
    role_definition: Optional[str] = None
    custom_instructions: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PromptComponent":
        """Create a PromptComponent from camelCase or snake_case keys."""
        return cls(
            role_definition=_get(data, "roleDefinition", "role_definition"),
            custom_instructions=_get(data, "customInstructions", "custom_instructions"),
        )

    def to_dict(self) -> dict[str, str]:
        """Convert to the persisted shape, omitting unset fields."""
        data: dict[str, str] = {}
        if self.role_definition is not None:
            data["roleDefinition"] = self.role_definition
        if self.custom_instructions is not None:
            data["customInstructions"] = self.custom_instructions
        return data


# Prompt overrides keyed by mode slug
CustomModePrompts = Mapping[str, PromptComponent]


def _get(data: Mapping[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    if camel in data:
        return data[camel]
    return data.get(snake, default)


_REQUIRED_FIELDS = {
    "slug": ("slug",),
    "name": ("name",),
    "roleDefinition": ("roleDefinition", "role_definition"),
    "groups": ("groups",),
}

_KNOWN_FIELDS = frozenset({
    "slug",
    "name",
    "roleDefinition",
    "role_definition",
    "groups",
    "customInstructions",
    "custom_instructions",
})


# JSON Schema for persisted mode definitions
MODE_SCHEMA = {
    "type": "object",
    "required": ["slug", "name", "roleDefinition", "groups"],
    "properties": {
        "slug": {
            "type": "string",
            "pattern": SLUG_PATTERN,
            "minLength": 1,
            "maxLength": MAX_SLUG_LENGTH,
        },
        "name": {
            "type": "string",
            "minLength": 1,
            "maxLength": MAX_NAME_LENGTH,
        },
        "roleDefinition": {
            "type": "string",
            "minLength": 1,
        },
        "customInstructions": {
            "type": "string",
        },
        "groups": {
            "type": "array",
            "items": {
                "oneOf": [
                    {"type": "string", "enum": sorted(VALID_TOOL_GROUPS)},
                    {
                        "type": "array",
                        "minItems": 2,
                        "maxItems": 2,
                        "prefixItems": [
                            {"type": "string", "enum": sorted(VALID_TOOL_GROUPS)},
                            {
                                "type": "object",
                                "properties": {
                                    "fileRegex": {"type": "string"},
                                    "description": {"type": "string"},
                                },
                            },
                        ],
                    },
                ],
            },
        },
    },
    "additionalProperties": False,
}


def validate_mode_config(data: Any) -> tuple[bool, list[str]]:
    """Validate a persisted mode configuration dictionary.

    Checks that required fields are present with the right types, that the
    slug matches the allowed pattern, that every group entry names a known
    group at most once, and that file patterns compile.

    Args:
        data: Dictionary containing the mode configuration to validate.

    Returns:
        A tuple of (is_valid, errors) where errors is empty if valid.

    Example:
        is_valid, errors = validate_mode_config({
            "slug": "docs",
            "name": "Docs",
            "roleDefinition": "You write documentation.",
            "groups": ["read"],
        })
    """
    errors: list[str] = []

    if not isinstance(data, Mapping):
        return False, ["Configuration must be a dictionary"]

    for field_name, keys in _REQUIRED_FIELDS.items():
        if not any(key in data for key in keys):
            errors.append(f"Missing required field: '{field_name}'")

    if errors:
        return False, errors

    slug = data["slug"]
    if not isinstance(slug, str):
        errors.append("Field 'slug' must be a string")
    elif not slug:
        errors.append("Field 'slug' must not be empty")
    elif len(slug) > MAX_SLUG_LENGTH:
        errors.append(f"Field 'slug' must be at most {MAX_SLUG_LENGTH} characters")
    elif not re.fullmatch(SLUG_PATTERN, slug):
        errors.append("Field 'slug' must contain only letters, numbers, and dashes")

    name = data["name"]
    if not isinstance(name, str):
        errors.append("Field 'name' must be a string")
    elif not name:
        errors.append("Field 'name' must not be empty")
    elif len(name) > MAX_NAME_LENGTH:
        errors.append(f"Field 'name' must be at most {MAX_NAME_LENGTH} characters")

    role_def = _get(data, "roleDefinition", "role_definition")
    if not isinstance(role_def, str):
        errors.append("Field 'roleDefinition' must be a string")
    elif not role_def:
        errors.append("Field 'roleDefinition' must not be empty")

    instructions = _get(data, "customInstructions", "custom_instructions")
    if instructions is not None and not isinstance(instructions, str):
        errors.append("Field 'customInstructions' must be a string")

    groups = data["groups"]
    if not isinstance(groups, (list, tuple)):
        errors.append("Field 'groups' must be an array")
    else:
        errors.extend(_validate_groups(groups))

    unknown_fields = set(data.keys()) - _KNOWN_FIELDS
    if unknown_fields:
        errors.append(f"Unknown fields: {', '.join(sorted(map(str, unknown_fields)))}")

    return len(errors) == 0, errors


def _validate_groups(groups: Sequence[Any]) -> list[str]:
    errors: list[str] = []
    seen: set[ToolGroup] = set()

    for i, raw in enumerate(groups):
        try:
            entry = parse_group_entry(raw)
        except ModeValidationError as e:
            errors.append(f"Field 'groups[{i}]': {e}")
            continue

        if entry.group in seen:
            errors.append(f"Field 'groups[{i}]': duplicate group '{entry.group.value}'")
        seen.add(entry.group)

        options = get_group_options(entry)
        if options is None:
            continue
        if options.file_regex is not None:
            if not isinstance(options.file_regex, str):
                errors.append(f"Field 'groups[{i}].fileRegex' must be a string")
            else:
                try:
                    re.compile(options.file_regex)
                except re.error as e:
                    errors.append(
                        f"Field 'groups[{i}].fileRegex' is not a valid regular expression: {e}"
                    )
        if options.description is not None and not isinstance(options.description, str):
            errors.append(f"Field 'groups[{i}].description' must be a string")

    return errors
