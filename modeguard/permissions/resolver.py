"""
Tool permission resolution.

Decides whether a tool may be used in a mode. ``check_tool_permission``
returns a typed decision; ``is_tool_allowed`` is the boolean form and raises
PathRestrictionViolation when an edit targets a file the mode may not write.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Union

from ..experiments import experiment_enabled, is_experiment_id
from ..modes.registry import get_mode_by_slug
from ..modes.schema import ModeConfig, get_group_name, get_group_options
from ..tools.catalog import TOOL_GROUPS, ToolGroup, is_always_available
from ..tools.params import ToolParams


logger = logging.getLogger(__name__)


# False disables every tool; a mapping disables the tools mapped to a falsy value
ToolRequirements = Union[bool, Mapping[str, Any], None]


class PathRestrictionViolation(Exception):
    """Raised when a mode edits a file outside its permitted path pattern.

    Attributes:
        mode_name: Display name of the mode.
        pattern: The file pattern of the mode's edit grant.
        description: Optional description of the restriction.
        file_path: The path the call tried to edit.
    """

    def __init__(
        self,
        mode_name: str,
        pattern: str,
        description: Optional[str],
        file_path: str,
    ):
        self.mode_name = mode_name
        self.pattern = pattern
        self.description = description
        self.file_path = file_path
        suffix = f" ({description})" if description else ""
        super().__init__(
            f"This mode ({mode_name}) can only edit files matching pattern: "
            f"{pattern}{suffix}. Got: {file_path}"
        )


class DenialReason(str, Enum):
    """Why a tool was denied."""
    EXPERIMENT_DISABLED = "experiment_disabled"
    ALL_TOOLS_DISABLED = "all_tools_disabled"
    TOOL_DISABLED = "tool_disabled"
    MODE_NOT_FOUND = "mode_not_found"
    NOT_IN_MODE = "not_in_mode"


@dataclass(frozen=True)
class Allowed:
    """The tool may be used.

    Attributes:
        group: The group entry that granted the tool, None for
            always-available tools.
    """
    group: Optional[ToolGroup] = None

    @property
    def allowed(self) -> bool:
        return True


@dataclass(frozen=True)
class Denied:
    """The tool may not be used."""
    reason: DenialReason

    @property
    def allowed(self) -> bool:
        return False


@dataclass(frozen=True)
class PathViolation:
    """The tool is granted, but not for the file the call edits."""
    mode_name: str
    pattern: str
    description: Optional[str]
    file_path: str

    @property
    def allowed(self) -> bool:
        return False

    def to_error(self) -> PathRestrictionViolation:
        """Build the matching exception."""
        return PathRestrictionViolation(
            self.mode_name, self.pattern, self.description, self.file_path
        )


PermissionDecision = Union[Allowed, Denied, PathViolation]


def does_file_match_regex(file_path: str, pattern: str) -> bool:
    """Check whether a file path matches a pattern anywhere in the path.

    A pattern that does not compile never matches.
    """
    try:
        return re.search(pattern, file_path) is not None
    except (re.error, TypeError) as e:
        logger.error(f"Invalid file pattern {pattern!r}: {e}")
        return False


def _requirements_deny(tool: str, tool_requirements: ToolRequirements) -> Optional[DenialReason]:
    if tool_requirements is False:
        return DenialReason.ALL_TOOLS_DISABLED
    if isinstance(tool_requirements, Mapping):
        if tool in tool_requirements and not tool_requirements[tool]:
            return DenialReason.TOOL_DISABLED
    return None


def _check_mode_groups(
    tool: str,
    mode: ModeConfig,
    params: ToolParams,
) -> PermissionDecision:
    for entry in mode.groups:
        group = get_group_name(entry)
        if tool not in TOOL_GROUPS[group].tools:
            continue

        options = get_group_options(entry)
        if options is None:
            return Allowed(group)

        # The first group containing the tool decides, restricted or not
        if group is ToolGroup.EDIT and options.file_regex:
            if (
                params.path
                and params.has_edit_payload
                and not does_file_match_regex(params.path, options.file_regex)
            ):
                logger.debug(
                    f"Edit of {params.path!r} rejected in mode '{mode.slug}' "
                    f"(pattern {options.file_regex!r})"
                )
                return PathViolation(
                    mode_name=mode.name,
                    pattern=options.file_regex,
                    description=options.description,
                    file_path=params.path,
                )

        return Allowed(group)

    return Denied(DenialReason.NOT_IN_MODE)


def check_tool_permission(
    tool: str,
    mode_slug: str,
    custom_modes: Optional[Sequence[ModeConfig]] = None,
    tool_requirements: ToolRequirements = None,
    tool_params: Optional[Union[ToolParams, Mapping[str, Any]]] = None,
    experiments: Optional[Mapping[str, Any]] = None,
) -> PermissionDecision:
    """Decide whether a tool may be used in a mode.

    Rules, first match wins:

    1. Always-available tools are allowed.
    2. Experimental tools are denied unless their experiment is enabled.
    3. ``tool_requirements is False`` denies every tool; a mapping with a
       falsy entry for the tool denies it.
    4. Unknown modes deny.
    5. The first group entry of the mode that contains the tool decides.
       An unrestricted entry allows. A restricted edit entry rejects a call
       that carries a path and something to write when the path does not
       match the entry's pattern; any other restricted entry allows.
    6. Tools in none of the mode's groups are denied.

    Args:
        tool: Name of the requested tool.
        mode_slug: Slug of the current mode.
        custom_modes: Caller-supplied custom modes.
        tool_requirements: Per-tool enable/disable overrides, or False.
        tool_params: Parameters of the requested call.
        experiments: Experiment flags keyed by experiment id.

    Returns:
        Allowed, Denied or PathViolation.
    """
    if is_always_available(tool):
        return Allowed()

    if is_experiment_id(tool) and not experiment_enabled(experiments, tool):
        return Denied(DenialReason.EXPERIMENT_DISABLED)

    reason = _requirements_deny(tool, tool_requirements)
    if reason is not None:
        return Denied(reason)

    mode = get_mode_by_slug(mode_slug, custom_modes)
    if mode is None:
        logger.debug(f"Tool '{tool}' denied: no mode found for slug '{mode_slug}'")
        return Denied(DenialReason.MODE_NOT_FOUND)

    if not isinstance(tool_params, ToolParams):
        tool_params = ToolParams.from_mapping(tool_params)

    return _check_mode_groups(tool, mode, tool_params)


def is_tool_allowed(
    tool: str,
    mode_slug: str,
    custom_modes: Optional[Sequence[ModeConfig]] = None,
    tool_requirements: ToolRequirements = None,
    tool_params: Optional[Union[ToolParams, Mapping[str, Any]]] = None,
    experiments: Optional[Mapping[str, Any]] = None,
) -> bool:
    """Check whether a tool may be used in a mode.

    Same rules as ``check_tool_permission``.

    Returns:
        True if allowed, False if denied.

    Raises:
        PathRestrictionViolation: If the mode's edit grant does not cover
            the file the call writes to.
    """
    decision = check_tool_permission(
        tool,
        mode_slug,
        custom_modes,
        tool_requirements=tool_requirements,
        tool_params=tool_params,
        experiments=experiments,
    )
    if isinstance(decision, PathViolation):
        raise decision.to_error()
    return decision.allowed
