"""
Permission resolution module.

Decides whether a tool may be used in a mode.
"""

from .resolver import (
    Allowed,
    Denied,
    DenialReason,
    PathRestrictionViolation,
    PathViolation,
    PermissionDecision,
    ToolRequirements,
    check_tool_permission,
    does_file_match_regex,
    is_tool_allowed,
)

__all__ = [
    "Allowed",
    "Denied",
    "DenialReason",
    "PathRestrictionViolation",
    "PathViolation",
    "PermissionDecision",
    "ToolRequirements",
    "check_tool_permission",
    "does_file_match_regex",
    "is_tool_allowed",
]
