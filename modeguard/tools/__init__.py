"""
Tool catalog module.

Provides the tool groups, the always-available tools and tool definitions.
"""

from .catalog import (
    ALWAYS_AVAILABLE_TOOLS,
    REVIEWER_TOOL,
    TOOL_GROUPS,
    VALID_TOOL_GROUPS,
    ToolCatalog,
    ToolDefinition,
    ToolGroup,
    ToolGroupDefinition,
    get_tools_for_mode,
    group_for_tool,
    is_always_available,
    tools_for_group,
)
from .params import ToolParams

__all__ = [
    "ALWAYS_AVAILABLE_TOOLS",
    "REVIEWER_TOOL",
    "TOOL_GROUPS",
    "VALID_TOOL_GROUPS",
    "ToolCatalog",
    "ToolDefinition",
    "ToolGroup",
    "ToolGroupDefinition",
    "ToolParams",
    "get_tools_for_mode",
    "group_for_tool",
    "is_always_available",
    "tools_for_group",
]
