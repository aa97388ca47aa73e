"""
Tool group catalog.

Maps each tool group to the primitive tools it authorizes, lists the tools
that every mode gets regardless of its groups, and provides the ToolCatalog
for filtering tool definitions against a mode.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Sequence


class ToolGroup(str, Enum):
    """Identifiers of the tool groups a mode can grant."""
    READ = "read"
    EDIT = "edit"
    BROWSER = "browser"
    COMMAND = "command"
    MCP = "mcp"
    MODES = "modes"
    REVIEW = "review"


@dataclass(frozen=True)
class ToolGroupDefinition:
    """The tools a group authorizes.

    Attributes:
        tools: Tool names granted by the group.
        always_available: True if the group's tools are granted in every mode.
    """
    tools: tuple[str, ...]
    always_available: bool = False


TOOL_GROUPS: Mapping[ToolGroup, ToolGroupDefinition] = MappingProxyType({
    ToolGroup.READ: ToolGroupDefinition(
        tools=(
            "read_file",
            "fetch_instructions",
            "search_files",
            "list_files",
            "list_code_definition_names",
        ),
    ),
    ToolGroup.EDIT: ToolGroupDefinition(
        tools=("apply_diff", "write_to_file", "insert_content", "search_and_replace"),
    ),
    ToolGroup.BROWSER: ToolGroupDefinition(tools=("browser_action",)),
    ToolGroup.COMMAND: ToolGroupDefinition(tools=("execute_command",)),
    ToolGroup.MCP: ToolGroupDefinition(tools=("use_mcp_tool", "access_mcp_resource")),
    ToolGroup.MODES: ToolGroupDefinition(
        tools=("switch_mode", "new_task"),
        always_available=True,
    ),
    ToolGroup.REVIEW: ToolGroupDefinition(tools=("reviewer",)),
})

ALWAYS_AVAILABLE_TOOLS: tuple[str, ...] = (
    "ask_followup_question",
    "attempt_completion",
    "switch_mode",
    "new_task",
)

VALID_TOOL_GROUPS: frozenset[str] = frozenset(g.value for g in ToolGroup)


def tools_for_group(group: ToolGroup) -> tuple[str, ...]:
    """Get the tools authorized by a group.

    Args:
        group: The group id (``ToolGroup`` member or its string value).

    Returns:
        The group's tool names in declaration order.

    Raises:
        KeyError: If the group id is unknown.
    """
    try:
        return TOOL_GROUPS[ToolGroup(group)].tools
    except ValueError:
        raise KeyError(f"Unknown tool group: {group!r}") from None


def is_always_available(tool: str) -> bool:
    """Check whether a tool is granted in every mode."""
    return tool in ALWAYS_AVAILABLE_TOOLS


def group_for_tool(tool: str) -> Optional[ToolGroup]:
    """Get the first group that lists a tool, or None for unknown tools."""
    for group, definition in TOOL_GROUPS.items():
        if tool in definition.tools:
            return group
    return None


def get_tools_for_mode(groups: Iterable[Any]) -> list[str]:
    """Get every tool a set of group entries grants.

    The result is the de-duplicated union of the tools of each referenced
    group plus the always-available tools. Callers should treat it as a set;
    first-seen order is kept only for stable display.

    Args:
        groups: Group entries of a mode (any shape ``parse_group_entry``
            accepts).

    Returns:
        List of tool names.
    """
    from ..modes.schema import get_group_name, parse_group_entry

    tools: dict[str, None] = {}
    for entry in groups:
        group = get_group_name(parse_group_entry(entry))
        for tool in TOOL_GROUPS[group].tools:
            tools.setdefault(tool, None)

    for tool in ALWAYS_AVAILABLE_TOOLS:
        tools.setdefault(tool, None)

    return list(tools)


@dataclass
class ToolDefinition:
    """Definition of a tool offered to the model.

    Attributes:
        name: Unique identifier for the tool.
        description: Human-readable description of what the tool does.
        parameters: JSON schema for the tool's parameters.
        group: Tool group the tool belongs to, None for tools outside the
            catalog (always-available tools included).
        enabled: Whether the tool is currently enabled.
    """
    name: str
    description: str
    parameters: dict[str, Any] = field(default_factory=dict)
    group: Optional[ToolGroup] = None
    enabled: bool = True

    @classmethod
    def from_openai_format(cls, tool_dict: dict[str, Any]) -> "ToolDefinition":
        """Create a ToolDefinition from OpenAI-style tool format.

        The group is looked up from the catalog by tool name.
        """
        func = tool_dict.get("function", {})
        name = func.get("name", "")
        return cls(
            name=name,
            description=func.get("description", ""),
            parameters=func.get("parameters", {}),
            group=group_for_tool(name),
            enabled=True,
        )

    def to_openai_format(self) -> dict[str, Any]:
        """Convert this ToolDefinition to OpenAI-style tool format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            }
        }


REVIEW_FOCUS_VALUES: tuple[str, ...] = (
    "design",
    "implementation",
    "security",
    "performance",
    "general",
)

REVIEWER_TOOL = ToolDefinition(
    name="reviewer",
    description=(
        "Conducts code or design reviews. The context file describes the intent, "
        "the material under review and the questions to answer; feedback is "
        "written to the output file."
    ),
    parameters={
        "type": "object",
        "required": ["context_file_path", "output_file_path"],
        "properties": {
            "context_file_path": {
                "type": "string",
                "description": "Path to the file containing context for the review",
            },
            "difficulty": {
                "type": "integer",
                "description": "Rating from 1-10 of the complexity of what is being reviewed",
                "minimum": 1,
                "maximum": 10,
            },
            "review_focus": {
                "type": "string",
                "description": "Area to focus the review on",
                "enum": list(REVIEW_FOCUS_VALUES),
            },
            "output_file_path": {
                "type": "string",
                "description": "Path where the review feedback will be written",
            },
        },
    },
    group=ToolGroup.REVIEW,
)


class ToolCatalog:
    """Collection of tool definitions with per-tool enable/disable switches.

    The catalog is the source of the per-tool requirement overrides consumed
    by the permission resolver, and can filter its definitions down to the
    ones a mode allows.

    Example:
        catalog = ToolCatalog([REVIEWER_TOOL])
        catalog.disable_tool("reviewer")
        catalog.tool_requirements()      # {"reviewer": False}
        catalog.filter_for_mode("code")  # []
    """

    def __init__(self, tools: Optional[Sequence[ToolDefinition]] = None) -> None:
        self._tools: list[ToolDefinition] = list(tools) if tools else []
        self._disabled_tools: set[str] = set()

    def add_tool(self, tool: ToolDefinition) -> None:
        """Add a tool to the catalog."""
        self._tools.append(tool)

    def add_mcp_tool(self, mcp_tool: dict[str, Any]) -> None:
        """Add an MCP server tool to the catalog.

        MCP server tools are invoked through ``use_mcp_tool`` and therefore
        belong to the mcp group.
        """
        self._tools.append(ToolDefinition(
            name=mcp_tool.get("name", ""),
            description=mcp_tool.get("description", ""),
            parameters=mcp_tool.get("inputSchema", {}),
            group=ToolGroup.MCP,
            enabled=True,
        ))

    def disable_tool(self, name: str) -> None:
        """Disable a tool by name."""
        self._disabled_tools.add(name)

    def enable_tool(self, name: str) -> None:
        """Enable a previously disabled tool."""
        self._disabled_tools.discard(name)

    def is_tool_disabled(self, name: str) -> bool:
        """Check if a tool is disabled."""
        return name in self._disabled_tools

    @property
    def tools(self) -> list[ToolDefinition]:
        """Get all tools in the catalog."""
        return list(self._tools)

    @property
    def disabled_tools(self) -> set[str]:
        """Get the set of disabled tool names."""
        return set(self._disabled_tools)

    def tool_requirements(self) -> dict[str, bool]:
        """Build the per-tool requirement overrides for the resolver.

        Returns:
            Mapping of every known tool name (catalog definitions and
            explicitly disabled names) to whether it may be used.
        """
        requirements = {
            tool.name: tool.enabled and tool.name not in self._disabled_tools
            for tool in self._tools
        }
        for name in self._disabled_tools:
            requirements[name] = False
        return requirements

    def filter_for_mode(
        self,
        mode_slug: str,
        custom_modes: Sequence[Any] = (),
        experiments: Optional[Mapping[str, bool]] = None,
    ) -> list[ToolDefinition]:
        """Filter the catalog down to the tools a mode allows.

        Args:
            mode_slug: Slug of the mode to filter for.
            custom_modes: Caller-supplied custom modes.
            experiments: Experiment flags for experimental tools.

        Tools added with `add_mcp_tool` are checked as `use_mcp_tool`, so
        they follow the mode's mcp group. A disabled MCP tool is still dropped.

        Returns:
            The enabled definitions the permission resolver allows, in catalog
            order.
        """
        from ..permissions.resolver import check_tool_permission

        requirements = self.tool_requirements()
        allowed = []
        for tool in self._tools:
            name = tool.name
            if tool.group is ToolGroup.MCP and group_for_tool(name) is None:
                if requirements.get(name) is False:
                    continue
                name = "use_mcp_tool"
            if check_tool_permission(
                name,
                mode_slug,
                custom_modes,
                tool_requirements=requirements,
                experiments=experiments,
            ).allowed:
                allowed.append(tool)
        return allowed
