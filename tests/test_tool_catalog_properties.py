"""
Property-based tests for the tool group catalog.

Tests group-to-tool expansion and catalog filtering using hypothesis.
"""

import allure
import pytest
from hypothesis import given, settings, strategies as st

from modeguard.experiments import EXPERIMENT_IDS
from modeguard.modes import CODE_MODE, ASK_MODE, ModeConfig
from modeguard.tools import (
    ALWAYS_AVAILABLE_TOOLS,
    REVIEWER_TOOL,
    TOOL_GROUPS,
    ToolCatalog,
    ToolDefinition,
    ToolGroup,
    get_tools_for_mode,
    group_for_tool,
    is_always_available,
    tools_for_group,
)


ALL_GROUP_TOOLS = sorted({tool for d in TOOL_GROUPS.values() for tool in d.tools})
KNOWN_TOOLS = sorted(set(ALL_GROUP_TOOLS) | set(ALWAYS_AVAILABLE_TOOLS))


# Strategies for generating test data

def group_list_strategy():
    """Generate lists of distinct tool groups."""
    return st.lists(st.sampled_from(list(ToolGroup)), unique=True, max_size=len(ToolGroup))


@st.composite
def tool_definition_strategy(draw):
    """Generate a ToolDefinition named after a known tool."""
    name = draw(st.sampled_from(KNOWN_TOOLS))
    return ToolDefinition(
        name=name,
        description=draw(st.text(max_size=50)),
        parameters={"type": "object", "properties": {}},
        group=group_for_tool(name),
        enabled=draw(st.booleans()),
    )


@st.composite
def tool_list_strategy(draw, min_size=0, max_size=15):
    """Generate tool definitions with unique names."""
    names = draw(st.lists(
        st.sampled_from(KNOWN_TOOLS),
        min_size=min_size,
        max_size=max_size,
        unique=True,
    ))
    return [
        ToolDefinition(
            name=name,
            description=f"The {name} tool",
            group=group_for_tool(name),
        )
        for name in names
    ]


# **Feature: tool-groups, Property 1: Group expansion is the union plus always-available tools**
@allure.feature("Tool Catalog")
@allure.story("Group expansion")
@allure.severity(allure.severity_level.CRITICAL)
@settings(max_examples=100)
@given(groups=group_list_strategy())
def test_tools_for_mode_is_union_of_groups(groups: list[ToolGroup]):
    """
    Property 1: Group expansion

    For any list of groups, the tools of a mode SHALL be exactly the union of
    each group's tools plus the always-available tools, without duplicates.
    """
    tools = get_tools_for_mode(groups)

    expected = set(ALWAYS_AVAILABLE_TOOLS)
    for group in groups:
        expected.update(TOOL_GROUPS[group].tools)

    assert set(tools) == expected
    assert len(tools) == len(set(tools)), f"Duplicate tools in {tools}"


@settings(max_examples=100)
@given(groups=group_list_strategy())
def test_tools_for_mode_accepts_raw_and_scoped_entries(groups: list[ToolGroup]):
    """
    Property 1: Group expansion (entry shapes)

    Plain strings and scoped entries expand to the same tools as the group
    ids they name.
    """
    raw = [
        [g.value, {"fileRegex": ".*"}] if i % 2 else g.value
        for i, g in enumerate(groups)
    ]

    assert set(get_tools_for_mode(raw)) == set(get_tools_for_mode(groups))


def test_empty_groups_yield_always_available_tools():
    """A mode without groups still gets the always-available tools."""
    assert get_tools_for_mode([]) == list(ALWAYS_AVAILABLE_TOOLS)


def test_always_available_tools():
    for tool in ("ask_followup_question", "attempt_completion", "switch_mode", "new_task"):
        assert is_always_available(tool)
    assert not is_always_available("read_file")
    assert TOOL_GROUPS[ToolGroup.MODES].always_available


@pytest.mark.parametrize("group", list(ToolGroup))
def test_tools_for_group_accepts_string_ids(group: ToolGroup):
    assert tools_for_group(group.value) == TOOL_GROUPS[group].tools


def test_tools_for_group_unknown_raises_key_error():
    with pytest.raises(KeyError):
        tools_for_group("not-a-group")


@pytest.mark.parametrize("tool", ALL_GROUP_TOOLS)
def test_group_for_tool_finds_listing_group(tool: str):
    group = group_for_tool(tool)

    assert group is not None
    assert tool in TOOL_GROUPS[group].tools


def test_group_for_unknown_tool_is_none():
    assert group_for_tool("teleport") is None


def test_group_table_contents():
    assert TOOL_GROUPS[ToolGroup.EDIT].tools == (
        "apply_diff", "write_to_file", "insert_content", "search_and_replace",
    )
    assert TOOL_GROUPS[ToolGroup.COMMAND].tools == ("execute_command",)
    assert TOOL_GROUPS[ToolGroup.REVIEW].tools == ("reviewer",)
    assert "read_file" in TOOL_GROUPS[ToolGroup.READ].tools


# **Feature: tool-groups, Property 2: Disabled tools are never offered**
@allure.feature("Tool Catalog")
@allure.story("Disabled tools excluded from filtering")
@allure.severity(allure.severity_level.CRITICAL)
@settings(max_examples=100)
@given(
    tools=tool_list_strategy(min_size=1),
    data=st.data(),
)
def test_disabled_tools_excluded_from_filtering(tools: list[ToolDefinition], data):
    """
    Property 2: Disabled tools excluded

    For any catalog and any set of disabled tools that are not always
    available, filtering for a mode SHALL never return a disabled tool.
    """
    catalog = ToolCatalog(tools)
    candidates = [t.name for t in tools if not is_always_available(t.name)]
    disabled = data.draw(st.lists(st.sampled_from(candidates), unique=True)) if candidates else []
    for name in disabled:
        catalog.disable_tool(name)

    filtered = catalog.filter_for_mode("code")

    filtered_names = {t.name for t in filtered}
    assert not filtered_names & set(disabled), (
        f"Disabled tools {set(disabled) & filtered_names} were returned"
    )


@settings(max_examples=100)
@given(tools=tool_list_strategy())
def test_filter_for_mode_matches_mode_groups(tools: list[ToolDefinition]):
    """
    Property 3: Filtering follows the mode's groups

    Without experiments, filtering for the code mode keeps exactly the tools
    its groups grant, minus the experiment-gated tools.
    """
    catalog = ToolCatalog(tools)

    filtered = catalog.filter_for_mode("code")

    granted = set(get_tools_for_mode(CODE_MODE.groups)) - EXPERIMENT_IDS
    assert {t.name for t in filtered} == {t.name for t in tools} & granted
    # Catalog order is kept
    assert [t.name for t in filtered] == [t.name for t in tools if t.name in granted]


def test_filter_for_ask_mode_excludes_edit_and_command_tools():
    catalog = ToolCatalog(
        ToolDefinition(name=name, description=name) for name in KNOWN_TOOLS
    )

    names = {t.name for t in catalog.filter_for_mode("ask")}

    assert "read_file" in names
    assert "attempt_completion" in names
    assert not names & set(TOOL_GROUPS[ToolGroup.EDIT].tools)
    assert "execute_command" not in names
    assert set(get_tools_for_mode(ASK_MODE.groups)) >= names


def test_filter_for_mode_with_experiments_and_custom_modes():
    docs = ModeConfig(
        slug="docs",
        name="Docs",
        role_definition="You write documentation.",
        groups=("read", "edit"),
    )
    catalog = ToolCatalog([
        ToolDefinition(name="search_and_replace", description=""),
        ToolDefinition(name="execute_command", description=""),
    ])

    assert catalog.filter_for_mode("docs", [docs]) == []

    filtered = catalog.filter_for_mode("docs", [docs], {"search_and_replace": True})
    assert [t.name for t in filtered] == ["search_and_replace"]


def test_tool_requirements_reflect_enabled_and_disabled():
    catalog = ToolCatalog([
        ToolDefinition(name="read_file", description=""),
        ToolDefinition(name="browser_action", description="", enabled=False),
    ])
    catalog.disable_tool("execute_command")

    assert catalog.tool_requirements() == {
        "read_file": True,
        "browser_action": False,
        "execute_command": False,
    }

    catalog.enable_tool("execute_command")
    assert not catalog.is_tool_disabled("execute_command")
    assert "execute_command" not in catalog.tool_requirements()


def test_add_mcp_tool_assigns_mcp_group():
    catalog = ToolCatalog()
    catalog.add_mcp_tool({
        "name": "github_search",
        "description": "Search GitHub",
        "inputSchema": {"type": "object"},
    })

    (tool,) = catalog.tools
    assert tool.name == "github_search"
    assert tool.group is ToolGroup.MCP
    assert tool.parameters == {"type": "object"}


@pytest.mark.parametrize("mode_slug,kept", [
    ("code", True),
    ("ask", True),
    ("orchestrator", False),
])
def test_mcp_server_tools_follow_mcp_group(mode_slug: str, kept: bool):
    catalog = ToolCatalog()
    catalog.add_mcp_tool({
        "name": "get_weather",
        "description": "Current weather",
        "inputSchema": {"type": "object"},
    })

    names = [tool.name for tool in catalog.filter_for_mode(mode_slug)]

    assert names == (["get_weather"] if kept else [])


def test_disabled_mcp_server_tool_is_dropped():
    catalog = ToolCatalog()
    catalog.add_mcp_tool({"name": "get_weather", "description": "Current weather"})
    catalog.add_mcp_tool({"name": "get_forecast", "description": "Forecast"})

    catalog.disable_tool("get_weather")

    assert [tool.name for tool in catalog.filter_for_mode("code")] == ["get_forecast"]


@settings(max_examples=100)
@given(tool=tool_definition_strategy())
def test_openai_format_preserves_definition(tool: ToolDefinition):
    """
    Property 4: OpenAI format conversion

    Converting to the OpenAI function format and back SHALL keep the name,
    description and parameters, and look the group up from the catalog.
    """
    restored = ToolDefinition.from_openai_format(tool.to_openai_format())

    assert restored.name == tool.name
    assert restored.description == tool.description
    assert restored.parameters == tool.parameters
    assert restored.group == group_for_tool(tool.name)


def test_reviewer_tool_schema():
    schema = REVIEWER_TOOL.parameters

    assert REVIEWER_TOOL.group is ToolGroup.REVIEW
    assert schema["required"] == ["context_file_path", "output_file_path"]
    assert schema["properties"]["difficulty"]["minimum"] == 1
    assert schema["properties"]["difficulty"]["maximum"] == 10
    assert "security" in schema["properties"]["review_focus"]["enum"]
