"""
Tests for effective mode resolution.

Covers prompt override precedence, the default-mode fallback and the hand-off
to the instruction aggregator.
"""

import asyncio
import logging

import allure
import pytest
from hypothesis import given, settings, strategies as st

from modeguard.modes import (
    ASK_MODE,
    BUILTIN_MODES,
    CODE_MODE,
    ModeConfig,
    ModeContextOptions,
    ModeManager,
    PromptComponent,
    resolve_effective_mode,
)


class RecordingAggregator:
    """Async aggregator that records its calls and tags the instructions."""

    def __init__(self):
        self.calls = []

    async def __call__(self, instructions, global_instructions, cwd, mode_slug, language):
        self.calls.append((instructions, global_instructions, cwd, mode_slug, language))
        return f"[{mode_slug}] {instructions}"


def resolve(*args, **kwargs) -> ModeConfig:
    return asyncio.run(resolve_effective_mode(*args, **kwargs))


@allure.feature("Mode Resolution")
@allure.story("Override precedence")
@allure.severity(allure.severity_level.CRITICAL)
@settings(max_examples=100)
@given(
    slug=st.sampled_from([m.slug for m in BUILTIN_MODES]),
    role=st.one_of(st.none(), st.text(max_size=20)),
    instructions=st.one_of(st.none(), st.text(max_size=20)),
)
def test_override_precedence(slug, role, instructions):
    """
    Property: Override precedence

    A non-empty override SHALL win over the mode's own text, and an empty or
    missing override SHALL fall through to it.
    """
    base = next(m for m in BUILTIN_MODES if m.slug == slug)
    prompts = {slug: PromptComponent(role_definition=role, custom_instructions=instructions)}

    mode = resolve(slug, None, prompts)

    assert mode.role_definition == (role or base.role_definition)
    assert mode.custom_instructions == (instructions or base.custom_instructions or "")
    assert mode.groups == base.groups
    assert mode.slug == slug


def test_no_overrides_returns_mode_texts():
    mode = resolve("ask")

    assert mode.role_definition == ASK_MODE.role_definition
    assert mode.custom_instructions == (ASK_MODE.custom_instructions or "")


def test_unknown_slug_falls_back_to_first_builtin(caplog):
    with caplog.at_level(logging.WARNING):
        mode = resolve("nonexistent")

    assert mode.slug == CODE_MODE.slug
    assert mode.role_definition == CODE_MODE.role_definition
    assert "nonexistent" in caplog.text


def test_custom_mode_resolved_before_builtin():
    custom = ModeConfig(
        slug="ask",
        name="Custom Ask",
        role_definition="Custom role",
        groups=("read",),
        custom_instructions="Custom instructions",
    )

    mode = resolve("ask", [custom])

    assert mode.name == "Custom Ask"
    assert mode.custom_instructions == "Custom instructions"


def test_aggregator_called_with_context():
    aggregator = RecordingAggregator()
    options = ModeContextOptions(
        cwd="/work",
        global_custom_instructions="Be kind.",
        language="fr",
    )
    prompts = {"code": {"customInstructions": "Override."}}

    mode = resolve("code", None, prompts, options=options, aggregator=aggregator)

    assert aggregator.calls == [("Override.", "Be kind.", "/work", "code", "fr")]
    assert mode.custom_instructions == "[code] Override."


def test_aggregator_not_called_without_cwd():
    aggregator = RecordingAggregator()

    resolve("code", options=ModeContextOptions(), aggregator=aggregator)
    resolve("code", aggregator=aggregator)

    assert aggregator.calls == []


def test_aggregator_errors_propagate():
    async def failing(*args):
        raise RuntimeError("rules unavailable")

    with pytest.raises(RuntimeError, match="rules unavailable"):
        resolve("code", options=ModeContextOptions(cwd="/work"), aggregator=failing)


def test_base_modes_unchanged_by_resolution():
    snapshot = list(BUILTIN_MODES)

    resolve("code", None, {"code": PromptComponent(role_definition="Changed")})

    assert list(BUILTIN_MODES) == snapshot
    assert CODE_MODE.role_definition != "Changed"


def test_manager_resolve_uses_snapshot_prompts():
    manager = ModeManager(custom_mode_prompts={"ask": PromptComponent(role_definition="Short answers.")})

    mode = asyncio.run(manager.resolve("ask"))

    assert mode.role_definition == "Short answers."
