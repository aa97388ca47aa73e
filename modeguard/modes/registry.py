"""
Mode registry.

Lookup and merge operations over the built-in modes and a caller-supplied
sequence of custom modes. Custom modes are read-only inputs: a custom mode
whose slug matches a built-in replaces it, any other custom mode is added.
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence, Union

from .builtin import BUILTIN_MODES
from .schema import ModeConfig, PromptComponent


logger = logging.getLogger(__name__)


# (base_instructions, global_instructions, cwd, mode_slug, language) -> instructions
InstructionAggregator = Callable[[str, str, str, str, Optional[str]], Awaitable[str]]


class ModeNotFoundError(LookupError):
    """Raised when a mode slug is in neither the custom nor the built-in modes."""

    def __init__(self, slug: str):
        super().__init__(f"No mode found for slug: {slug}")
        self.slug = slug


@dataclass(frozen=True)
class ModeContextOptions:
    """Context for extending a mode's instructions.

    Attributes:
        cwd: Working directory of the task. Instructions are only extended
            when it is set.
        global_custom_instructions: Instructions that apply to every mode.
        language: Preferred language of the user.
    """
    cwd: Optional[Union[str, Path]] = None
    global_custom_instructions: str = ""
    language: Optional[str] = None


def get_mode_by_slug(
    slug: str,
    custom_modes: Optional[Sequence[ModeConfig]] = None,
) -> Optional[ModeConfig]:
    """Find a mode by slug, checking custom modes before built-ins.

    Returns:
        The matching ModeConfig, or None if no mode has the slug.
    """
    for mode in custom_modes or ():
        if mode.slug == slug:
            return mode
    for mode in BUILTIN_MODES:
        if mode.slug == slug:
            return mode
    return None


def get_mode_config(
    slug: str,
    custom_modes: Optional[Sequence[ModeConfig]] = None,
) -> ModeConfig:
    """Get a mode that must exist.

    Raises:
        ModeNotFoundError: If no custom or built-in mode has the slug.
    """
    mode = get_mode_by_slug(slug, custom_modes)
    if mode is None:
        raise ModeNotFoundError(slug)
    return mode


def get_all_modes(custom_modes: Optional[Sequence[ModeConfig]] = None) -> list[ModeConfig]:
    """Get the resolved mode set.

    Built-in modes keep their order. A custom mode with the slug of an entry
    already in the set replaces that entry at the same index; a custom mode
    with a new slug is appended in the order supplied.

    Returns:
        A new list on every call.
    """
    all_modes = list(BUILTIN_MODES)
    if not custom_modes:
        return all_modes

    for custom_mode in custom_modes:
        index = next(
            (i for i, mode in enumerate(all_modes) if mode.slug == custom_mode.slug),
            None,
        )
        if index is None:
            all_modes.append(custom_mode)
        else:
            all_modes[index] = custom_mode

    return all_modes


def is_custom_mode(
    slug: str,
    custom_modes: Optional[Sequence[ModeConfig]] = None,
) -> bool:
    """True if a custom mode has the slug, whether it overrides a built-in or not."""
    return any(mode.slug == slug for mode in custom_modes or ())


def get_role_definition(
    slug: str,
    custom_modes: Optional[Sequence[ModeConfig]] = None,
) -> str:
    """Get a mode's role definition, or an empty string for unknown slugs."""
    mode = get_mode_by_slug(slug, custom_modes)
    if mode is None:
        logger.warning(f"No mode found for slug: {slug}")
        return ""
    return mode.role_definition


def get_custom_instructions(
    slug: str,
    custom_modes: Optional[Sequence[ModeConfig]] = None,
) -> str:
    """Get a mode's custom instructions, or an empty string for unknown slugs."""
    mode = get_mode_by_slug(slug, custom_modes)
    if mode is None:
        logger.warning(f"No mode found for slug: {slug}")
        return ""
    return mode.custom_instructions or ""


def _prompt_component(value: Any) -> Optional[PromptComponent]:
    if value is None or isinstance(value, PromptComponent):
        return value
    return PromptComponent.from_dict(value)


def get_all_modes_with_prompts(
    custom_modes: Optional[Sequence[ModeConfig]] = None,
    custom_mode_prompts: Optional[Mapping[str, Any]] = None,
) -> list[ModeConfig]:
    """Get the resolved mode set with prompt overrides applied.

    An override field replaces the mode's own text whenever it is not None.

    Args:
        custom_modes: Caller-supplied custom modes.
        custom_mode_prompts: Overrides keyed by slug (PromptComponent or
            persisted dictionaries).
    """
    prompts = custom_mode_prompts or {}
    resolved: list[ModeConfig] = []

    for mode in get_all_modes(custom_modes):
        component = _prompt_component(prompts.get(mode.slug))
        if component is None:
            resolved.append(mode)
            continue
        resolved.append(replace(
            mode,
            role_definition=(
                component.role_definition
                if component.role_definition is not None
                else mode.role_definition
            ),
            custom_instructions=(
                component.custom_instructions
                if component.custom_instructions is not None
                else mode.custom_instructions
            ),
        ))

    return resolved


async def resolve_effective_mode(
    slug: str,
    custom_modes: Optional[Sequence[ModeConfig]] = None,
    custom_mode_prompts: Optional[Mapping[str, Any]] = None,
    options: Optional[ModeContextOptions] = None,
    aggregator: Optional[InstructionAggregator] = None,
) -> ModeConfig:
    """Resolve the mode a task actually runs under.

    1. Look the slug up; unknown slugs fall back to the default mode.
    2. Apply the prompt override for the slug. A non-empty override wins
       over the mode's own text, which wins over an empty string.
    3. If ``options.cwd`` is set, hand the instructions to the aggregator,
       which appends global and workspace instructions.

    Args:
        slug: Slug of the requested mode.
        custom_modes: Caller-supplied custom modes.
        custom_mode_prompts: Prompt overrides keyed by slug.
        options: Working directory, global instructions and language.
        aggregator: Instruction aggregator; defaults to
            ``modeguard.instructions.add_custom_instructions``.

    Returns:
        A new ModeConfig carrying the effective role and instructions.

    Raises:
        Exception: Whatever the aggregator raises is propagated.
    """
    base_mode = get_mode_by_slug(slug, custom_modes)
    if base_mode is None:
        logger.warning(f"Mode '{slug}' not found, falling back to '{BUILTIN_MODES[0].slug}'")
        base_mode = BUILTIN_MODES[0]

    component = _prompt_component((custom_mode_prompts or {}).get(slug))
    override_role = component.role_definition if component else None
    override_instructions = component.custom_instructions if component else None

    instructions = override_instructions or base_mode.custom_instructions or ""

    if options is not None and options.cwd:
        if aggregator is None:
            from ..instructions import add_custom_instructions
            aggregator = add_custom_instructions
        instructions = await aggregator(
            instructions,
            options.global_custom_instructions or "",
            str(options.cwd),
            slug,
            options.language,
        )

    return replace(
        base_mode,
        role_definition=override_role or base_mode.role_definition,
        custom_instructions=instructions,
    )
