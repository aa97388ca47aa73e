"""
Mode manager for a snapshot of user mode configuration.

Provides the ModeManager class, which binds the custom modes, prompt
overrides and experiment flags of one configuration snapshot to the
registry and permission functions.
"""

import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence

from .builtin import DEFAULT_MODE_SLUG
from .registry import (
    InstructionAggregator,
    ModeContextOptions,
    get_all_modes,
    get_all_modes_with_prompts,
    get_mode_by_slug,
    get_mode_config,
    is_custom_mode,
    resolve_effective_mode,
)
from .schema import ModeConfig, ModeValidationError, PromptComponent, validate_mode_config

if TYPE_CHECKING:
    from ..permissions.resolver import PermissionDecision, ToolRequirements
    from ..state import ModeState


logger = logging.getLogger(__name__)


class ModeManager:
    """Manages the modes of one configuration snapshot.

    The manager keeps its own tuple of custom modes; the sequences passed in
    are copied and never modified. Lookups fall back to the default mode
    when a requested mode is not found.

    Example:
        manager = ModeManager(custom_modes=[docs_mode])

        mode = manager.get("docs")
        manager.is_tool_allowed("write_to_file", "docs", {"path": "a.md", "content": "x"})

        for mode in manager.list_modes():
            print(mode.name)
    """

    def __init__(
        self,
        custom_modes: Optional[Sequence[ModeConfig]] = None,
        custom_mode_prompts: Optional[Mapping[str, PromptComponent]] = None,
        experiments: Optional[Mapping[str, bool]] = None,
        default_mode: str = DEFAULT_MODE_SLUG,
    ) -> None:
        self._custom_modes: tuple[ModeConfig, ...] = tuple(custom_modes or ())
        self._custom_mode_prompts: dict[str, PromptComponent] = dict(custom_mode_prompts or {})
        self._experiments: dict[str, bool] = dict(experiments or {})
        self._default_mode = default_mode

    @classmethod
    def from_state(cls, state: "ModeState") -> "ModeManager":
        """Create a manager for a loaded ModeState."""
        return cls(
            custom_modes=state.custom_modes,
            custom_mode_prompts=state.custom_mode_prompts,
            experiments=state.experiments,
        )

    @property
    def custom_modes(self) -> tuple[ModeConfig, ...]:
        """Get the custom modes of this snapshot."""
        return self._custom_modes

    @property
    def custom_mode_prompts(self) -> dict[str, PromptComponent]:
        """Get a copy of the prompt overrides."""
        return dict(self._custom_mode_prompts)

    @property
    def experiments(self) -> dict[str, bool]:
        """Get a copy of the experiment flags."""
        return dict(self._experiments)

    @property
    def default_mode(self) -> str:
        """Get the default mode slug."""
        return self._default_mode

    def register(self, mode: ModeConfig) -> None:
        """Register a custom mode.

        A custom mode with the same slug is replaced in place; otherwise the
        mode is appended.

        Raises:
            ModeValidationError: If the mode configuration is invalid.
        """
        is_valid, errors = validate_mode_config(mode.to_dict())
        if not is_valid:
            raise ModeValidationError(
                f"Invalid mode configuration: {'; '.join(errors)}", errors
            )

        modes = list(self._custom_modes)
        for i, existing in enumerate(modes):
            if existing.slug == mode.slug:
                modes[i] = mode
                break
        else:
            modes.append(mode)
        self._custom_modes = tuple(modes)
        logger.debug(f"Registered mode: {mode.slug}")

    def unregister(self, slug: str) -> bool:
        """Remove a custom mode by slug.

        Built-in modes cannot be removed; unregistering a custom override
        restores the built-in.

        Returns:
            True if a custom mode was removed.
        """
        remaining = tuple(m for m in self._custom_modes if m.slug != slug)
        if len(remaining) == len(self._custom_modes):
            return False
        self._custom_modes = remaining
        logger.debug(f"Unregistered mode: {slug}")
        return True

    def get(self, slug: str) -> ModeConfig:
        """Get a mode, falling back to the default mode if it is not found.

        Raises:
            ModeNotFoundError: If neither the mode nor the default mode exists.
        """
        mode = get_mode_by_slug(slug, self._custom_modes)
        if mode is not None:
            return mode

        logger.warning(f"Mode '{slug}' not found, falling back to '{self._default_mode}'")
        return get_mode_config(self._default_mode, self._custom_modes)

    def get_config(self, slug: str) -> ModeConfig:
        """Get a mode that must exist.

        Raises:
            ModeNotFoundError: If the mode is not found.
        """
        return get_mode_config(slug, self._custom_modes)

    def has_mode(self, slug: str) -> bool:
        """Check if a mode exists."""
        return get_mode_by_slug(slug, self._custom_modes) is not None

    def is_custom(self, slug: str) -> bool:
        """Check if a mode comes from the custom modes."""
        return is_custom_mode(slug, self._custom_modes)

    def list_modes(self) -> list[ModeConfig]:
        """List the resolved mode set in order."""
        return get_all_modes(self._custom_modes)

    def list_modes_with_prompts(self) -> list[ModeConfig]:
        """List the resolved mode set with prompt overrides applied."""
        return get_all_modes_with_prompts(self._custom_modes, self._custom_mode_prompts)

    def tools_for(self, slug: str) -> list[str]:
        """List the tools a mode's groups grant, always-available tools included."""
        from ..tools.catalog import get_tools_for_mode

        return get_tools_for_mode(self.get_config(slug).groups)

    def check(
        self,
        tool: str,
        slug: Optional[str] = None,
        tool_params: Optional[Mapping[str, Any]] = None,
        tool_requirements: "ToolRequirements" = None,
    ) -> "PermissionDecision":
        """Decide whether a tool may be used in a mode of this snapshot."""
        from ..permissions.resolver import check_tool_permission

        return check_tool_permission(
            tool,
            slug or self._default_mode,
            self._custom_modes,
            tool_requirements=tool_requirements,
            tool_params=tool_params,
            experiments=self._experiments,
        )

    def is_tool_allowed(
        self,
        tool: str,
        slug: Optional[str] = None,
        tool_params: Optional[Mapping[str, Any]] = None,
        tool_requirements: "ToolRequirements" = None,
    ) -> bool:
        """Check whether a tool may be used in a mode of this snapshot.

        Raises:
            PathRestrictionViolation: If the edit targets a file the mode
                may not write.
        """
        from ..permissions.resolver import is_tool_allowed

        return is_tool_allowed(
            tool,
            slug or self._default_mode,
            self._custom_modes,
            tool_requirements=tool_requirements,
            tool_params=tool_params,
            experiments=self._experiments,
        )

    async def resolve(
        self,
        slug: str,
        options: Optional[ModeContextOptions] = None,
        aggregator: Optional[InstructionAggregator] = None,
    ) -> ModeConfig:
        """Resolve the effective mode with this snapshot's prompt overrides."""
        return await resolve_effective_mode(
            slug,
            self._custom_modes,
            self._custom_mode_prompts,
            options=options,
            aggregator=aggregator,
        )
