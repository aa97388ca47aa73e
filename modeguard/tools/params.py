"""
Tool call parameters inspected by the permission resolver.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolParams:
    """The parameters of a tool call that affect permission checks.

    Only the target path and the payload fields of edit tools matter; every
    other parameter of the call is dropped by ``from_mapping``.

    Attributes:
        path: Target file path of the call.
        diff: Diff to apply (apply_diff).
        content: Literal content to write (write_to_file, insert_content).
        operations: Edit operations list (search_and_replace, insert_content).
    """
    path: Optional[str] = None
    diff: Optional[str] = None
    content: Optional[str] = None
    operations: Optional[Sequence[Any]] = None

    FIELDS = ("path", "diff", "content", "operations")

    @classmethod
    def from_mapping(cls, params: Optional[Mapping[str, Any]]) -> "ToolParams":
        """Narrow a raw parameter mapping.

        Args:
            params: Raw tool call parameters, or None.

        Returns:
            A ToolParams with the recognized fields; unrecognized keys are
            ignored.
        """
        if not params:
            return cls()

        ignored = sorted(str(key) for key in params if key not in cls.FIELDS)
        if ignored:
            logger.debug(f"Ignoring tool parameters not used for permission checks: {ignored}")

        path = params.get("path")
        return cls(
            path=str(path) if path is not None else None,
            diff=params.get("diff"),
            content=params.get("content"),
            operations=params.get("operations"),
        )

    @property
    def has_edit_payload(self) -> bool:
        """True if the call carries something to write.

        A diff or content counts when non-empty; an operations list counts
        whenever it is present.
        """
        return bool(self.diff) or bool(self.content) or self.operations is not None
