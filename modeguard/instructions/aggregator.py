"""
Instruction aggregation.

Default implementation of the aggregator ``resolve_effective_mode`` calls to
extend a mode's instructions with the user's global instructions and the
rule files of the workspace.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from .loader import RulesLoader


logger = logging.getLogger(__name__)

CUSTOM_INSTRUCTIONS_HEADER = (
    "====\n\n"
    "USER'S CUSTOM INSTRUCTIONS\n\n"
    "The following additional instructions are provided by the user, and should be "
    "followed to the best of your ability."
)


async def add_custom_instructions(
    mode_instructions: str,
    global_instructions: str,
    cwd: Union[str, Path],
    mode_slug: str,
    language: Optional[str] = None,
    loader: Optional[RulesLoader] = None,
) -> str:
    """Combine a mode's instructions with global instructions and rule files.

    Sections, in order: language preference, global instructions,
    mode-specific instructions, rules (mode rules before general rules).
    Rule files are read in worker threads.

    Args:
        mode_instructions: The mode's own (possibly overridden) instructions.
        global_instructions: Instructions that apply to every mode.
        cwd: Workspace directory to read rule files from.
        mode_slug: Slug of the mode, selects mode-specific rules.
        language: Preferred language of the user.
        loader: RulesLoader to read rule files with.

    Returns:
        The combined instructions, or an empty string when every section is
        empty.
    """
    loader = loader or RulesLoader()
    workspace = Path(cwd)

    mode_rules, general_rules = await asyncio.gather(
        asyncio.to_thread(loader.load_for_mode, workspace, mode_slug),
        asyncio.to_thread(loader.load, workspace),
    )
    logger.debug(
        f"Loaded {len(mode_rules)} mode rule files and {len(general_rules)} "
        f"general rule files for '{mode_slug}' from {workspace}"
    )

    sections: list[str] = []

    if language:
        sections.append(
            f'Language Preference:\nYou should always speak and think in the "{language}" language.'
        )

    if global_instructions.strip():
        sections.append(f"Global Instructions:\n{global_instructions.strip()}")

    if mode_instructions.strip():
        sections.append(f"Mode-specific Instructions:\n{mode_instructions.strip()}")

    rules = loader.merge(mode_rules + general_rules)
    if rules:
        sections.append(f"Rules:\n\n{rules}")

    if not sections:
        return ""

    return f"{CUSTOM_INSTRUCTIONS_HEADER}\n\n" + "\n\n".join(sections)
