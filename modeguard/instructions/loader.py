"""
Rules loading module.

Provides functionality for loading and merging rule files that extend a
mode's instructions.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging

from ..constants import (
    GLOBAL_RULES_DIR,
    LEGACY_MODE_RULES_FILE_TEMPLATE,
    LEGACY_RULES_FILE,
    LOCAL_RULES_DIR,
    MODE_RULES_DIR_TEMPLATE,
)

logger = logging.getLogger(__name__)


@dataclass
class RuleFile:
    """A loaded rule file."""
    path: Path
    content: str
    source: str  # "global", "local" or "mode"


class RulesLoader:
    """Loads rule files from the file system.

    Rules for every mode are loaded from:
    1. Global rules: ~/.modeguard/rules/
    2. Workspace rules: .modeguard/rules/ (relative to cwd), or the legacy
       .modeguardrules file when that directory has no rule files

    Rules for one mode are loaded from .modeguard/rules-<slug>/, or the legacy
    .modeguardrules-<slug> file when that directory has no rule files.

    Within a directory, files are sorted alphabetically by filename.
    """

    def __init__(self, global_rules_dir: Optional[Path] = None) -> None:
        self._global_rules_dir = global_rules_dir if global_rules_dir is not None else GLOBAL_RULES_DIR

    @property
    def global_rules_dir(self) -> Path:
        """Get the directory global rules are read from."""
        return self._global_rules_dir

    def load(self, cwd: Path) -> list[RuleFile]:
        """Load the rules that apply to every mode.

        Args:
            cwd: The workspace directory to load local rules from.

        Returns:
            Global rules first, then workspace rules.
        """
        rules: list[RuleFile] = []

        rules.extend(self._load_from_directory(self._global_rules_dir, "global"))

        local_rules = self._load_from_directory(cwd / LOCAL_RULES_DIR, "local")
        if not local_rules:
            local_rules = self._load_legacy_file(cwd / LEGACY_RULES_FILE, "local")
        rules.extend(local_rules)

        return rules

    def load_for_mode(self, cwd: Path, mode_slug: str) -> list[RuleFile]:
        """Load the rules that apply to one mode.

        Args:
            cwd: The workspace directory.
            mode_slug: Slug of the mode.

        Returns:
            Rule files of the mode, possibly empty.
        """
        mode_dir = cwd / MODE_RULES_DIR_TEMPLATE.format(slug=mode_slug)
        rules = self._load_from_directory(mode_dir, "mode")
        if rules:
            return rules

        legacy_path = cwd / LEGACY_MODE_RULES_FILE_TEMPLATE.format(slug=mode_slug)
        return self._load_legacy_file(legacy_path, "mode")

    def _load_from_directory(self, directory: Path, source: str) -> list[RuleFile]:
        """Load rule files from a directory, sorted alphabetically by filename."""
        rules: list[RuleFile] = []

        if not directory.exists() or not directory.is_dir():
            return rules

        try:
            files = sorted(directory.iterdir(), key=lambda p: p.name)
        except PermissionError:
            logger.warning(f"Permission denied accessing rules directory: {directory}")
            return rules

        for file_path in files:
            if file_path.is_file():
                rule_file = self._load_file(file_path, source)
                if rule_file:
                    rules.append(rule_file)

        return rules

    def _load_legacy_file(self, path: Path, source: str) -> list[RuleFile]:
        if path.exists() and path.is_file():
            rule_file = self._load_file(path, source)
            if rule_file:
                return [rule_file]
        return []

    def _load_file(self, file_path: Path, source: str) -> Optional[RuleFile]:
        """Load a single rule file.

        Returns:
            RuleFile if successful, None if the file couldn't be read or is
            blank.
        """
        try:
            content = file_path.read_text(encoding="utf-8")
        except (PermissionError, UnicodeDecodeError, OSError) as e:
            logger.warning(f"Failed to load rule file {file_path}: {e}")
            return None
        if not content.strip():
            return None
        return RuleFile(path=file_path, content=content, source=source)

    def merge(self, rules: list[RuleFile]) -> str:
        """Merge rules into a single string, in list order.

        Each rule file's content is preceded by a header naming its source
        and file.
        """
        if not rules:
            return ""

        parts: list[str] = []

        for rule in rules:
            parts.append(f"# Rules from {rule.source}: {rule.path.name}")
            parts.append(rule.content.strip())
            parts.append("")

        return "\n".join(parts).strip()
