"""
Instruction aggregation module.

Extends mode instructions with global instructions and workspace rule files.
"""

from .aggregator import CUSTOM_INSTRUCTIONS_HEADER, add_custom_instructions
from .loader import RuleFile, RulesLoader

__all__ = [
    "CUSTOM_INSTRUCTIONS_HEADER",
    "RuleFile",
    "RulesLoader",
    "add_custom_instructions",
]
