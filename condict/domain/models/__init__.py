"""
Domain Models Module

Contains all domain models for ConDict.
"""

from .sound_change import (
    SoundChangeRule,
    RuleSet,
    Preset,
    SkipReason,
    SkippedRule,
    SoundChangeResult,
    TermChange,
    copy_rules,
    rules_to_list,
    rules_from_list,
    rules_to_json,
    rules_from_json,
)
from .word import (
    Translation,
    Variation,
    WordExport,
)

__all__ = [
    # Sound change
    "SoundChangeRule",
    "RuleSet",
    "Preset",
    "SkipReason",
    "SkippedRule",
    "SoundChangeResult",
    "TermChange",
    "copy_rules",
    "rules_to_list",
    "rules_from_list",
    "rules_to_json",
    "rules_from_json",
    # Words
    "Translation",
    "Variation",
    "WordExport",
]
