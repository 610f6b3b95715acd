"""
Sound Change Domain Models

Rules, rule sets and presets for the Sound Change Applier, together with the
plain structured format they are stored in.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple


@dataclass
class SoundChangeRule:
    """
    A single find/replace pair.

    ``find`` is a regular expression; an empty ``find`` disables the rule.
    ``replace`` is a replacement template that may reference groups captured
    by ``find``.
    """

    find: str = ""
    replace: str = ""

    @property
    def is_enabled(self) -> bool:
        """Rules with an empty find pattern are skipped."""
        return bool(self.find)

    def copy(self) -> SoundChangeRule:
        return SoundChangeRule(find=self.find, replace=self.replace)

    def to_dict(self) -> Dict[str, str]:
        return {"find": self.find, "replace": self.replace}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SoundChangeRule:
        # null and missing fields both decode as empty strings
        return cls(
            find=data.get("find") or "",
            replace=data.get("replace") or "",
        )

    def __str__(self) -> str:
        return f"{self.find} -> {self.replace}"


# An ordered rule list; order is part of the meaning.
RuleSet = List[SoundChangeRule]


def copy_rules(rules: Iterable[SoundChangeRule]) -> RuleSet:
    """Deep copy a rule sequence into a new list."""
    return [rule.copy() for rule in rules]


def rules_to_list(rules: Iterable[SoundChangeRule]) -> List[Dict[str, str]]:
    return [rule.to_dict() for rule in rules]


def rules_from_list(data: Iterable[Dict[str, Any]]) -> RuleSet:
    return [SoundChangeRule.from_dict(item) for item in data]


def rules_to_json(rules: Iterable[SoundChangeRule]) -> str:
    """Encode rules as a JSON array of ``{"find", "replace"}`` objects."""
    return json.dumps(rules_to_list(rules), ensure_ascii=False)


def rules_from_json(text: str) -> RuleSet:
    """
    Decode a JSON rule array.

    Raises:
        ValueError: If the text is not a JSON array of objects.
    """
    data = json.loads(text or "[]")
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ValueError("rule data must be a JSON array of objects")
    return rules_from_list(data)


@dataclass(frozen=True)
class Preset:
    """
    A named, saved rule set.

    Presets are immutable: the rules are held as a tuple and every accessor
    that hands rules out returns copies.
    """

    name: str
    rules: Tuple[SoundChangeRule, ...] = ()
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def rule_count(self) -> int:
        return len(self.rules)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "rules": rules_to_list(self.rules),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Preset:
        created_at = datetime.now()
        if data.get("created_at"):
            created_at = datetime.fromisoformat(data["created_at"])
        return cls(
            name=data.get("name", ""),
            rules=tuple(rules_from_list(data.get("rules") or [])),
            created_at=created_at,
        )

    def __repr__(self) -> str:
        return f"Preset(name='{self.name}', rules={self.rule_count})"


class SkipReason(Enum):
    """Why a rule did not take part in a transformation."""

    INVALID_PATTERN = "invalid_pattern"
    INVALID_REPLACEMENT = "invalid_replacement"
    TIMEOUT = "timeout"


@dataclass
class SkippedRule:
    """Diagnostic entry for a rule that was skipped during application."""

    index: int
    find: str
    reason: SkipReason
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "find": self.find,
            "reason": self.reason.value,
            "message": self.message,
        }


@dataclass
class SoundChangeResult:
    """
    Outcome of running one word through a rule set.

    ``applied`` lists the indices of rules that ran, ``matched`` the subset
    that replaced at least one match, ``skipped`` the rules that failed and
    were passed over. Disabled rules appear in none of them.
    """

    source: str
    output: str
    applied: List[int] = field(default_factory=list)
    matched: List[int] = field(default_factory=list)
    skipped: List[SkippedRule] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.output != self.source

    @property
    def fired_count(self) -> int:
        """Number of rules that actually rewrote something."""
        return len(self.matched)

    @property
    def all_skipped(self) -> bool:
        """True when rules were active but every one of them failed."""
        return bool(self.skipped) and not self.applied

    @property
    def skipped_indices(self) -> List[int]:
        return [s.index for s in self.skipped]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "output": self.output,
            "changed": self.changed,
            "applied": list(self.applied),
            "matched": list(self.matched),
            "skipped": [s.to_dict() for s in self.skipped],
        }


@dataclass
class TermChange:
    """A single term rewrite made by a batch apply."""

    word_id: Optional[int]
    old_term: str
    new_term: str
