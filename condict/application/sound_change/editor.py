"""
Rule Set Editor

Holds the rule list being edited in a Sound Change Applier session.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ...domain.exceptions import RuleIndexError
from ...domain.models.sound_change import Preset, RuleSet, SoundChangeRule, copy_rules

logger = logging.getLogger(__name__)


class RuleSetEditor:
    """
    Mutable, ordered rule list for one editing session.

    The editor always holds at least one slot after construction or
    ``clear()``; removing rules one by one may still empty it.
    """

    def __init__(self, rules: Optional[RuleSet] = None):
        if rules:
            self._rules: List[SoundChangeRule] = copy_rules(rules)
        else:
            self._rules = [SoundChangeRule()]

    @property
    def rules(self) -> RuleSet:
        """Copy of the current rules, in order."""
        return copy_rules(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __getitem__(self, index: int) -> SoundChangeRule:
        self._check_index(index)
        return self._rules[index].copy()

    def _check_index(self, index: int) -> None:
        if not isinstance(index, int) or index < 0 or index >= len(self._rules):
            raise RuleIndexError(index, len(self._rules))

    def add_rule(self, find: str = "", replace: str = "") -> int:
        """Append a rule and return its index."""
        self._rules.append(SoundChangeRule(find=find, replace=replace))
        return len(self._rules) - 1

    def update_rule(
        self,
        index: int,
        find: Optional[str] = None,
        replace: Optional[str] = None,
    ) -> None:
        """Edit the find and/or replace field of a slot."""
        self._check_index(index)
        rule = self._rules[index]
        if find is not None:
            rule.find = find
        if replace is not None:
            rule.replace = replace

    def remove_rule(self, index: int) -> SoundChangeRule:
        """
        Remove the rule at ``index``.

        Raises:
            RuleIndexError: If there is no rule at ``index``.
        """
        self._check_index(index)
        return self._rules.pop(index)

    def clear(self) -> None:
        """Reset to a single empty rule."""
        self._rules = [SoundChangeRule()]

    def load_from_preset(self, preset: Preset) -> None:
        """Replace all rules with a copy of the preset's rules."""
        self._rules = copy_rules(preset.rules)
        logger.debug(f"Loaded {len(self._rules)} rules from preset '{preset.name}'")

    @property
    def can_save_preset(self) -> bool:
        """Saving needs at least one rule and an active first rule."""
        return bool(self._rules) and self._rules[0].is_enabled

    @property
    def active_rule_count(self) -> int:
        return sum(1 for rule in self._rules if rule.is_enabled)
