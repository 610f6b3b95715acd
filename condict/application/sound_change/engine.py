"""
Sound Change Engine

Applies an ordered list of regex find/replace rules to a word. Each rule sees
the output of the rule before it. Rules that cannot run (bad pattern, bad
replacement template, evaluation timeout) are skipped and reported, never
raised.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Any, Callable, Iterable, Optional, Sequence, Tuple, Union

import regex

from ...domain.exceptions import InvalidPatternError
from ...domain.models.sound_change import (
    SkipReason,
    SkippedRule,
    SoundChangeResult,
    SoundChangeRule,
)

logger = logging.getLogger(__name__)

# Seconds one substitution may run before the rule is abandoned
DEFAULT_RULE_TIMEOUT = 1.0
PATTERN_CACHE_SIZE = 256

TEMPLATE_SYNTAX_PYTHON = "python"
TEMPLATE_SYNTAX_DOLLAR = "dollar"
TEMPLATE_SYNTAXES = (TEMPLATE_SYNTAX_PYTHON, TEMPLATE_SYNTAX_DOLLAR)

_DOLLAR_GROUP = regex.compile(r"\$(?:(\d+)|\{(\w+)\})")


def dollar_template_to_host(template: str) -> str:
    """
    Translate a ``$1`` / ``${name}`` replacement template into ``\\g<..>`` form.

    A backslash makes the next character literal, so ``\\$1`` produces a
    literal ``$1``. A ``$`` that does not start a group reference is literal.
    """
    out = []
    i = 0
    n = len(template)
    while i < n:
        ch = template[i]
        if ch == "\\" and i + 1 < n:
            nxt = template[i + 1]
            out.append("\\\\" if nxt == "\\" else nxt)
            i += 2
            continue
        if ch == "$":
            match = _DOLLAR_GROUP.match(template, i)
            if match:
                out.append(f"\\g<{match.group(1) or match.group(2)}>")
                i = match.end()
                continue
        out.append("\\\\" if ch == "\\" else ch)
        i += 1
    return "".join(out)


class SoundChangeEngine:
    """
    Deterministic rule application over words.

    The engine holds no per-word state; the only thing it keeps between calls
    is a cache of compiled patterns, which does not affect results.

    Usage:
        engine = SoundChangeEngine()
        engine.apply("aa", [SoundChangeRule("a", "b"), SoundChangeRule("b", "c")])
        # -> "cc"
    """

    def __init__(
        self,
        rule_timeout: Optional[float] = DEFAULT_RULE_TIMEOUT,
        template_syntax: str = TEMPLATE_SYNTAX_PYTHON,
    ):
        """
        Args:
            rule_timeout: Per-substitution time budget in seconds; None or 0
                disables the budget.
            template_syntax: "python" for ``\\1`` / ``\\g<name>`` templates,
                "dollar" for ``$1`` / ``${name}`` templates.
        """
        if template_syntax not in TEMPLATE_SYNTAXES:
            raise ValueError(f"Unknown template syntax: {template_syntax}")
        self.rule_timeout = rule_timeout or None
        self.template_syntax = template_syntax
        self._pattern_cache: "OrderedDict[str, Any]" = OrderedDict()
        self._cache_lock = threading.Lock()

    @classmethod
    def from_config(cls) -> SoundChangeEngine:
        """Create an engine from the ``sound_change`` config section."""
        from ...core.config import get_sound_change_settings

        settings = get_sound_change_settings()
        return cls(
            rule_timeout=settings["rule_timeout_seconds"],
            template_syntax=settings["template_syntax"],
        )

    def compile(self, pattern: str, index: Optional[int] = None):
        """
        Compile a find pattern.

        Raises:
            InvalidPatternError: If the pattern is not a valid regex.
        """
        with self._cache_lock:
            compiled = self._pattern_cache.get(pattern)
            if compiled is not None:
                self._pattern_cache.move_to_end(pattern)
                return compiled
        try:
            compiled = regex.compile(pattern)
        except (regex.error, ValueError, TypeError) as e:
            raise InvalidPatternError(pattern, str(e), index) from e
        with self._cache_lock:
            self._pattern_cache[pattern] = compiled
            # least recently used patterns go first
            while len(self._pattern_cache) > PATTERN_CACHE_SIZE:
                self._pattern_cache.popitem(last=False)
        return compiled

    def _host_template(self, template: str) -> str:
        if self.template_syntax == TEMPLATE_SYNTAX_DOLLAR:
            return dollar_template_to_host(template)
        return template

    def _apply_rule(
        self,
        index: int,
        rule: SoundChangeRule,
        current: str,
    ) -> Union[Tuple[str, int], SkippedRule]:
        """Run one rule; returns (new_text, match_count) or the reason it was skipped."""
        try:
            compiled = self.compile(rule.find, index)
        except InvalidPatternError as e:
            return SkippedRule(index, rule.find, SkipReason.INVALID_PATTERN, e.message)

        try:
            return compiled.subn(
                self._host_template(rule.replace),
                current,
                timeout=self.rule_timeout,
            )
        except TimeoutError:
            return SkippedRule(
                index,
                rule.find,
                SkipReason.TIMEOUT,
                f"evaluation exceeded {self.rule_timeout}s",
            )
        except (regex.error, IndexError) as e:
            return SkippedRule(index, rule.find, SkipReason.INVALID_REPLACEMENT, str(e))

    def apply_with_report(
        self,
        word: str,
        rules: Iterable[SoundChangeRule],
    ) -> SoundChangeResult:
        """
        Apply rules in order and report which rules ran, matched or were skipped.
        """
        result = SoundChangeResult(source=word, output=word)
        current = word

        for index, rule in enumerate(rules):
            if not rule.is_enabled:
                continue

            outcome = self._apply_rule(index, rule, current)
            if isinstance(outcome, SkippedRule):
                logger.warning(
                    "Skipping sound change rule %d (%r): %s %s",
                    index, rule.find, outcome.reason.value, outcome.message,
                )
                result.skipped.append(outcome)
                continue

            current, count = outcome
            result.applied.append(index)
            if count:
                result.matched.append(index)

        result.output = current
        return result

    def apply(self, word: str, rules: Iterable[SoundChangeRule]) -> str:
        """Apply rules in order and return the evolved word."""
        return self.apply_with_report(word, rules).output

    def apply_to_batch(
        self,
        words: Iterable[Any],
        rules: Sequence[SoundChangeRule],
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> int:
        """
        Overwrite ``term`` on every word with its evolved form.

        Words are any objects with a mutable ``term`` attribute; nothing else
        on them is read or written.

        Args:
            words: Term holders to evolve in place
            rules: Rule set
            should_cancel: Checked before each word; returning True stops the batch

        Returns:
            Number of words whose term changed
        """
        rules = list(rules)
        changed = 0
        for word in words:
            if should_cancel is not None and should_cancel():
                logger.info("Batch sound change cancelled")
                break
            old_term = word.term
            new_term = self.apply(old_term, rules)
            word.term = new_term
            if new_term != old_term:
                changed += 1
        return changed

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._pattern_cache.clear()


_default_engine: Optional[SoundChangeEngine] = None


def get_default_engine() -> SoundChangeEngine:
    """Get the shared engine with default settings."""
    global _default_engine
    if _default_engine is None:
        _default_engine = SoundChangeEngine()
    return _default_engine


def apply(word: str, rules: Iterable[SoundChangeRule]) -> str:
    """Apply rules to a word with the default engine."""
    return get_default_engine().apply(word, rules)


def apply_to_batch(words: Iterable[Any], rules: Sequence[SoundChangeRule]) -> int:
    """Evolve every word in place with the default engine."""
    return get_default_engine().apply_to_batch(words, rules)
