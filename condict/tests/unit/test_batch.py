"""
Tests for the Sound Change Applier actions: preview, apply, apply-to-all
and undo.
"""

import pytest

from condict.application.sound_change.batch import SoundChangeApplier
from condict.application.sound_change.engine import SoundChangeEngine, apply
from condict.application.sound_change.history import SoundChangeHistory
from condict.core.config import AppConfig
from condict.domain.models.sound_change import SoundChangeRule
from condict.tests.conftest import FakeWord


RULES = [SoundChangeRule("a", "e"), SoundChangeRule("k", "g")]


@pytest.fixture
def history(tmp_path):
    return SoundChangeHistory(tmp_path)


@pytest.fixture
def applier(history):
    return SoundChangeApplier(history=history)


def corpus():
    return [
        FakeWord("kata", "stone", 1),
        FakeWord("mo", "water", 2),
        FakeWord("aka", "red", 3),
    ]


class TestPreviewAndSingleApply:
    """Actions on a single word."""

    def test_preview_does_not_record(self, applier, history):
        result = applier.preview("kata", RULES)
        assert result.output == "gete"
        assert not history.can_undo()

    def test_apply_to_word(self, applier, history):
        word = FakeWord("kata", "stone", 7)

        result = applier.apply_to_word(word, RULES)

        assert word.term == "gete"
        assert word.definition == "stone"
        assert result.changed
        assert history.get_last_batch()[0].word_id == 7

    def test_apply_to_word_unchanged_is_not_recorded(self, applier, history):
        word = FakeWord("mo")
        applier.apply_to_word(word, RULES)
        assert not history.can_undo()

    def test_apply_to_word_accepts_generator(self, applier):
        word = FakeWord("kata")
        applier.apply_to_word(word, (r for r in RULES))
        assert word.term == "gete"


class TestApplyToAll:
    """Batch apply over a corpus."""

    def test_each_term_matches_single_apply(self, applier):
        words = corpus()
        originals = [w.term for w in words]

        result = applier.apply_to_all(words, RULES)

        assert [w.term for w in words] == [apply(t, RULES) for t in originals]
        assert result.total == 3
        assert result.processed == 3
        assert result.changed == 2
        assert result.completed

    def test_only_term_changes(self, applier):
        words = corpus()
        applier.apply_to_all(words, RULES)
        assert [(w.id, w.definition) for w in words] == [(1, "stone"), (2, "water"), (3, "red")]

    def test_changes_listed(self, applier):
        result = applier.apply_to_all(corpus(), RULES)
        assert [(c.word_id, c.old_term, c.new_term) for c in result.changes] == [
            (1, "kata", "gete"),
            (3, "aka", "ege"),
        ]

    def test_dry_run_leaves_words(self, applier, history):
        words = corpus()

        result = applier.apply_to_all(words, RULES, dry_run=True)

        assert [w.term for w in words] == ["kata", "mo", "aka"]
        assert result.changed == 2
        assert result.dry_run
        assert not history.can_undo()

    def test_progress_callback(self, applier):
        calls = []
        applier.set_progress_callback(lambda current, total, term: calls.append((current, total, term)))

        applier.apply_to_all(corpus(), RULES)

        assert calls == [(1, 3, "kata"), (2, 3, "mo"), (3, 3, "aka")]

    def test_cancel_stops_between_words(self, applier):
        words = corpus()

        def on_progress(current, total, term):
            if current == 2:
                applier.cancel()

        applier.set_progress_callback(on_progress)
        result = applier.apply_to_all(words, RULES)

        assert result.cancelled
        assert not result.completed
        assert result.processed == 2
        assert [w.term for w in words] == ["gete", "mo", "aka"]

    def test_cancel_flag_resets_for_next_batch(self, applier):
        applier.cancel()
        result = applier.apply_to_all(corpus(), RULES)
        assert not result.cancelled

    def test_skipped_rules_collected_once(self, applier):
        rules = [SoundChangeRule("(", "x"), SoundChangeRule("a", "e")]

        result = applier.apply_to_all(corpus(), rules)

        assert [s.index for s in result.skipped_rules] == [0]
        assert result.changed == 2

    def test_empty_corpus(self, applier, history):
        result = applier.apply_to_all([], RULES)
        assert result.total == 0
        assert result.completed
        assert not history.can_undo()

    def test_parallel_matches_sequential(self, history):
        rules = [SoundChangeRule("[aeiou]$", ""), SoundChangeRule("k", "h")]
        words = [FakeWord(t, id=i) for i, t in enumerate(["kata", "moko", "aka", "ik", "", "kaki"] * 5)]
        expected = [apply(w.term, rules) for w in words]

        result = SoundChangeApplier(history=history, max_workers=4).apply_to_all(words, rules)

        assert [w.term for w in words] == expected
        assert result.processed == len(words)

    def test_parallel_cancel(self, history):
        applier = SoundChangeApplier(history=history, max_workers=3)
        words = corpus()

        def on_progress(current, total, term):
            if current == 1:
                applier.cancel()

        applier.set_progress_callback(on_progress)
        result = applier.apply_to_all(words, RULES)

        assert result.cancelled
        assert [w.term for w in words] == ["gete", "mo", "aka"]

    def test_batch_recorded_in_history(self, applier, history):
        result = applier.apply_to_all(corpus(), RULES)

        assert result.batch_id
        assert history.get_batch_ids() == [result.batch_id]
        assert {e.word_id for e in history.get_last_batch()} == {1, 3}
        assert history.get_last_batch()[0].rules == [r.to_dict() for r in RULES]

    def test_works_without_history(self):
        words = corpus()
        result = SoundChangeApplier().apply_to_all(words, RULES)
        assert result.batch_id == ""
        assert words[0].term == "gete"

    def test_result_to_dict(self, applier):
        data = applier.apply_to_all(corpus(), RULES).to_dict()
        assert data["changed"] == 2
        assert data["cancelled"] is False


class TestUndo:
    """Undoing the most recent batch."""

    def test_undo_restores_terms(self, applier):
        words = corpus()
        by_id = {w.id: w for w in words}
        applier.apply_to_all(words, RULES)

        restored = applier.undo_last_batch(by_id.get)

        assert restored == 2
        assert [w.term for w in words] == ["kata", "mo", "aka"]
        assert not applier.history.can_undo()

    def test_undo_only_last_batch(self, applier):
        words = corpus()
        by_id = {w.id: w for w in words}
        applier.apply_to_all(words, [SoundChangeRule("k", "g")])
        applier.apply_to_all(words, [SoundChangeRule("a", "e")])

        applier.undo_last_batch(by_id.get)

        assert [w.term for w in words] == ["gata", "mo", "aga"]
        assert applier.history.can_undo()

    def test_undo_skips_edited_words(self, applier):
        words = corpus()
        by_id = {w.id: w for w in words}
        applier.apply_to_all(words, RULES)
        words[0].term = "hand-edited"

        restored = applier.undo_last_batch(by_id.get)

        assert restored == 1
        assert words[0].term == "hand-edited"
        assert words[2].term == "aka"

    def test_undo_skips_missing_words(self, applier):
        words = corpus()
        applier.apply_to_all(words, RULES)
        assert applier.undo_last_batch(lambda word_id: None) == 0

    def test_restore_keeps_batch_until_forgotten(self, applier):
        words = corpus()
        by_id = {w.id: w for w in words}
        applier.apply_to_all(words, RULES)

        assert applier.restore_last_batch(by_id.get) == 2
        assert applier.history.can_undo()

        assert applier.forget_last_batch()
        assert not applier.history.can_undo()
        assert not applier.forget_last_batch()

    def test_undo_with_nothing_recorded(self, applier):
        assert applier.undo_last_batch(lambda word_id: None) == 0

    def test_undo_without_history(self):
        assert SoundChangeApplier().undo_last_batch(lambda word_id: None) == 0


class TestApplierConfig:
    """Applier settings from the configuration file."""

    def test_from_config(self, condict_home):
        AppConfig.set("sound_change.batch_workers", 3)

        applier = SoundChangeApplier.from_config()

        assert applier.max_workers == 3
        assert isinstance(applier.engine, SoundChangeEngine)
        assert applier.history.history_file == condict_home / "config" / "sound_change_history.json"

    def test_history_disabled(self):
        AppConfig.set("history.enabled", False)
        assert SoundChangeApplier.from_config().history is None
