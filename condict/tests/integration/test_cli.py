"""
Integration tests for the command line interface.

Each test runs against a fresh CONDICT_HOME with a file-backed SQLite
database.
"""

import json

import pytest

from condict import __version__
from condict.__main__ import run_cli


def run(capsys, *argv):
    code = run_cli(list(argv))
    out, err = capsys.readouterr()
    return code, out, err


class TestVersionAndHelp:
    """Top-level options."""

    def test_version(self, capsys):
        code, out, _ = run(capsys, "--version")
        assert code == 0
        assert __version__ in out

    def test_no_command(self, capsys):
        code, out, _ = run(capsys)
        assert code == 1
        assert "usage" in out.lower()


class TestApplyCommand:
    """Previewing a word."""

    def test_apply_rules_in_order(self, capsys):
        code, out, _ = run(capsys, "apply", "aa", "-r", "a", "b", "-r", "b", "c")
        assert code == 0
        assert out.strip() == "cc"

    def test_apply_skips_bad_rule(self, capsys):
        code, out, err = run(capsys, "apply", "cat", "-r", "(unclosed", "x", "-r", "t", "d")
        assert code == 0
        assert out.strip() == "cad"
        assert "rule 0" in err

    def test_verbose_rules(self, capsys):
        code, out, _ = run(capsys, "apply", "kat", "--verbose-rules", "-r", "k", "g", "-r", "z", "s", "-r", "", "x")
        lines = out.splitlines()
        assert lines[0] == "gat"
        assert "matched" in lines[1]
        assert "no match" in lines[2]
        assert "disabled" in lines[3]

    def test_apply_without_rules(self, capsys):
        code, _, err = run(capsys, "apply", "kat")
        assert code == 1
        assert "no rules" in err

    def test_apply_with_preset(self, capsys):
        run(capsys, "presets", "save", "Voicing", "-r", "t", "d")
        code, out, _ = run(capsys, "apply", "kata", "--preset", "Voicing", "-r", "k", "g")
        assert code == 0
        assert out.strip() == "gada"

    def test_apply_missing_preset(self, capsys):
        code, _, err = run(capsys, "apply", "kata", "--preset", "Nope")
        assert code == 1
        assert "preset not found" in err


class TestPresetsCommand:
    """Managing presets."""

    def test_save_list_show(self, capsys):
        code, out, _ = run(capsys, "presets", "save", "Grimm", "-r", "p", "f", "-r", "t", "θ")
        assert code == 0
        assert "Saved preset 'Grimm' (2 rules)" in out

        _, out, _ = run(capsys, "presets", "list")
        assert "Grimm (2 rules)" in out

        _, out, _ = run(capsys, "presets", "show", "Grimm")
        assert "[0] p -> f" in out
        assert "[1] t -> θ" in out

    def test_empty_list(self, capsys):
        _, out, _ = run(capsys, "presets", "list")
        assert "No presets saved." in out

    def test_save_duplicate(self, capsys):
        run(capsys, "presets", "save", "Grimm", "-r", "p", "f")
        code, _, err = run(capsys, "presets", "save", "Grimm", "-r", "b", "v")
        assert code == 1
        assert "already exists" in err

        code, _, _ = run(capsys, "presets", "save", "Grimm", "-r", "b", "v", "--overwrite")
        assert code == 0
        _, out, _ = run(capsys, "presets", "show", "Grimm")
        assert "b -> v" in out

    def test_save_requires_usable_first_rule(self, capsys):
        code, _, err = run(capsys, "presets", "save", "Empty", "-r", "", "x")
        assert code == 1
        assert "first rule" in err

    def test_delete(self, capsys):
        run(capsys, "presets", "save", "Grimm", "-r", "p", "f")
        assert run(capsys, "presets", "delete", "Grimm")[0] == 0
        assert run(capsys, "presets", "delete", "Grimm")[0] == 1

    def test_export_import(self, capsys, tmp_path):
        path = tmp_path / "presets.json"
        run(capsys, "presets", "save", "Grimm", "-r", "p", "f")
        run(capsys, "presets", "save", "Verner", "-r", "s", "z")

        code, out, _ = run(capsys, "presets", "export", str(path))
        assert code == 0
        assert "Exported 2 presets" in out
        assert len(json.loads(path.read_text(encoding="utf-8"))["presets"]) == 2

        run(capsys, "presets", "delete", "Verner")
        code, out, _ = run(capsys, "presets", "import", str(path))
        assert code == 0
        assert "Imported 1 presets" in out
        assert "Skipped existing preset 'Grimm'" in out

    def test_import_bad_file(self, capsys, tmp_path):
        path = tmp_path / "presets.json"
        path.write_text("nope", encoding="utf-8")
        code, _, err = run(capsys, "presets", "import", str(path))
        assert code == 1
        assert "Error" in err

    def test_import_rules_not_a_list(self, capsys, tmp_path):
        path = tmp_path / "presets.json"
        path.write_text(json.dumps({"presets": [{"name": "A", "rules": "ab"}]}), encoding="utf-8")
        code, _, err = run(capsys, "presets", "import", str(path))
        assert code == 1
        assert "Error" in err

    def test_json_backend(self, capsys, condict_home):
        from condict.core.config import AppConfig
        AppConfig.set("presets.backend", "json")

        run(capsys, "presets", "save", "Grimm", "-r", "p", "f")

        assert (condict_home / "config" / "sound_change_presets.json").exists()


class TestWordsAndEvolve:
    """Corpus commands."""

    @pytest.fixture
    def corpus(self, capsys):
        for term in ["kata", "mika", "suna"]:
            run(capsys, "words", "add", term)

    def test_words_list(self, capsys, corpus):
        code, out, _ = run(capsys, "words", "list")
        assert code == 0
        assert [line.split("\t")[1] for line in out.splitlines()] == ["kata", "mika", "suna"]

    def test_evolve_all_and_undo(self, capsys, corpus):
        code, out, _ = run(capsys, "evolve-all", "-r", "k", "g", "-r", "a$", "e")
        assert code == 0
        assert "kata -> gate" in out
        assert "3 of 3 words changed" in out

        _, out, _ = run(capsys, "words", "list")
        assert [line.split("\t")[1] for line in out.splitlines()] == ["gate", "mige", "sune"]

        code, out, _ = run(capsys, "undo")
        assert code == 0
        assert "Restored 3 words" in out

        _, out, _ = run(capsys, "words", "list")
        assert [line.split("\t")[1] for line in out.splitlines()] == ["kata", "mika", "suna"]

    def test_evolve_all_dry_run(self, capsys, corpus):
        code, out, _ = run(capsys, "evolve-all", "-r", "k", "g", "--dry-run")
        assert code == 0
        assert "dry run" in out

        _, out, _ = run(capsys, "words", "list")
        assert "kata" in out

    def test_evolve_all_with_preset_and_workers(self, capsys, corpus):
        run(capsys, "presets", "save", "Final", "-r", "a$", "o")
        code, out, _ = run(capsys, "evolve-all", "--preset", "Final", "--workers", "2")
        assert code == 0
        assert "3 of 3 words changed" in out

    def test_undo_with_nothing(self, capsys):
        code, out, _ = run(capsys, "undo")
        assert code == 0
        assert "Nothing to undo." in out

    def test_words_export_import(self, capsys, corpus, tmp_path):
        path = tmp_path / "words.json"

        code, out, _ = run(capsys, "words", "export", str(path))
        assert code == 0
        assert "Exported 3 words" in out

        code, out, _ = run(capsys, "words", "import", str(path))
        assert code == 0
        assert "Successfully imported 3 words into 'Imported Data'." in out

        _, out, _ = run(capsys, "words", "list")
        assert len(out.splitlines()) == 6

    def test_words_import_malformed(self, capsys, tmp_path):
        path = tmp_path / "words.json"
        path.write_text('{"term": "x"}', encoding="utf-8")
        code, _, err = run(capsys, "words", "import", str(path))
        assert code == 1
        assert "Error" in err
