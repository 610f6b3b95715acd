"""
ConDict - Command Line Entry Point

Usage:
    python -m condict apply kata -r "t" "d"
    python -m condict presets list
    python -m condict evolve-all --preset "Grimm's Law" --dry-run

Or via the installed command:
    condict
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="condict",
        description="Constructed Language Dictionary Manager"
    )

    parser.add_argument(
        "--version", "-v",
        action="store_true",
        help="Show version information"
    )

    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level (default: WARNING)"
    )

    commands = parser.add_subparsers(dest="command")

    rule_help = "Sound change rule: regex pattern and replacement template (repeatable)"

    # apply
    apply_parser = commands.add_parser("apply", help="Preview a word run through a rule set")
    apply_parser.add_argument("word", help="Word to evolve")
    apply_parser.add_argument(
        "-r", "--rule", nargs=2, action="append", default=[],
        metavar=("FIND", "REPLACE"), help=rule_help
    )
    apply_parser.add_argument("--preset", metavar="NAME", help="Start from a saved preset")
    apply_parser.add_argument(
        "--verbose-rules", action="store_true",
        help="Show which rules matched and which were skipped"
    )

    # presets
    presets_parser = commands.add_parser("presets", help="Manage saved rule sets")
    preset_commands = presets_parser.add_subparsers(dest="preset_command")

    preset_commands.add_parser("list", help="List presets")

    show_parser = preset_commands.add_parser("show", help="Show a preset's rules")
    show_parser.add_argument("name")

    save_parser = preset_commands.add_parser("save", help="Save a rule set as a preset")
    save_parser.add_argument("name")
    save_parser.add_argument(
        "-r", "--rule", nargs=2, action="append", default=[],
        metavar=("FIND", "REPLACE"), help=rule_help
    )
    save_parser.add_argument("--overwrite", action="store_true", help="Replace an existing preset")

    delete_parser = preset_commands.add_parser("delete", help="Delete a preset")
    delete_parser.add_argument("name")

    export_parser = preset_commands.add_parser("export", help="Write all presets to a JSON file")
    export_parser.add_argument("path")

    import_parser = preset_commands.add_parser("import", help="Read presets from a JSON file")
    import_parser.add_argument("path")
    import_parser.add_argument("--overwrite", action="store_true", help="Replace presets with the same name")

    # evolve-all
    evolve_parser = commands.add_parser("evolve-all", help="Apply a rule set to every stored word")
    evolve_parser.add_argument(
        "-r", "--rule", nargs=2, action="append", default=[],
        metavar=("FIND", "REPLACE"), help=rule_help
    )
    evolve_parser.add_argument("--preset", metavar="NAME", help="Use a saved preset")
    evolve_parser.add_argument("--library", type=int, metavar="ID", help="Only words of this library")
    evolve_parser.add_argument("--dry-run", action="store_true", help="Show changes without saving them")
    evolve_parser.add_argument("--workers", type=int, metavar="N", help="Worker threads")

    # undo
    commands.add_parser("undo", help="Undo the last evolve-all batch")

    # words
    words_parser = commands.add_parser("words", help="Manage the word corpus")
    word_commands = words_parser.add_subparsers(dest="word_command")

    list_parser = word_commands.add_parser("list", help="List words")
    list_parser.add_argument("--library", type=int, metavar="ID", help="Only words of this library")

    add_parser = word_commands.add_parser("add", help="Add a word")
    add_parser.add_argument("term")
    add_parser.add_argument("--definition", default="")
    add_parser.add_argument("--library", type=int, metavar="ID")

    words_export = word_commands.add_parser("export", help="Write words to a JSON file")
    words_export.add_argument("path")
    words_export.add_argument("--library", type=int, metavar="ID", help="Only words of this library")

    words_import = word_commands.add_parser("import", help="Import words into a new library")
    words_import.add_argument("path")

    return parser


def _rules_from_args(args: argparse.Namespace):
    """Preset rules (if --preset is given) followed by the -r rules."""
    from condict.application.sound_change import get_preset_store, rules_from_preset
    from condict.domain.models import SoundChangeRule

    rules = []
    if getattr(args, "preset", None):
        rules.extend(rules_from_preset(get_preset_store().get(args.preset)))
    rules.extend(SoundChangeRule(find, replace) for find, replace in args.rule)
    return rules


def _print_skipped(skipped) -> None:
    for s in skipped:
        print(f"warning: rule {s.index} ({s.find!r}) skipped: {s.reason.value} {s.message}", file=sys.stderr)


def _cmd_apply(args: argparse.Namespace) -> int:
    from condict.application.sound_change import SoundChangeApplier

    rules = _rules_from_args(args)
    if not rules:
        print("Error: no rules given (use -r FIND REPLACE or --preset NAME)", file=sys.stderr)
        return 1

    result = SoundChangeApplier.from_config().preview(args.word, rules)
    print(result.output)

    if args.verbose_rules:
        skipped = {s.index: s for s in result.skipped}
        for index, rule in enumerate(rules):
            if index in skipped:
                status = f"skipped ({skipped[index].reason.value})"
            elif index in result.matched:
                status = "matched"
            elif index in result.applied:
                status = "no match"
            else:
                status = "disabled"
            print(f"  [{index}] {rule}: {status}")

    _print_skipped(result.skipped)
    return 0


def _cmd_presets(args: argparse.Namespace) -> int:
    from condict.application.sound_change import (
        RuleSetEditor,
        export_presets,
        get_preset_store,
        import_presets,
        import_presets_into,
    )

    store = get_preset_store()
    command = args.preset_command

    if command == "list":
        presets = store.list()
        if not presets:
            print("No presets saved.")
        for preset in presets:
            print(f"{preset.name} ({preset.rule_count} rules)")
        return 0

    if command == "show":
        preset = store.get(args.name)
        for index, rule in enumerate(preset.rules):
            print(f"[{index}] {rule}")
        return 0

    if command == "save":
        editor = RuleSetEditor(_rules_from_args(args))
        if not editor.can_save_preset:
            print("Error: a preset needs at least one rule and the first rule needs a pattern", file=sys.stderr)
            return 1
        preset = store.save(args.name, editor.rules, overwrite=args.overwrite)
        print(f"Saved preset '{preset.name}' ({preset.rule_count} rules)")
        return 0

    if command == "delete":
        if not store.delete(args.name):
            print(f"Error: preset not found: {args.name!r}", file=sys.stderr)
            return 1
        print(f"Deleted preset '{args.name}'")
        return 0

    if command == "export":
        count = export_presets(store.list(), args.path)
        print(f"Exported {count} presets to {args.path}")
        return 0

    if command == "import":
        imported, skipped = import_presets_into(store, import_presets(args.path), overwrite=args.overwrite)
        print(f"Imported {len(imported)} presets")
        for name in skipped:
            print(f"Skipped existing preset '{name}' (use --overwrite to replace)")
        return 0

    print("Error: choose a presets command (list, show, save, delete, export, import)", file=sys.stderr)
    return 1


def _cmd_evolve_all(args: argparse.Namespace) -> int:
    from condict.application.sound_change import SoundChangeApplier
    from condict.infrastructure.database.repositories import WordRepository

    rules = _rules_from_args(args)
    if not rules:
        print("Error: no rules given (use -r FIND REPLACE or --preset NAME)", file=sys.stderr)
        return 1

    applier = SoundChangeApplier.from_config()
    if args.workers:
        applier.max_workers = max(1, args.workers)

    result = WordRepository().evolve_all(applier, rules, library_id=args.library, dry_run=args.dry_run)

    for change in result.changes:
        print(f"{change.old_term} -> {change.new_term}")
    _print_skipped(result.skipped_rules)

    suffix = " (dry run, nothing saved)" if result.dry_run else ""
    print(f"{result.changed} of {result.total} words changed{suffix}")
    return 0


def _cmd_undo(args: argparse.Namespace) -> int:
    from condict.application.sound_change import SoundChangeApplier
    from condict.infrastructure.database.repositories import WordRepository

    applier = SoundChangeApplier.from_config()
    if applier.history is None or not applier.history.can_undo():
        print("Nothing to undo.")
        return 0

    restored = WordRepository().undo_last_batch(applier)
    print(f"Restored {restored} words")
    return 0


def _cmd_words(args: argparse.Namespace) -> int:
    from condict.application.library_manager import export_words, import_words
    from condict.infrastructure.database import session_scope
    from condict.infrastructure.database.repositories import WordRepository

    command = args.word_command

    if command == "list":
        for word in WordRepository().list_words(library_id=args.library):
            print(f"{word.id}\t{word.term}")
        return 0

    if command == "add":
        word = WordRepository().create(args.term, library_id=args.library, definition=args.definition)
        print(f"Added word {word.id}: {word.term}")
        return 0

    if command == "export":
        with session_scope() as session:
            count = export_words(session, args.path, library_id=args.library)
        print(f"Exported {count} words to {args.path}")
        return 0

    if command == "import":
        with session_scope() as session:
            result = import_words(session, args.path)
        print(f"Successfully imported {result.imported} words into '{result.library_name}'.")
        return 0

    print("Error: choose a words command (list, add, export, import)", file=sys.stderr)
    return 1


_COMMANDS = {
    "apply": _cmd_apply,
    "presets": _cmd_presets,
    "evolve-all": _cmd_evolve_all,
    "undo": _cmd_undo,
    "words": _cmd_words,
}


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run the command line interface.

    Returns:
        int: Exit code (0 for success, 1 for errors).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        from condict import __version__
        print(f"ConDict v{__version__}")
        return 0

    if not args.command:
        parser.print_help()
        return 1

    try:
        from condict.runtime.bootstrap import bootstrap, BootstrapError
        bootstrap()
    except BootstrapError as e:
        print(f"Failed to initialize runtime: {e}", file=sys.stderr)
        return 1

    # The log file keeps INFO and above whatever the console shows
    if args.log_level == "DEBUG":
        logging.getLogger().setLevel(logging.DEBUG)
    for handler in logging.getLogger().handlers:
        if type(handler) is logging.StreamHandler:
            handler.setLevel(args.log_level)

    from condict.domain.exceptions import ConDictError

    try:
        return _COMMANDS[args.command](args)
    except ConDictError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for ConDict."""
    return run_cli(argv)


if __name__ == "__main__":
    sys.exit(main())
