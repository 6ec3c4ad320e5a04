"""Jarnote CLI entry point.

Allows running via `python -m jarnote` and provides the console script
defined in `pyproject.toml`.
"""

from __future__ import annotations

import sys
from pathlib import Path

from .version import get_version_string

USAGE = """usage: jarnote [--version] COMMAND FILE

commands:
  show FILE    print a note with its formatting
  stats FILE   print word, character and line counts
  edit FILE    edit a note"""


def _load_editor(filename: str):
    from .editor import SpanTextEditor
    from .note_content import load_note_content, read_note_file

    editor = SpanTextEditor()
    load_note_content(editor, read_note_file(filename))
    return editor


def show(filename: str) -> None:
    # Lazy import to avoid importing blessed for the other commands
    from .terminal import NoteRenderer

    NoteRenderer().print_note(_load_editor(filename), title=Path(filename).stem)


def stats(filename: str) -> None:
    from .note_content import compute_stats

    editor = _load_editor(filename)
    print(compute_stats(Path(filename).stem, editor.get_plain_text()).format())


def edit(filename: str) -> None:
    from .textual_app import run

    run(filename)


COMMANDS = {
    'show': show,
    'stats': stats,
    'edit': edit,
}


def main(argv: list[str] | None = None) -> int:
    # Very small arg parsing: a version flag or a command and one file
    args = sys.argv[1:] if argv is None else argv
    if args and args[0] in ("--version", "-V"):
        print(get_version_string())
        return 0
    if args and args[0] in ("--help", "-h"):
        print(USAGE)
        return 0
    if len(args) != 2 or args[0] not in COMMANDS:
        print(USAGE, file=sys.stderr)
        return 2

    command, filename = args
    if command != 'edit' and not Path(filename).is_file():
        print(f"jarnote: {filename}: no such file", file=sys.stderr)
        return 1
    try:
        COMMANDS[command](filename)
    except OSError as e:
        print(f"jarnote: {filename}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
