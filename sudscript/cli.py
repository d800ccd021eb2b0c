"""Command line entry point: import a script file and report what it holds."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence, TextIO

from .asset import calculate_hash, populate_script
from .importer import ImporterSettings, ScriptImporter
from .messages import MessageLogger

EXIT_OK = 0
EXIT_IMPORT_FAILED = 1
EXIT_UNREADABLE = 2


class _EchoLogger(MessageLogger):
    """Message logger that also writes every message to a stream as it arrives."""

    def __init__(self, stream: TextIO) -> None:
        super().__init__(write_to_log=False)
        self._stream = stream

    def error(self, text: str) -> None:
        super().error(text)
        print(f"error: {text}", file=self._stream)

    def warning(self, text: str) -> None:
        super().warning(text)
        print(f"warning: {text}", file=self._stream)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sudscript",
        description="Import a dialogue script and summarise the result.",
    )
    parser.add_argument("path", help="script file to import")
    parser.add_argument("--name", help="script name (defaults to the file name without extension)")
    parser.add_argument("--silent", action="store_true", help="suppress most import messages")
    parser.add_argument("--json", action="store_true", help="print the result as JSON")
    parser.add_argument(
        "--generate-speaker-lines",
        action="store_true",
        help="generate a speaker line from every choice unless the script says otherwise",
    )
    parser.add_argument(
        "--choice-speaker",
        default=ImporterSettings().speaker_id_for_generated_lines_from_choices,
        help="speaker ID for lines generated from choices",
    )
    return parser


def _read_script(path: Path) -> str:
    # Keep line endings exactly as written so the hash matches the file
    with path.open(encoding="utf-8", newline="") as handle:
        return handle.read()


def main(argv: Sequence[str] | None = None) -> int:
    """Import the script named on the command line; return the process exit code."""
    args = _build_parser().parse_args(argv)
    path = Path(args.path)
    name = args.name or path.stem

    try:
        text = _read_script(path)
    except (OSError, UnicodeDecodeError) as err:
        print(f"error: cannot read {path}: {err}", file=sys.stderr)
        return EXIT_UNREADABLE

    settings = ImporterSettings(
        always_generate_speaker_lines_from_choices=args.generate_speaker_lines,
        speaker_id_for_generated_lines_from_choices=args.choice_speaker,
    )
    importer = ScriptImporter(settings)
    logger = _EchoLogger(sys.stderr)
    if not importer.import_text(text, name, logger, args.silent):
        print(f"error: import of {name} failed", file=sys.stderr)
        return EXIT_IMPORT_FAILED

    script = populate_script(importer, name)
    if args.json:
        document = {
            "name": script.name,
            "hash": calculate_hash(text),
            "speakers": script.speakers,
            "nodes": len(script.nodes),
            "header_nodes": len(script.header_nodes),
            "labels": script.labels,
            "strings": script.string_table.entries,
            "errors": logger.num_errors(),
        }
        print(json.dumps(document, indent=2, ensure_ascii=False))
    else:
        print(
            f"{script.name}: {len(script.nodes)} nodes, "
            f"{len(script.header_nodes)} header nodes, "
            f"{len(script.string_table)} strings"
        )
        print(f"speakers: {', '.join(script.speakers)}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())