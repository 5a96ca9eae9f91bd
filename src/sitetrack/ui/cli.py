# ruff: noqa: T201

from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from dotenv import load_dotenv

from sitetrack import __version__
from sitetrack.app import (
    edit_entity,
    import_dodge_rows,
    import_kyc_rows,
    import_office_rows,
    unlock_fields,
)
from sitetrack.config import ConfigurationError, configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

SOURCES = ("dodge", "offices", "kyc")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sitetrack", description="Reconcile spreadsheet imports with sitetrack"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Import a CSV export")
    import_parser.add_argument("source", choices=SOURCES, help="Kind of export being imported")
    import_parser.add_argument("path", type=Path, help="CSV file with a header row")
    import_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would happen without writing anything",
    )

    edit = subparsers.add_parser("edit", help="Edit an entity by hand (locks edited fields)")
    edit.add_argument("entity_id", type=str, help="Id of the entity to edit")
    edit.add_argument(
        "--set",
        dest="assignments",
        action="append",
        required=True,
        metavar="FIELD=VALUE",
        help="Field assignment; may be repeated",
    )

    unlock = subparsers.add_parser("unlock", help="Let imports update locked fields again")
    unlock.add_argument("entity_id", type=str, help="Id of the entity to unlock")
    unlock.add_argument(
        "--field",
        dest="fields",
        action="append",
        help="Field to unlock; may be repeated (defaults to all locked fields)",
    )

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _parse_assignments(assignments: Sequence[str]) -> dict[str, str]:
    changes: dict[str, str] = {}
    for assignment in assignments:
        name, sep, value = assignment.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Expected FIELD=VALUE, got {assignment!r}")
        changes[name.strip()] = value
    return changes


def _read_rows(path: Path) -> list[dict[str, str]]:
    with path.open(newline="", encoding="utf-8-sig") as handle:
        return list(csv.DictReader(handle))


def _run_import(args: argparse.Namespace) -> dict[str, Any]:
    rows = _read_rows(args.path)
    match args.source:
        case "dodge":
            return import_dodge_rows(rows, dry_run=args.dry_run).to_dict()
        case "offices":
            return import_office_rows(rows, dry_run=args.dry_run).to_dict()
        case "kyc":
            result = import_kyc_rows(rows, dry_run=args.dry_run)
            return {
                "companies": result.companies.to_dict(),
                "contacts": result.contacts.to_dict(),
                "interactions": result.interactions.to_dict(),
                "skipped_rows": list(result.skipped_rows),
            }
        case _:
            raise ValueError(f"Unsupported source: {args.source}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "import":
            output: dict[str, Any] = _run_import(parsed_args)
        elif parsed_args.command == "edit":
            entity = edit_entity(
                _parse_uuid(parsed_args.entity_id),
                _parse_assignments(parsed_args.assignments),
            )
            output = {"id": str(entity.id), "locked_fields": sorted(entity.locked_fields)}
        elif parsed_args.command == "unlock":
            remaining = unlock_fields(_parse_uuid(parsed_args.entity_id), parsed_args.fields)
            output = {"id": parsed_args.entity_id, "locked_fields": sorted(remaining)}
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except (ValueError, ConfigurationError, OSError):
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)

    print(json.dumps(output, indent=2, sort_keys=True))


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
