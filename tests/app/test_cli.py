from __future__ import annotations

import json
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from sitetrack.app import KycImportResult
from sitetrack.domain.model import EntityFamily
from sitetrack.domain.reconciliation import RunReport
from sitetrack.ui import cli

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from sitetrack.adapters.sqlalchemy.unit_of_work import SqlAlchemyImportUnitOfWork


def _write_csv(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_import_passes_rows_and_dry_run_flag(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_import(rows: list[dict[str, str]], *, dry_run: bool) -> RunReport:
        captured.update(rows=rows, dry_run=dry_run)
        return RunReport(family=EntityFamily.OFFICE, dry_run=dry_run)

    monkeypatch.setattr(cli, "import_office_rows", fake_import)
    path = _write_csv(tmp_path / "offices.csv", "name,address\nHQ,1 Main St\n")

    cli.main(["import", "offices", str(path), "--dry-run"])

    assert captured == {"rows": [{"name": "HQ", "address": "1 Main St"}], "dry_run": True}
    output = json.loads(capsys.readouterr().out)
    assert output["dry_run"] is True
    assert output["message"].startswith("Dry-run completed")


def test_import_writes_the_store_and_prints_the_report(
    tmp_path: Path,
    sqlite_unit_of_work: Callable[[], SqlAlchemyImportUnitOfWork],
    capsys: pytest.CaptureFixture[str],
) -> None:
    _ = sqlite_unit_of_work
    path = _write_csv(
        tmp_path / "dodge.csv",
        "\ufeffProject ID,Project Name,Address,Project Value\n"
        "DGE-1,Oak St Tower,1 Main St,\"$1,000\"\n"
        "DGE-2,Elm Plaza,2 Elm St,lots\n",
    )

    cli.main(["import", "dodge", str(path)])

    output = json.loads(capsys.readouterr().out)
    assert (output["inserted"], output["committed"]) == (1, 1)
    assert output["errors"] == [
        {"row": 2, "message": "value: Not a number: 'lots'", "phase": "classify"}
    ]


def test_kyc_import_prints_every_run(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def fake_import(rows: list[dict[str, str]], *, dry_run: bool) -> KycImportResult:
        return KycImportResult(
            companies=RunReport(family=EntityFamily.COMPANY, dry_run=dry_run),
            contacts=RunReport(family=EntityFamily.CONTACT, dry_run=dry_run),
            interactions=RunReport(family=EntityFamily.INTERACTION, dry_run=dry_run),
            skipped_rows=(2,),
        )

    monkeypatch.setattr(cli, "import_kyc_rows", fake_import)
    path = _write_csv(tmp_path / "kyc.csv", "Customer,Contact\nAcme,Jane\n")

    cli.main(["import", "kyc", str(path)])

    output = json.loads(capsys.readouterr().out)
    assert set(output) == {"companies", "contacts", "interactions", "skipped_rows"}
    assert output["interactions"]["family"] == "interaction"
    assert output["skipped_rows"] == [2]


def test_edit_parses_assignments(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    entity_id = uuid4()
    captured: dict[str, object] = {}

    class _Edited:
        id = entity_id
        locked_fields = {"contractor"}

    def fake_edit(received_id: object, changes: dict[str, str]) -> _Edited:
        captured.update(entity_id=received_id, changes=changes)
        return _Edited()

    monkeypatch.setattr(cli, "edit_entity", fake_edit)

    cli.main(
        ["edit", str(entity_id), "--set", "contractor=Hand Picked", "--set", "user_notes=a=b"]
    )

    assert captured == {
        "entity_id": entity_id,
        "changes": {"contractor": "Hand Picked", "user_notes": "a=b"},
    }
    assert json.loads(capsys.readouterr().out)["locked_fields"] == ["contractor"]


def test_unlock_defaults_to_every_field(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_unlock(entity_id: object, fields: list[str] | None) -> set[str]:
        captured.update(entity_id=entity_id, fields=fields)
        return set()

    monkeypatch.setattr(cli, "unlock_fields", fake_unlock)
    entity_id = uuid4()

    cli.main(["unlock", str(entity_id)])

    assert captured == {"entity_id": entity_id, "fields": None}
    assert json.loads(capsys.readouterr().out) == {"id": str(entity_id), "locked_fields": []}


@pytest.mark.parametrize(
    "argv",
    [
        ["edit", "not-a-uuid", "--set", "name=x"],
        ["edit", "00000000-0000-0000-0000-000000000001", "--set", "no-equals-sign"],
        ["import", "dodge", "/definitely/missing.csv"],
    ],
)
def test_invalid_input_exits_with_code_2(argv: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)

    assert excinfo.value.code == 2


def test_unexpected_failure_exits_with_code_1(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_unlock(entity_id: object, fields: list[str] | None) -> set[str]:
        raise RuntimeError("database is gone")

    monkeypatch.setattr(cli, "unlock_fields", broken_unlock)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["unlock", str(uuid4())])

    assert excinfo.value.code == 1


def test_version_flag_prints_the_package_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--version"])

    assert excinfo.value.code == 0
    assert capsys.readouterr().out.startswith("sitetrack ")
