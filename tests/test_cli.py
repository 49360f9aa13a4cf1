import json

import pytest
from typer.testing import CliRunner

from ims_interchange import cli
from ims_interchange.models import ImportBatch, import_batch_adapter

runner = CliRunner()


@pytest.fixture(autouse=True)
def _no_global_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    # Each invocation swaps sys.stderr; a handler bound to it would outlive the run.
    monkeypatch.setattr(cli, "configure_logging", lambda *a, **k: None)


def test_check_digit_command():
    result = runner.invoke(cli.app, ["check-digit", "council_tax", "103012"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "103012L"


def test_check_digit_rejects_bad_input():
    result = runner.invoke(cli.app, ["check-digit", "council_tax", "10301"])
    assert result.exit_code == 1

    result = runner.invoke(cli.app, ["check-digit", "parking", "103012"])
    assert result.exit_code == 1


def test_decode_command():
    result = runner.invoke(cli.app, ["decode", "98265029000800950031019"])
    assert result.exit_code == 0
    assert result.stdout == "8\t95003101A\n"


def test_transform_then_export(tmp_path):
    source = tmp_path / "bailiff.csv"
    source.write_text(
        "01/03/2025,90014096H,40.00,Housing Rents,1\n"
        "02/03/2025,0600000B,20.00,Sundry Debt,7654321\n"
        "bad,0600000B,20.00,Sundry Debt,7654321\n",
        encoding="utf-8",
    )
    batch_json = tmp_path / "batch.json"

    result = runner.invoke(
        cli.app, ["transform", "bailiff", str(source), "--out", str(batch_json)]
    )
    assert result.exit_code == 0, result.output
    batch: ImportBatch = import_batch_adapter.validate_json(batch_json.read_text())
    assert batch.number_of_rows == 2
    assert batch.excluded == 1

    lookups = tmp_path / "lookups.json"
    lookups.write_text(json.dumps({"funds": [], "methodsOfPayment": [], "accountHolders": []}))
    out_dir = tmp_path / "exports"
    out_dir.mkdir()

    result = runner.invoke(
        cli.app,
        [
            "export",
            "sundry_debtors",
            str(batch_json),
            "--lookups",
            str(lookups),
            "--out",
            str(out_dir),
            "--run-at",
            "2025-03-14T09:26:53",
        ],
    )
    assert result.exit_code == 0, result.output
    written = out_dir / "SDPAY14.txt"
    assert result.stdout.strip() == str(written)
    psp = batch.rows[1].psp_reference
    assert psp.startswith("BLF-") and psp.endswith("-2")
    assert written.read_bytes().decode("utf-8") == (
        f"{psp},20,14/03/2025,0600000B,02 Mar 25 , ,20.00,0600000B,02/03/2025\r\n"
    )


def test_transform_missing_file_fails(tmp_path):
    result = runner.invoke(cli.app, ["transform", "bailiff", str(tmp_path / "nope.csv")])
    assert result.exit_code == 1


def test_export_defaults_to_export_dir(tmp_path, monkeypatch):
    transactions = tmp_path / "txs.json"
    transactions.write_text("[]", encoding="utf-8")
    monkeypatch.setenv("IMS_EXPORT_DIR", str(tmp_path / "exports"))

    result = runner.invoke(
        cli.app, ["export", "housing_rents", str(transactions), "--run-at", "2025-03-14"]
    )

    assert result.exit_code == 0, result.output
    assert (tmp_path / "exports" / "CASH1.dat").read_bytes() == b""


def test_export_rejects_bad_transactions(tmp_path):
    transactions = tmp_path / "txs.json"
    transactions.write_text('[{"amount": "lots"}]', encoding="utf-8")
    result = runner.invoke(cli.app, ["export", "housing_rents", str(transactions)])
    assert result.exit_code == 1
