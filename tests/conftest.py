"""Pytest configuration shared by the test suite.

Puts the workspace ``packages/`` dir on ``sys.path`` so ``ims_interchange``
is importable without an install, and provides a fixed export context so
every time-dependent field (headers, export dates, run numbers, fiscal
periods) renders the same on every run.
"""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
# Ensure `packages/` precedes the repo root on sys.path so local packages resolve first.
sys.path[:0] = [p for p in [str(_PKG_DIR)] if p not in sys.path]

from ims_interchange.models import (  # noqa: E402
    AccountHolder,
    ExportContext,
    Fund,
    LookupTables,
    MetadataItem,
    MethodOfPayment,
)

RUN_AT = datetime(2025, 3, 14, 9, 26, 53)


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests independent of the developer's shell and ``.env``."""

    for var in ("IMS_IMPORT_DIR", "IMS_EXPORT_DIR", "IMS_INTERCHANGE_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def lookups() -> LookupTables:
    return LookupTables(
        funds=(
            Fund(fund_code="2", fund_name="Council Tax"),
            Fund(
                fund_code="9",
                fund_name="Parking Fines",
                metadata=(
                    MetadataItem(key="ExportToLedger", value="True"),
                    MetadataItem(key="UseGeneralLedgerCode", value="True"),
                    MetadataItem(key="GeneralLedgerCode", value="P100/L1234"),
                ),
            ),
            Fund(
                fund_code="10",
                fund_name="Income",
                metadata=(MetadataItem(key="ExportToLedger", value="True"),),
            ),
        ),
        methods_of_payment=(
            MethodOfPayment(code="1", name="Kiosk"),
            MethodOfPayment(code="12", name="Post Office"),
            MethodOfPayment(code="22", name="Transfer"),
        ),
        account_holders=(AccountHolder(account_reference="ACC001", user_field1="R200/L5555"),),
    )


@pytest.fixture
def export_ctx(lookups: LookupTables) -> ExportContext:
    return ExportContext(run_at=RUN_AT, lookups=lookups)
