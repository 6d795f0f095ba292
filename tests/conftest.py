"""Pytest fixtures for testing"""

import csv
from decimal import Decimal
from pathlib import Path
from typing import Callable, List

import pytest
from fastapi.testclient import TestClient

from loanbook.api.main import create_app
from loanbook.domain.models import Covenant, Facility, Loan


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    return TestClient(create_app())


@pytest.fixture
def make_facility() -> Callable[..., Facility]:
    def _make(id: int = 1, bank_id: int = 1, interest_rate: str = "0.05", capacity: int = 100_000) -> Facility:
        return Facility(id=id, bank_id=bank_id, interest_rate=Decimal(interest_rate), capacity=capacity)

    return _make


@pytest.fixture
def make_loan() -> Callable[..., Loan]:
    def _make(
        id: int = 1,
        amount: int = 10_000,
        interest_rate: str = "0.08",
        default_rate: str = "0.02",
        state: str = "CA",
    ) -> Loan:
        return Loan(
            id=id,
            amount=amount,
            interest_rate=Decimal(interest_rate),
            default_rate=Decimal(default_rate),
            state=state,
        )

    return _make


@pytest.fixture
def make_covenant() -> Callable[..., Covenant]:
    def _make(
        bank_id: int = 1,
        facility_id: int | None = None,
        max_default_rate: str | None = None,
        banned_state: str | None = None,
    ) -> Covenant:
        return Covenant(
            bank_id=bank_id,
            facility_id=facility_id,
            max_default_rate=Decimal(max_default_rate) if max_default_rate is not None else None,
            banned_state=banned_state,
        )

    return _make


@pytest.fixture
def write_csv() -> Callable[[Path, List[List[str]]], Path]:
    """Write rows (header first) to a CSV file"""

    def _write(path: Path, rows: List[List[str]]) -> Path:
        with open(path, "w", newline="", encoding="utf-8") as fh:
            csv.writer(fh).writerows(rows)
        return path

    return _write


@pytest.fixture
def record_dir(tmp_path: Path, write_csv) -> Path:
    """
    Small data set in the original column layout.

    Two banks, one facility each:
    - facility 1: bank 2, rate 0.06, bans VT and CA, max default 0.06
    - facility 2: bank 1, rate 0.07, bans MT, max default 0.09
    """
    data_dir = tmp_path / "data"
    data_dir.mkdir()

    write_csv(data_dir / "banks.csv", [
        ["id", "name"],
        ["1", "Chase"],
        ["2", "Bank of America"],
    ])
    write_csv(data_dir / "facilities.csv", [
        ["amount", "interest_rate", "id", "bank_id"],
        ["61104.0", "0.07", "2", "1"],
        ["126122.0", "0.06", "1", "2"],
    ])
    write_csv(data_dir / "covenants.csv", [
        ["facility_id", "max_default_likelihood", "bank_id", "banned_state"],
        ["2", "0.09", "1", "MT"],
        ["1", "0.06", "2", "VT"],
        ["1", "", "2", "CA"],
    ])
    write_csv(data_dir / "loans.csv", [
        ["interest_rate", "amount", "id", "default_likelihood", "state"],
        ["0.15", "10552", "1", "0.02", "MO"],
        ["0.15", "51157", "2", "0.01", "VT"],
        ["0.35", "74965", "3", "0.06", "AL"],
        ["0.2", "50000", "4", "0.03", "TX"],
        ["0.1", "9000", "5", "0.10", "NY"],
        ["0.12", "5000", "6", "0.01", "CA"],
    ])
    return data_dir
