"""CSV record loader for banks, facilities, covenants and loans"""

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Tuple, Type, TypeVar

from pydantic import ValidationError

from loanbook.config import Settings, settings as default_settings
from loanbook.domain.exceptions import DuplicateRecordError, IntegrityError, RecordLoadError
from loanbook.domain.models import Bank, Covenant, Facility, Loan
from loanbook.infrastructure.records.schemas import (
    BankRecord,
    CovenantRecord,
    FacilityRecord,
    LoanRecord,
    RecordSchema,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=RecordSchema)


@dataclass
class SetupRecords:
    """Everything the engine needs before the first loan arrives"""

    banks: Dict[int, Bank]
    facilities: List[Facility]
    covenants: List[Covenant]


def _required_columns(schema: Type[RecordSchema]) -> List[str]:
    return [name for name, f in schema.model_fields.items() if f.is_required()]


def read_records(path: Path, schema: Type[R]) -> Iterator[Tuple[int, R]]:
    """
    Stream validated rows from a CSV file with a header line.

    Columns are matched by header name. Any unreadable file, missing column or
    invalid field raises RecordLoadError naming the file and line; nothing is
    substituted for a bad value.
    """
    source = path.name
    try:
        fh = open(path, newline="", encoding="utf-8-sig")
    except OSError as e:
        raise RecordLoadError(f"Cannot open record file: {e.strerror}", source=source) from e

    with fh:
        reader = csv.DictReader(fh)
        try:
            header = reader.fieldnames
        except csv.Error as e:
            raise RecordLoadError(f"Malformed header: {e}", source=source, line=1) from e
        if not header:
            raise RecordLoadError("Missing header line", source=source)

        header = [h.strip() for h in header]
        reader.fieldnames = header
        missing = [c for c in _required_columns(schema) if c not in header]
        if missing:
            raise RecordLoadError(f"Missing columns: {', '.join(missing)}", source=source, line=1)

        try:
            for row in reader:
                if None in row:
                    raise RecordLoadError("Too many fields", source=source, line=reader.line_num)
                try:
                    yield reader.line_num, schema.model_validate(row)
                except ValidationError as e:
                    raise RecordLoadError(_describe(e), source=source, line=reader.line_num) from e
        except csv.Error as e:
            raise RecordLoadError(f"Malformed CSV: {e}", source=source, line=reader.line_num) from e


def _describe(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        field = ".".join(str(p) for p in err["loc"]) or "row"
        parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts)


def load_banks(path: Path) -> Dict[int, Bank]:
    banks: Dict[int, Bank] = {}
    for line, record in read_records(path, BankRecord):
        if record.id in banks:
            raise DuplicateRecordError(f"Duplicate bank id {record.id}", source=path.name, line=line)
        banks[record.id] = record.to_domain()
    return banks


def load_facilities(path: Path) -> List[Facility]:
    facilities: List[Facility] = []
    seen = set()
    for line, record in read_records(path, FacilityRecord):
        if record.id in seen:
            raise DuplicateRecordError(f"Duplicate facility id {record.id}", source=path.name, line=line)
        seen.add(record.id)
        facilities.append(record.to_domain())
    return facilities


def load_covenants(path: Path) -> List[Covenant]:
    return [record.to_domain() for _, record in read_records(path, CovenantRecord)]


def iter_loans(path: Path) -> Iterator[Loan]:
    """Yield loans lazily in file order, which is their arrival order"""
    seen = set()
    for line, record in read_records(path, LoanRecord):
        if record.id in seen:
            raise DuplicateRecordError(f"Duplicate loan id {record.id}", source=path.name, line=line)
        seen.add(record.id)
        yield record.to_domain()


def check_integrity(
    banks: Dict[int, Bank],
    facilities: List[Facility],
    covenants: List[Covenant],
) -> None:
    """Verify every foreign key points at a loaded record"""
    facility_bank = {}
    for facility in facilities:
        if facility.bank_id not in banks:
            raise IntegrityError(f"Facility {facility.id} references unknown bank {facility.bank_id}")
        facility_bank[facility.id] = facility.bank_id

    for covenant in covenants:
        if covenant.bank_id not in banks:
            raise IntegrityError(f"Covenant references unknown bank {covenant.bank_id}")
        if covenant.facility_id is None:
            continue
        if covenant.facility_id not in facility_bank:
            raise IntegrityError(f"Covenant references unknown facility {covenant.facility_id}")
        if facility_bank[covenant.facility_id] != covenant.bank_id:
            raise IntegrityError(
                f"Covenant for facility {covenant.facility_id} names bank {covenant.bank_id}, "
                f"but the facility belongs to bank {facility_bank[covenant.facility_id]}"
            )


def load_setup(data_dir: Path, config: Settings = default_settings) -> SetupRecords:
    """Load and cross-check banks, facilities and covenants; fails before any loan is read"""
    banks = load_banks(data_dir / config.banks_file)
    facilities = load_facilities(data_dir / config.facilities_file)
    covenants = load_covenants(data_dir / config.covenants_file)
    check_integrity(banks, facilities, covenants)

    logger.info(
        "Setup records loaded",
        extra={
            "step": "setup_loaded",
            "banks": len(banks),
            "facilities": len(facilities),
            "covenants": len(covenants),
        },
    )
    return SetupRecords(banks=banks, facilities=facilities, covenants=covenants)
