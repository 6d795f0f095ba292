"""CSV report writer for allocation results"""

import csv
import logging
from pathlib import Path
from typing import Dict, Iterable, List

from loanbook.config import Settings, settings as default_settings
from loanbook.domain.models import AllocationResult

logger = logging.getLogger(__name__)

ASSIGNMENT_COLUMNS = ["loan_id", "facility_id"]
YIELD_COLUMNS = ["facility_id", "expected_yield"]
UNASSIGNED_COLUMNS = ["loan_id", "reason"]


def write_rows(path: Path, fieldnames: List[str], rows: Iterable[Dict]) -> int:
    """Write rows with a header line; returns the number of data rows"""
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
            count += 1
    return count


class ReportWriter:
    """Serializes the final state of a run to CSV files in one directory"""

    def __init__(self, output_dir: Path, config: Settings = default_settings):
        self.output_dir = Path(output_dir)
        self.config = config

    def write(self, result: AllocationResult) -> List[Path]:
        """
        Write assignments, yields and (optionally) unassigned loans.

        Returns the paths written.
        """
        written = []

        path = self.output_dir / self.config.assignments_file
        write_rows(
            path,
            ASSIGNMENT_COLUMNS,
            ({"loan_id": a.loan_id, "facility_id": a.facility_id} for a in result.assignments),
        )
        written.append(path)

        path = self.output_dir / self.config.yields_file
        write_rows(
            path,
            YIELD_COLUMNS,
            ({"facility_id": y.facility_id, "expected_yield": y.expected_yield} for y in result.yields),
        )
        written.append(path)

        if self.config.write_unassigned_report:
            path = self.output_dir / self.config.unassigned_file
            write_rows(
                path,
                UNASSIGNED_COLUMNS,
                ({"loan_id": o.loan_id, "reason": o.reason.value} for o in result.unassigned),
            )
            written.append(path)

        logger.info(
            "Reports written",
            extra={"step": "reports_written", "files": [str(p) for p in written]},
        )
        return written
