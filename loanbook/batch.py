"""Batch allocation run - reads record files, assigns loans, writes reports"""

import argparse
import logging
import time
import uuid
from pathlib import Path
from typing import List, Optional

from loanbook.config import Settings, settings
from loanbook.domain.engine import AssignmentEngine
from loanbook.domain.exceptions import DomainException
from loanbook.domain.models import AllocationResult
from loanbook.infrastructure.observability.logging import log_run_summary, log_unassigned, setup_logging
from loanbook.infrastructure.observability.metrics import record_run, run_duration_histogram, run_failure_counter
from loanbook.infrastructure.records.loader import iter_loans, load_setup
from loanbook.infrastructure.records.writer import ReportWriter


def run_batch(
    data_dir: Path | None = None,
    output_dir: Path | None = None,
    config: Settings = settings,
) -> AllocationResult:
    """
    Allocate every loan in the data directory and write the reports.

    Flow:
    1. Load banks, facilities and covenants (any failure aborts the run)
    2. Build the engine: sorted ledger + covenant index
    3. Stream loans in file order through the engine
    4. Write assignments, yields and unassigned loans

    Reports are only written once every loan has been processed, so a bad loan
    row leaves no partial output behind.
    """
    data_dir = Path(data_dir or config.data_dir)
    output_dir = Path(output_dir or config.output_dir)
    run_id = str(uuid.uuid4())
    start_time = time.time()

    try:
        setup = load_setup(data_dir, config)
        engine = AssignmentEngine.from_records(
            setup.facilities,
            setup.covenants,
            order=config.candidate_order,
            rounding=config.yield_rounding,
            reject_negative_yield=config.reject_negative_yield,
        )

        for loan in iter_loans(data_dir / config.loans_file):
            outcome = engine.assign(loan)
            if not outcome.assigned:
                log_unassigned(outcome, run_id)

        result = engine.result()
        ReportWriter(output_dir, config).write(result)

    except DomainException:
        run_failure_counter.inc()
        raise

    duration = time.time() - start_time
    run_duration_histogram.observe(duration)
    record_run(result, engine.ledger.utilization())
    log_run_summary(run_id, result, duration * 1000)

    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Assign loans to debt facilities and report expected yields.")
    parser.add_argument("--data-dir", type=Path, default=None, help="Directory holding the input CSV files.")
    parser.add_argument("--output-dir", type=Path, default=None, help="Directory for the report CSV files.")
    parser.add_argument("--order", choices=["cost_ascending", "load_order"], default=None)
    parser.add_argument("--rounding", choices=["half_up", "half_even"], default=None)
    parser.add_argument(
        "--reject-negative-yield",
        action="store_true",
        help="Skip facilities on which a loan would have negative expected yield.",
    )
    parser.add_argument("--no-unassigned-report", action="store_true")
    parser.add_argument("--log-level", default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.order:
        overrides["candidate_order"] = args.order
    if args.rounding:
        overrides["yield_rounding"] = args.rounding
    if args.reject_negative_yield:
        overrides["reject_negative_yield"] = True
    if args.no_unassigned_report:
        overrides["write_unassigned_report"] = False
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    config = settings.model_copy(update=overrides)

    setup_logging(config.log_level, service=config.service_name)

    try:
        run_batch(args.data_dir, args.output_dir, config)
    except DomainException as e:
        logging.error(f"Allocation run aborted: {e}", extra={"step": "run_failed"})
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
