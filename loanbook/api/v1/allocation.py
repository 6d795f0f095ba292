"""POST /v1/allocations - run one allocation batch in memory"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request

from loanbook.api.dependencies import get_request_id, get_settings
from loanbook.api.v1.schemas import (
    AllocationRequest,
    AllocationResponse,
    AssignmentItem,
    UnassignedItem,
    YieldItem,
)
from loanbook.config import Settings
from loanbook.domain.engine import AssignmentEngine
from loanbook.domain.exceptions import DuplicateRecordError, RecordLoadError
from loanbook.infrastructure.observability.logging import log_run_summary, log_unassigned
from loanbook.infrastructure.observability.metrics import record_run, run_duration_histogram, run_failure_counter
from loanbook.infrastructure.records.loader import check_integrity

router = APIRouter()


@router.post("/allocations", response_model=AllocationResponse)
def create_allocation(
    request_body: AllocationRequest,
    request: Request,
    config: Settings = Depends(get_settings),
):
    """
    Assign a batch of loans to facilities.

    Flow:
    1. Build domain records and verify bank/facility references
    2. Build a fresh engine for this request
    3. Assign loans in the order given
    4. Return assignments, rounded yields and unassigned loans
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        banks = {}
        for bank in request_body.banks:
            if bank.id in banks:
                raise DuplicateRecordError(f"Duplicate bank id {bank.id}")
            banks[bank.id] = bank.to_domain()
        facilities = [f.to_domain() for f in request_body.facilities]
        covenants = [c.to_domain() for c in request_body.covenants]
        check_integrity(banks, facilities, covenants)

        engine = AssignmentEngine.from_records(
            facilities,
            covenants,
            order=config.candidate_order,
            rounding=config.yield_rounding,
            reject_negative_yield=config.reject_negative_yield,
        )
        for loan in request_body.loans:
            outcome = engine.assign(loan.to_domain())
            if not outcome.assigned:
                log_unassigned(outcome, request_id)
        result = engine.result()

    except RecordLoadError as e:
        run_failure_counter.inc()
        logging.warning(f"Rejected allocation input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        run_failure_counter.inc()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # Record metrics and logs
    duration = time.time() - start_time
    run_duration_histogram.observe(duration)
    record_run(result, engine.ledger.utilization())
    log_run_summary(request_id, result, duration * 1000)

    return AllocationResponse(
        run_id=request_id,
        assignments=[AssignmentItem(loan_id=a.loan_id, facility_id=a.facility_id) for a in result.assignments],
        yields=[YieldItem(facility_id=y.facility_id, expected_yield=y.expected_yield) for y in result.yields],
        unassigned=[UnassignedItem(loan_id=o.loan_id, reason=o.reason.value) for o in result.unassigned],
        remaining_capacity=result.remaining_capacity,
    )
