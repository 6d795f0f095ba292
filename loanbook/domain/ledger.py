"""Facility ledger - ordered facilities and their remaining capacity"""

import threading
from dataclasses import replace
from decimal import Decimal
from typing import Dict, Iterable, Iterator, List

from loanbook.domain.exceptions import DuplicateRecordError, UnknownFacilityError
from loanbook.domain.models import Facility

CANDIDATE_ORDERS = ("cost_ascending", "load_order")


class FacilityLedger:
    """
    Holds every facility of a run in a fixed candidate order.

    Order policies:
    - cost_ascending: cheapest facility first, ties broken by facility id
    - load_order: facilities in the order they were supplied

    The order is settled once here and never changes during the run. The ledger
    works on its own copies, so the facilities passed in are never modified.
    """

    def __init__(self, facilities: Iterable[Facility], order: str = "cost_ascending"):
        if order not in CANDIDATE_ORDERS:
            raise ValueError(f"Unknown candidate order: {order}")

        self._facilities: Dict[int, Facility] = {}
        for facility in facilities:
            if facility.id in self._facilities:
                raise DuplicateRecordError(f"Duplicate facility id {facility.id}")
            self._facilities[facility.id] = replace(facility)

        ordered = list(self._facilities.values())
        if order == "cost_ascending":
            ordered.sort(key=lambda f: (f.interest_rate, f.id))
        self._order: List[Facility] = ordered
        self.order = order

        self._lock = threading.Lock()

    def candidates(self) -> Iterator[Facility]:
        return iter(self._order)

    def get(self, facility_id: int) -> Facility:
        try:
            return self._facilities[facility_id]
        except KeyError:
            raise UnknownFacilityError(f"Unknown facility id {facility_id}") from None

    def remaining(self, facility_id: int) -> int:
        return self.get(facility_id).remaining_capacity

    def reserve(self, facility_id: int, amount: int) -> bool:
        """
        Check-and-decrement remaining capacity as one atomic step.

        Returns False and leaves the facility untouched when it cannot cover the amount.
        """
        if amount < 0:
            raise ValueError(f"Cannot reserve a negative amount: {amount}")

        facility = self.get(facility_id)
        with self._lock:
            if facility.remaining_capacity < amount:
                return False
            facility.remaining_capacity -= amount
            return True

    def remaining_capacity(self) -> Dict[int, int]:
        return {f.id: f.remaining_capacity for f in self._order}

    def utilization(self) -> Dict[int, float]:
        """Fraction of each facility's capacity already drawn"""
        return {
            f.id: float(Decimal(f.capacity - f.remaining_capacity) / f.capacity) if f.capacity else 0.0
            for f in self._order
        }

    def __len__(self) -> int:
        return len(self._facilities)

    def __contains__(self, facility_id: int) -> bool:
        return facility_id in self._facilities
