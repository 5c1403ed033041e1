from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from uuid import uuid4

from src.utils.datetime_tz import as_datetime


class TreatmentRoute(str, Enum):
    ORAL = "oral"
    SC = "sc"
    IM = "im"
    OTHER = "other"


@dataclass(slots=True)
class Treatment:
    id: str
    animal_id: str
    date: date | datetime | str | None
    product: str

    # Canonical withdrawal end; engines read only this field
    withdrawal_until: datetime | None = None
    withdrawal_days: int | None = None

    # Display-only metadata
    lot_number: str | None = None
    dose: str | None = None
    route: TreatmentRoute | None = None
    reason: str | None = None

    @classmethod
    def create(
        cls,
        animal_id: str,
        date: date | datetime | str | None,
        product: str,
        withdrawal_until: date | datetime | str | None = None,
        withdrawal_days: int | None = None,
        lot_number: str | None = None,
        dose: str | None = None,
        route: TreatmentRoute | str | None = None,
        reason: str | None = None,
        id: str | None = None,
    ) -> Treatment:
        # Normalize both withdrawal representations to an absolute end date.
        # An explicit end date wins over a duration.
        until = as_datetime(withdrawal_until)
        if until is None and withdrawal_days:
            treated_at = as_datetime(date)
            if treated_at is not None:
                until = treated_at + timedelta(days=withdrawal_days)

        return cls(
            id=id or str(uuid4()),
            animal_id=animal_id,
            date=date,
            product=product,
            withdrawal_until=until,
            withdrawal_days=withdrawal_days,
            lot_number=lot_number,
            dose=dose,
            route=TreatmentRoute(route) if route else None,
            reason=reason,
        )
