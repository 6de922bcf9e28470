"""Invoice amount rules."""

import math

from app.errors import ApiError
from app.schemas.job import Financials

GST_RATE_PERCENT = 18


def _to_paise(amount: float) -> float:
    return round(amount, 2)


def compute_financials(*, service_charge: float, parts_cost: float) -> Financials:
    """Derive GST and total from the two billable amounts.

    Every amount is rounded to paise. GST is a fixed 18% of charge plus parts.
    Non-finite results are rejected before anything is stored.
    """
    service_charge = _to_paise(service_charge)
    parts_cost = _to_paise(parts_cost)
    subtotal = _to_paise(service_charge + parts_cost)
    gst = _to_paise(subtotal * GST_RATE_PERCENT / 100)
    total = _to_paise(subtotal + gst)
    if not all(math.isfinite(value) for value in (service_charge, parts_cost, gst, total)):
        raise ApiError(
            status_code=400,
            code="VALIDATION_ERROR",
            message="Billable amounts must be finite",
            details={"service_charge": str(service_charge), "parts_cost": str(parts_cost)},
        )
    return Financials(service_charge=service_charge, parts_cost=parts_cost, gst=gst, total=total)
