"""
Rental pricing helpers. Pure functions, no database access.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CENT = Decimal("0.01")

_MICROSECONDS_PER_HOUR = 3600 * 1_000_000


@dataclass(frozen=True)
class RentalDays:
     total_hours: int
     billed_days: int


def _ceil_div(numerator: int, denominator: int) -> int:
     return -(-numerator // denominator)


def compute_rental_days(start: datetime, end: datetime) -> Optional[RentalDays]:
     """
     Billed duration of a rental: every started hour counts, and every
     started 24-hour block is a full billed day.

     Returns None when end <= start.

     >>> compute_rental_days(datetime(2026, 1, 1, 9), datetime(2026, 1, 2, 9, 1))
     RentalDays(total_hours=25, billed_days=2)
     """
     if end <= start:
          return None
     delta = end - start
     # integer arithmetic; float hours lose the sub-millisecond remainder
     microseconds = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
     total_hours = _ceil_div(microseconds, _MICROSECONDS_PER_HOUR)
     return RentalDays(total_hours=total_hours, billed_days=_ceil_div(total_hours, 24))


def money(value) -> Decimal:
     """Round to cents."""
     return Decimal(value if value is not None else 0).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_excess_km(
     departure_mileage: int,
     return_mileage: int,
     included_km_per_day: Optional[int],
     total_days: int,
     excess_km_rate: Optional[Decimal],
) -> tuple:
     """
     Kilometres driven beyond the included allowance and their price.

     Returns (excess_km, amount). Both are zero when the contract has no
     allowance or no rate.
     """
     if not included_km_per_day or excess_km_rate is None:
          return 0, money(0)
     driven = max(0, return_mileage - departure_mileage)
     excess = max(0, driven - included_km_per_day * total_days)
     return excess, money(Decimal(excess) * Decimal(excess_km_rate))
