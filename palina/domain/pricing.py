"""
Caller-side price calculation.

The store keeps whatever total it is given; these helpers are what the
booking form and the API use to compute it.
"""
from datetime import date
from decimal import Decimal


def count_nights(check_in: date, check_out: date) -> int:
    nights = (check_out - check_in).days
    return nights if nights > 0 else 0


def cabin_total(check_in: date, check_out: date, price_per_night) -> Decimal:
    """nights × nightly rate; 0 for an empty or inverted range"""
    return Decimal(count_nights(check_in, check_out)) * Decimal(str(price_per_night))


def day_pass_total(guests: int, price_per_person) -> Decimal:
    return Decimal(max(guests, 0)) * Decimal(str(price_per_person))
