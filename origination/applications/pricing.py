"""Periodic payment for a counter-offer (French amortization)."""

from decimal import ROUND_HALF_UP, Decimal

from origination.applications.enums import PaymentFrequency

PERIODS_PER_YEAR: dict[PaymentFrequency, int] = {
    PaymentFrequency.WEEKLY: 52,
    PaymentFrequency.BIWEEKLY: 24,
    PaymentFrequency.MONTHLY: 12,
}

# Payment periods in one month; a quincena is half a month
PERIODS_PER_MONTH: dict[PaymentFrequency, float] = {
    PaymentFrequency.WEEKLY: 4.33,
    PaymentFrequency.BIWEEKLY: 2.0,
    PaymentFrequency.MONTHLY: 1.0,
}

_CENT = Decimal("0.01")


def total_periods(term_months: int, frequency: PaymentFrequency) -> int:
    return max(round(term_months * PERIODS_PER_MONTH[frequency]), 1)


def periodic_payment(
    amount: Decimal,
    term_months: int,
    annual_rate: Decimal,
    frequency: PaymentFrequency = PaymentFrequency.MONTHLY,
) -> tuple[Decimal, Decimal]:
    """Return (payment per period, total to pay), rounded to cents.

    ``annual_rate`` is a percentage, e.g. ``Decimal("45.5")``.
    """
    periods = total_periods(term_months, frequency)
    rate = annual_rate / Decimal(100) / Decimal(PERIODS_PER_YEAR[frequency])

    if rate > 0:
        growth = (1 + rate) ** periods
        payment = amount * (rate * growth) / (growth - 1)
    else:
        payment = amount / Decimal(periods)

    payment = payment.quantize(_CENT, rounding=ROUND_HALF_UP)
    total = (payment * periods).quantize(_CENT, rounding=ROUND_HALF_UP)
    return payment, total
