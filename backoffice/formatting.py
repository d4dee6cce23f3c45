"""Display formatting for prices, durations and ratings."""

from typing import Optional


def format_price(price: Optional[float]) -> str:
    """
    Format an amount as Indonesian Rupiah.

    Uses id-ID grouping: ``.`` for thousands and ``,`` for decimals,
    e.g. ``1500000`` -> ``"Rp 1.500.000,00"``.
    """
    amount = float(price or 0)
    sign = "-" if amount < 0 else ""
    grouped = f"{abs(amount):,.2f}"
    grouped = grouped.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}Rp {grouped}"


def format_months(months: int) -> str:
    """Package duration: whole years when divisible by 12, months otherwise."""
    if months >= 12 and months % 12 == 0:
        years = months // 12
        return f"{years} {'year' if years == 1 else 'years'}"
    return f"{months} {'month' if months == 1 else 'months'}"


def format_experience(years: Optional[float]) -> str:
    if years is None:
        return "0 years"
    if years < 1:
        months = round(years * 12)
        return f"{months} month{'' if months == 1 else 's'}"
    shown = int(years) if float(years).is_integer() else years
    return f"{shown} year{'' if years == 1 else 's'}"


def format_percent(percent: Optional[float]) -> str:
    if percent is None:
        return "0%"
    shown = int(percent) if float(percent).is_integer() else percent
    return f"{shown}%"


def render_stars(stars: Optional[int]) -> str:
    return "⭐" * min(max(int(stars or 0), 0), 5)
