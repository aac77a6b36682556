# bakery/reporting/money.py
"""
Money arithmetic for reports.

Amounts are plain floats. Every sum or product the reports compute goes
through here, so switching to integer cents only touches this module.
"""

Money = float

ZERO: Money = 0.0


def to_money(value: float | int | str) -> Money:
    """Coerce a stored amount (Postgres numeric may arrive as str) to Money."""
    return float(value)


def line_amount(unit_amount: float, quantity: int) -> Money:
    """unit price (or unit cost) x quantity"""
    return to_money(unit_amount) * quantity


def add(total: Money, amount: Money) -> Money:
    return total + amount


def subtract(total: Money, amount: Money) -> Money:
    return total - amount


def format_money(amount: Money, symbol: str = "R") -> str:
    """
    Human string for exports and emails, e.g. `R150.00`.
    """
    return f"{symbol}{amount:.2f}"
