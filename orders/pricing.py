from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

SGST_RATE = Decimal("0.025")
CGST_RATE = Decimal("0.025")

CENT = Decimal("0.01")


def to_decimal(value):
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value):
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    sgst: Decimal
    cgst: Decimal
    total_tax: Decimal
    total: Decimal

    def as_dict(self):
        return {
            "subtotal": self.subtotal,
            "sgst": self.sgst,
            "cgst": self.cgst,
            "total_tax": self.total_tax,
            "total": self.total,
        }


def compute_totals(lines):
    """
    Price ``(unit_price, quantity)`` pairs.

    SGST and CGST are each 2.5 % of the subtotal rounded half-up to paise;
    the total is subtotal plus both.
    """
    subtotal = sum(
        (to_decimal(price) * int(quantity) for price, quantity in lines),
        Decimal("0"),
    )
    subtotal = round_money(subtotal)

    sgst = round_money(subtotal * SGST_RATE)
    cgst = round_money(subtotal * CGST_RATE)
    total_tax = sgst + cgst

    return Totals(
        subtotal=subtotal,
        sgst=sgst,
        cgst=cgst,
        total_tax=total_tax,
        total=subtotal + total_tax,
    )
