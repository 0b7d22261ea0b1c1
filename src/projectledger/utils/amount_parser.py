"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

CURRENCY_PATTERN = re.compile(r"^(rp\.?|idr|\$)\s*", re.IGNORECASE)


def parse_amount(amount_str: str) -> Decimal:
    """Parse a money amount into a Decimal with two places.

    Handles:
    - "1500000" and "1500000.50"
    - "1,500,000.50" (comma thousands separators)
    - "Rp 1,500,000", "Rp.1500000", "IDR 1500000", "$1500"

    Negative amounts are rejected; costs and billings are always positive.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount quantized to cents

    Raises:
        ValueError: If amount string cannot be parsed or is not positive
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = CURRENCY_PATTERN.sub("", amount_str.strip())
    cleaned = cleaned.replace(",", "").strip()

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")

    if not amount.is_finite() or amount <= 0:
        raise ValueError(f"Amount must be a positive number, got '{amount_str}'")
    return amount.quantize(Decimal("0.01"))
