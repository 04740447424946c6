"""Local input checks that run before any store call."""

import re

from protean.exceptions import ValidationError

from storefront.checkout.lines import ReconciledLine, SelectionLine

PHONE_PATTERN = re.compile(r"^[\d+\-\s()]+$")
PHONE_MIN_LENGTH = 10


def validate_phone_number(phone_number) -> str:
    """Return the trimmed phone number, or raise ValidationError.

    At least 10 characters of digits, `+`, hyphens, spaces and parentheses,
    with at least one digit among them.
    """
    number = (phone_number or "").strip()
    if not number:
        raise ValidationError({"phone_number": ["Phone number is required"]})
    if len(number) < PHONE_MIN_LENGTH:
        raise ValidationError({"phone_number": [f"Phone number must be at least {PHONE_MIN_LENGTH} characters"]})
    if not PHONE_PATTERN.match(number) or not re.search(r"\d", number):
        raise ValidationError({"phone_number": [f"Invalid phone number: {number!r}"]})
    return number


def validate_selection(lines: list[SelectionLine]):
    if not lines:
        raise ValidationError({"items": ["Select at least one item"]})
    for index, line in enumerate(lines):
        if not line.product_id:
            raise ValidationError({"items": [f"Line {index + 1} has no product"]})
        if line.requested_quantity is None or line.requested_quantity < 1:
            raise ValidationError({"items": [f"Line {index + 1} must request at least one unit"]})


def validate_order_lines(lines: list[ReconciledLine | SelectionLine]):
    """Lines about to be committed must each be bound to a variation."""
    if not lines:
        raise ValidationError({"items": ["Select at least one item"]})
    for line in lines:
        if not line.variation_id:
            label = line.product_name or line.product_id
            raise ValidationError({"variation_id": [f"Select a color and size for {label}"]})
        if line.requested_quantity < 1:
            raise ValidationError({"items": [f"Quantity for {line.variation_id} must be at least 1"]})
