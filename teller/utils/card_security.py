"""
Card Security Utilities.

PCI DSS helpers for payment-card data: PAN masking, brand detection,
expiration and status checks, and the transaction-eligibility gate every
card must pass before it is offered for payment.

All functions are pure and never raise; malformed input yields the
fail-closed answer (masked sentinel, "expired", "invalid").
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date
from typing import Optional

from teller.models.card import CardValidationResult
from teller.models.enums import CardBrand

__all__ = [
    "INVALID_CARD_NUMBER_MESSAGE",
    "EXPIRED_CARD_MESSAGE",
    "format_masked_card_number",
    "get_card_brand",
    "get_last_four_digits",
    "is_card_expired",
    "is_card_usable",
    "is_pci_compliant_display",
    "is_valid_card_length",
    "mask_card_number",
    "sanitize_for_logging",
    "validate_card_for_transaction",
]

MASK_SENTINEL: str = "****"

INVALID_CARD_NUMBER_MESSAGE: str = "Número de tarjeta inválido"
EXPIRED_CARD_MESSAGE: str = "La tarjeta ha expirado"

# Union of valid PAN lengths across Visa (13, 16, 19), MasterCard (16),
# Amex (15), Discover (16) and Diners Club (14).
_VALID_LENGTHS: frozenset[int] = frozenset({13, 14, 15, 16, 19})

_RE_WHITESPACE = re.compile(r"\s")
_RE_EXPIRATION = re.compile(r"^(\d{2})/(\d{2})$")
_RE_PAN_RUN = re.compile(r"\d{13,19}")

_SENSITIVE_NUMBER_KEYS: tuple[str, ...] = ("cardNumber", "card_number")
_FORBIDDEN_KEYS: tuple[str, ...] = ("cvv",)


# ---------------------------------------------------------------------------
# Masking
# ---------------------------------------------------------------------------

def mask_card_number(card_number: Optional[str]) -> str:
    """Mask a PAN so only the last four characters remain visible.

    PCI DSS Requirement 3.3.  Inputs shorter than four characters return
    the ``****`` sentinel so no digit is ever partially exposed::

        mask_card_number("4532123456789012")  # '**** **** **** 9012'
        mask_card_number("123")               # '****'
    """
    if not card_number or len(card_number) < 4:
        return MASK_SENTINEL
    return f"**** **** **** {card_number[-4:]}"


def get_last_four_digits(card_number: Optional[str]) -> str:
    """Return the last four characters, or ``""`` for short input."""
    if not card_number or len(card_number) < 4:
        return ""
    return card_number[-4:]


def format_masked_card_number(masked_card_number: str) -> str:
    """Regroup an already-masked number in blocks of four.

    Only ever call this with masked input.
    """
    cleaned = _RE_WHITESPACE.sub("", masked_card_number)
    return " ".join(cleaned[i:i + 4] for i in range(0, len(cleaned), 4))


# ---------------------------------------------------------------------------
# Structural checks
# ---------------------------------------------------------------------------

def is_valid_card_length(card_number: Optional[str]) -> bool:
    """Structural length check; not a Luhn validation."""
    if not card_number:
        return False
    digits = _RE_WHITESPACE.sub("", card_number)
    return digits.isdigit() and len(digits) in _VALID_LENGTHS


def get_card_brand(card_number: Optional[str]) -> CardBrand:
    """Infer the card network from its IIN.

    Display and consistency warnings only; the brand never gates a
    transaction.
    """
    if not card_number:
        return CardBrand.UNKNOWN

    # Only the leading digits decide; separators after the IIN are ignored.
    pan = _RE_WHITESPACE.sub("", card_number)

    if pan.startswith("4"):
        return CardBrand.VISA

    if _prefix_in_range(pan, 2, 51, 55) or _prefix_in_range(pan, 4, 2221, 2720):
        return CardBrand.MASTERCARD

    if pan.startswith(("34", "37")):
        return CardBrand.AMEX

    if (
        pan.startswith(("6011", "65"))
        or _prefix_in_range(pan, 3, 644, 649)
        or _prefix_in_range(pan, 6, 622126, 622925)
    ):
        return CardBrand.DISCOVER

    if pan.startswith(("36", "38")) or _prefix_in_range(pan, 3, 300, 305):
        return CardBrand.DINERS

    return CardBrand.UNKNOWN


def _prefix_in_range(pan: str, width: int, low: int, high: int) -> bool:
    prefix = pan[:width]
    if len(prefix) < width or not prefix.isdecimal():
        return False
    return low <= int(prefix) <= high


# ---------------------------------------------------------------------------
# Expiration and status
# ---------------------------------------------------------------------------

def is_card_expired(expiration_date: Optional[str], today: Optional[date] = None) -> bool:
    """Return ``True`` when an ``MM/YY`` expiration is in the past.

    The card stays valid through the whole stated month.  Anything that
    is not a well-formed ``MM/YY`` with a month in 1..12 counts as
    expired (fail-closed).

    Args:
        expiration_date: Expiration in ``MM/YY`` form.
        today: Reference date; defaults to :func:`date.today`.
    """
    if not expiration_date:
        return True

    match = _RE_EXPIRATION.match(expiration_date.strip())
    if match is None:
        return True

    exp_month = int(match.group(1))
    exp_year = 2000 + int(match.group(2))
    if not 1 <= exp_month <= 12:
        return True

    reference = today or date.today()
    return (exp_year, exp_month) < (reference.year, reference.month)


def is_card_usable(status: Optional[str]) -> bool:
    """Only ``active`` cards (any case) may be used for transactions."""
    return bool(status) and status.lower() == "active"


def validate_card_for_transaction(
    card_number: Optional[str],
    expiration_date: Optional[str],
    status: Optional[str],
    today: Optional[date] = None,
) -> CardValidationResult:
    """Run the transaction gate: length, then expiration, then status.

    The first failing check determines the reported reason so the teller
    can explain the decline to the customer.
    """
    if not is_valid_card_length(card_number):
        return CardValidationResult(is_valid=False, error=INVALID_CARD_NUMBER_MESSAGE)

    if is_card_expired(expiration_date, today=today):
        return CardValidationResult(is_valid=False, error=EXPIRED_CARD_MESSAGE)

    if not is_card_usable(status):
        return CardValidationResult(
            is_valid=False,
            error=(
                f"La tarjeta está {status or 'sin estado'}. "
                "Solo tarjetas activas pueden ser utilizadas."
            ),
        )

    return CardValidationResult(is_valid=True)


# ---------------------------------------------------------------------------
# Leak prevention
# ---------------------------------------------------------------------------

def is_pci_compliant_display(display_text: str) -> bool:
    """``True`` when *display_text* holds no run of 13-19 digits.

    Whitespace is removed first so ``4532 1234 5678 9012`` is caught.
    """
    cleaned = _RE_WHITESPACE.sub("", display_text)
    return _RE_PAN_RUN.search(cleaned) is None


def sanitize_for_logging(record: Mapping[str, object]) -> dict[str, object]:
    """Return a copy of *record* that is safe to hand to a log sink.

    Card numbers are masked, ``cvv`` is dropped, every other key passes
    through unchanged.  Mandatory before any card-bearing structure is
    logged or persisted in the audit trail.
    """
    sanitized: dict[str, object] = dict(record)
    for key in _SENSITIVE_NUMBER_KEYS:
        if key in sanitized and sanitized[key]:
            sanitized[key] = mask_card_number(str(sanitized[key]))
    for key in _FORBIDDEN_KEYS:
        sanitized.pop(key, None)
    return sanitized
