"""Checksum validation for Australian business identifiers.

ABN (Australian Business Number, 11 digits) and ACN (Australian Company
Number, 9 digits). Both functions are total: any malformed input returns
False rather than raising.
"""

import re

ABN_WEIGHTS = (10, 1, 3, 5, 7, 9, 11, 13, 15, 17, 19)
ACN_WEIGHTS = (8, 7, 6, 5, 4, 3, 2, 1)

_WHITESPACE = re.compile(r"\s")


def _digits(value: str, length: int) -> list[int] | None:
    cleaned = _WHITESPACE.sub("", value or "")
    if len(cleaned) != length or not cleaned.isascii() or not cleaned.isdigit():
        return None
    return [int(ch) for ch in cleaned]


def validate_abn(abn: str) -> bool:
    """Validate an ABN such as '51 824 753 556'.

    Subtract 1 from the first digit, weight the digits, and the sum must
    be divisible by 89.
    """
    digits = _digits(abn, 11)
    if digits is None:
        return False
    digits[0] -= 1
    total = sum(d * w for d, w in zip(digits, ABN_WEIGHTS))
    return total % 89 == 0


def validate_acn(acn: str) -> bool:
    """Validate an ACN such as '005 749 986'.

    The ninth digit is the complement (mod 10) of the weighted sum of the
    first eight.
    """
    digits = _digits(acn, 9)
    if digits is None:
        return False
    total = sum(d * w for d, w in zip(digits[:8], ACN_WEIGHTS))
    check_digit = (10 - (total % 10)) % 10
    return check_digit == digits[8]
