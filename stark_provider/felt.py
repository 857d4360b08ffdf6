"""
Numeric codec for ledger field elements ("felts").

A felt is an integer in ``[0, FIELD_PRIME)``. Callers pass Python ints or
strings (decimal or ``0x`` hex). Python ints are arbitrary precision, so
nothing here ever truncates: floats are rejected outright.

Wire conventions:
    - Addresses, selectors, and transaction hashes travel as ``0x`` hex.
    - Deploy salts travel as ``0x`` hex too.
    - Calldata and signature components travel as decimal strings.
"""

from __future__ import annotations

import secrets
from collections.abc import Iterable, Sequence

# 2**251 + 17 * 2**192 + 1
FIELD_PRIME = 0x800000000000011000000000000000000000000000000000000000000000001

BigNumberish = int | str


def to_int(value: BigNumberish) -> int:
    """Convert a BigNumberish to int.

    Raises:
        TypeError: If value is not an int or str (floats and bools included).
        ValueError: If the string is not a decimal or 0x-hex number.
    """
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise TypeError(
            f"expected int or numeric string, got {type(value).__name__}"
        )
    if isinstance(value, int):
        return value

    text = value.strip()
    if not text:
        raise ValueError("empty numeric string")
    negative = text.startswith("-")
    digits = text[1:] if negative else text
    try:
        if digits[:2].lower() == "0x":
            result = int(digits[2:], 16)
        else:
            if not digits.isdigit():
                raise ValueError
            result = int(digits, 10)
    except ValueError:
        raise ValueError(f"not a decimal or hex number: {value!r}") from None
    return -result if negative else result


def to_felt(value: BigNumberish) -> int:
    """Convert to int and check it is a valid field element."""
    number = to_int(value)
    if not 0 <= number < FIELD_PRIME:
        raise ValueError(f"value out of field range: {value!r}")
    return number


def to_hex(value: BigNumberish) -> str:
    """Lowercase 0x-prefixed hex of a non-negative number."""
    number = to_int(value)
    if number < 0:
        raise ValueError(f"cannot hex-encode negative value: {value!r}")
    return hex(number)


def to_decimal_string(value: BigNumberish) -> str:
    return str(to_int(value))


def to_decimal_strings(values: Iterable[BigNumberish]) -> list[str]:
    return [to_decimal_string(v) for v in values]


def format_signature(signature: Sequence[BigNumberish] | None) -> list[str]:
    """Signature components as decimal strings. None means unsigned."""
    if signature is None:
        return []
    return to_decimal_strings(signature)


def random_address_salt() -> int:
    """Uniformly random field element, for deploys without a caller salt."""
    return secrets.randbelow(FIELD_PRIME)
