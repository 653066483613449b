"""
Fractional index keys for user-ordered lists (stars, collections).

Keys are strings of base-62 digits compared lexicographically. A key never
ends in the zero digit, so there is always room to generate another key
between any two distinct keys.
"""
from __future__ import annotations

DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"


def _digit(ch: str) -> int:
    value = DIGITS.find(ch)
    if value < 0:
        raise ValueError(f"Invalid index character: {ch!r}")
    return value


def _midpoint(a: str, b: str | None) -> str:
    # `a` may be "" (the lowest possible key), `b` may be None (open upper bound).
    if b is not None and a >= b:
        raise ValueError(f"{a!r} >= {b!r}")
    if a.endswith(DIGITS[0]) or (b is not None and b.endswith(DIGITS[0])):
        raise ValueError("Index keys must not end with the zero digit")

    if b is not None:
        # Strip the shared prefix.
        n = 0
        while (a[n] if n < len(a) else DIGITS[0]) == b[n]:
            n += 1
        if n > 0:
            return b[:n] + _midpoint(a[n:], b[n:])

    digit_a = _digit(a[0]) if a else 0
    digit_b = _digit(b[0]) if b is not None else len(DIGITS)
    if digit_b - digit_a > 1:
        return DIGITS[(digit_a + digit_b + 1) // 2]

    # Consecutive first digits.
    if b is not None and len(b) > 1:
        return b[:1]
    return DIGITS[digit_a] + _midpoint(a[1:], None)


def generate_key_between(a: str | None, b: str | None) -> str:
    """
    Return a key strictly greater than `a` and strictly less than `b`.
    Either bound may be None for an open end.
    """
    if a is not None and b is not None and a >= b:
        raise ValueError(f"{a!r} >= {b!r}")
    return _midpoint(a or "", b)
