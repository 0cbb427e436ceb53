"""Target aspect ratio parsing and labelling."""

from __future__ import annotations

import math
from decimal import Decimal
from numbers import Real

from cropline.exceptions import InvalidAspectError

# Operator-facing labels for the ratios the admin screens use
_KNOWN_LABELS: tuple[tuple[float, str], ...] = (
    (1.0, "1:1 (Square)"),
    (16 / 9, "16:9 (Landscape)"),
    (4 / 5, "4:5 (Portrait)"),
    (9 / 16, "9:16 (Vertical)"),
)

_LABEL_TOLERANCE = 1e-9


def validate_aspect(aspect: Real | Decimal) -> float:
    """Return aspect as a float if it is a positive finite number.

    Any real number is accepted, including Fraction and Decimal.

    Raises:
        InvalidAspectError: If aspect is not a number, or is zero, negative,
            NaN or infinite.
    """
    if isinstance(aspect, bool) or not isinstance(aspect, Real | Decimal):
        raise InvalidAspectError("Aspect ratio must be a number", aspect=aspect)
    try:
        ratio = float(aspect)
    except (ValueError, OverflowError) as e:
        # signalling NaN or a Fraction too large for a float
        raise InvalidAspectError(
            "Aspect ratio must be positive and finite", aspect=aspect
        ) from e
    if not math.isfinite(ratio) or ratio <= 0:
        raise InvalidAspectError(
            "Aspect ratio must be positive and finite", aspect=aspect
        )
    return ratio


def parse_aspect(value: str | Real | Decimal) -> float:
    """Parse an aspect ratio from "16:9", "16/9", "1.7778" or a number.

    Args:
        value: Ratio as a string or number.

    Returns:
        The ratio as a positive float.

    Raises:
        InvalidAspectError: If the value cannot be parsed or is not positive.

    Example:
        >>> parse_aspect("4:5")
        0.8
    """
    if not isinstance(value, str):
        return validate_aspect(value)

    text = value.strip()
    for sep in (":", "/"):
        if sep in text:
            left, _, right = text.partition(sep)
            try:
                numerator = float(left)
                denominator = float(right)
            except ValueError:
                raise InvalidAspectError(
                    f"Cannot parse aspect ratio {value!r}", aspect=value
                ) from None
            if denominator == 0:
                raise InvalidAspectError(
                    "Aspect ratio denominator must not be zero", aspect=value
                )
            return validate_aspect(numerator / denominator)

    try:
        ratio = float(text)
    except ValueError:
        raise InvalidAspectError(
            f"Cannot parse aspect ratio {value!r}", aspect=value
        ) from None
    return validate_aspect(ratio)


def aspect_label(aspect: float) -> str:
    """Return the operator-facing label for an aspect ratio.

    Example:
        >>> aspect_label(16 / 9)
        '16:9 (Landscape)'
        >>> aspect_label(1.5)
        '1.50'
    """
    for known, label in _KNOWN_LABELS:
        if abs(aspect - known) < _LABEL_TOLERANCE:
            return label
    return f"{aspect:.2f}"
