#!/usr/bin/env python3
"""
Numeric Module
Rounds floats for emission and recognizes angles that are rational
multiples of pi so they can be written symbolically.
"""

import math
from typing import Iterable

# Angles are compared after scaling by this factor (5 decimal digits)
ANGLE_SCALE = 100000
MAX_PI_FACTOR = 10


def js_round(value: float) -> int:
    """Round half up, matching JavaScript Math.round"""
    return math.floor(value + 0.5)


class NumberFormatter:
    """Formats numbers with a fixed decimal precision

    Args:
        precision: Decimal digits kept by round_value (default 2)
        pi_token: Expression used for pi in symbolic angles
    """

    def __init__(self, precision: int = 2, pi_token: str = "Math.PI"):
        self.precision = int(round(precision))
        self.pi_token = pi_token

    def round_value(self, value: float) -> float:
        rounded = round(float(value), self.precision)
        # Normalize -0.0 so it formats as 0
        return rounded + 0.0

    def format_number(self, value: float) -> str:
        """Shortest token for a number, without rounding"""
        if isinstance(value, bool):
            return 'true' if value else 'false'
        value = float(value) + 0.0
        if value.is_integer():
            return str(int(value))
        return repr(value)

    def value(self, value: float) -> str:
        """Rounded number token"""
        return self.format_number(self.round_value(value))

    def round_angle(self, value: float) -> str:
        """Angle token, symbolic when the value is pi/i or pi*i for i in 1..10

        Examples:
            pi / 3  -> "Math.PI / 3"
            2 * pi  -> "Math.PI * 2"
            -pi     -> "-Math.PI"
            1.2345  -> "1.23"
        """
        value = float(value)
        scaled = abs(js_round(value * ANGLE_SCALE))
        sign = '-' if value < 0 else ''
        for i in range(1, MAX_PI_FACTOR + 1):
            if scaled == js_round(math.pi / i * ANGLE_SCALE):
                return f"{sign}{self.pi_token}" + (f" / {i}" if i > 1 else '')
        for i in range(1, MAX_PI_FACTOR + 1):
            if scaled == js_round(math.pi * i * ANGLE_SCALE):
                return f"{sign}{self.pi_token}" + (f" * {i}" if i > 1 else '')
        return self.value(value)

    def vector(self, values: Iterable[float]) -> str:
        """Rounded array literal"""
        return '[' + ', '.join(self.value(v) for v in values) + ']'
