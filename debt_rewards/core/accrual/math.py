"""Checked unsigned fixed-point arithmetic for the accrual kernel.

Every function operates on plain Python ints bounded to 256 bits. Python ints
never wrap, so the width is enforced explicitly: additions and multiplications
raise ``Overflow`` past ``UINT256_MAX`` and subtractions raise ``Underflow``
below zero.

Division truncates (``//`` on non-negative operands). Truncation is the only
source of reward dust and tests rely on its exact direction.
"""

from __future__ import annotations

from .errors import DivisionByZero, Overflow, Underflow

RAY: int = 10**27  # accumulator scale
WAD: int = 10**18  # display-only rate scale
UINT256_MAX: int = 2**256 - 1


def require_uint(value: object, name: str) -> int:
    """Validate *value* as an unsigned 256-bit int and return it."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")
    if value > UINT256_MAX:
        raise ValueError(f"{name} exceeds uint256: {value}")
    return int(value)


# -- Checked primitives ------------------------------------------------------

def add(x: int, y: int) -> int:
    z = x + y
    if z > UINT256_MAX:
        raise Overflow(f"add overflow: {x} + {y}")
    return z


def sub(x: int, y: int) -> int:
    if y > x:
        raise Underflow(f"sub underflow: {x} - {y}")
    return x - y


def mul(x: int, y: int) -> int:
    z = x * y
    if z > UINT256_MAX:
        raise Overflow(f"mul overflow: {x} * {y}")
    return z


def div(x: int, y: int) -> int:
    if y == 0:
        raise DivisionByZero(f"division by zero: {x} / 0")
    return x // y


# -- Fixed-point helpers -----------------------------------------------------

def rmul(x: int, y: int) -> int:
    """``x * y / RAY``, truncated."""
    return mul(x, y) // RAY


def rdiv(x: int, y: int) -> int:
    """``x * RAY / y``, truncated."""
    return div(mul(x, RAY), y)


def wdiv(x: int, y: int) -> int:
    """``x * WAD / y``, truncated."""
    return div(mul(x, WAD), y)
