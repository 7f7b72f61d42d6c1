# /aave_liquidator/core/wad_ray_math.py
"""
Off-chain replica of Aave's WadRayMath and PercentageMath libraries.

Python integers never overflow, so every operation checks its inputs against
the same uint256 bounds the Solidity code uses. That keeps overflow behaviour
and half-up rounding bit-for-bit identical to the protocol, which is what
makes the profit estimates trustworthy.
"""

MAX_UINT256 = 2**256 - 1

WAD = 10**18
HALF_WAD = WAD // 2
RAY = 10**27
HALF_RAY = RAY // 2
WAD_RAY_RATIO = 10**9

# Basis points: 10000 == 100.00%
PERCENTAGE_FACTOR = 10**4
HALF_PERCENTAGE_FACTOR = PERCENTAGE_FACTOR // 2


class WadRayMathError(ArithmeticError):
    pass


class MathOverflowError(WadRayMathError, OverflowError):
    pass


class MathDivisionByZeroError(WadRayMathError, ZeroDivisionError):
    pass


def _uint(value: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0 or value > MAX_UINT256:
        raise ValueError(f"{name} out of uint256 range: {value}")
    return value


def _mul(a: int, b: int, scale: int, half_scale: int, op: str) -> int:
    _uint(a, "a")
    _uint(b, "b")
    if b == 0:
        return 0
    # Bound checked before multiplying, as the product may not fit in 256 bits
    if a > (MAX_UINT256 - half_scale) // b:
        raise MathOverflowError(f"{op}: multiplication overflow")
    return (a * b + half_scale) // scale


def _div(a: int, b: int, scale: int, op: str) -> int:
    _uint(a, "a")
    _uint(b, "b")
    if b == 0:
        raise MathDivisionByZeroError(f"{op}: division by zero")
    half_b = b // 2
    if a > (MAX_UINT256 - half_b) // scale:
        raise MathOverflowError(f"{op}: multiplication overflow")
    return (a * scale + half_b) // b


def wad_mul(a: int, b: int) -> int:
    """Multiplies two wads, rounding half up to the nearest wad."""
    return _mul(a, b, WAD, HALF_WAD, "wadMul")


def wad_div(a: int, b: int) -> int:
    """Divides two wads, rounding half up to the nearest wad."""
    return _div(a, b, WAD, "wadDiv")


def ray_mul(a: int, b: int) -> int:
    """Multiplies two rays, rounding half up to the nearest ray."""
    return _mul(a, b, RAY, HALF_RAY, "rayMul")


def ray_div(a: int, b: int) -> int:
    """Divides two rays, rounding half up to the nearest ray."""
    return _div(a, b, RAY, "rayDiv")


def ray_to_wad(a: int) -> int:
    """Converts a ray to a wad, rounding half up."""
    _uint(a, "a")
    result, remainder = divmod(a, WAD_RAY_RATIO)
    if remainder >= WAD_RAY_RATIO // 2:
        result += 1
    return result


def wad_to_ray(a: int) -> int:
    """Converts a wad to a ray."""
    _uint(a, "a")
    result = a * WAD_RAY_RATIO
    if result > MAX_UINT256:
        raise MathOverflowError("wadToRay: overflow")
    return result


def percent_mul(value: int, percentage: int) -> int:
    """
    Applies a basis-point percentage to value, rounding half up.

    percent_mul(x, 10500) is x scaled by 105%.
    """
    return _mul(value, percentage, PERCENTAGE_FACTOR, HALF_PERCENTAGE_FACTOR, "percentMul")


def percent_div(value: int, percentage: int) -> int:
    """Inverse of percent_mul: value divided by a basis-point percentage, rounding half up."""
    return _div(value, percentage, PERCENTAGE_FACTOR, "percentDiv")


def checked_mul(*factors: int) -> int:
    """Product of uint256 factors, failing as soon as a partial product leaves uint256."""
    result = 1
    for i, factor in enumerate(factors):
        result *= _uint(factor, f"factor[{i}]")
        if result > MAX_UINT256:
            raise MathOverflowError("checkedMul: multiplication overflow")
    return result
