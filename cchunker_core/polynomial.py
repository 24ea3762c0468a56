"""
Polynomials over GF(2) for Rabin Fingerprinting

A polynomial is a plain int whose bit i is the coefficient of x^i. Addition is
XOR, multiplication is carry-less. Only irreducible polynomials give well
distributed chunk boundaries, so new ones are drawn at random and tested with
Ben-Or's algorithm.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-24
"""

import logging
import os
from typing import Callable

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Degree of randomly generated polynomials
POLYNOMIAL_DEGREE = 53

# Default chunking polynomial, irreducible
DEFAULT_POLYNOMIAL = 0x3DA3358B4DC173

MAX_POLYNOMIAL = (1 << 64) - 1
RANDOM_POLYNOMIAL_MAX_TRIES = 1_000_000


def pol_deg(x: int) -> int:
    """Degree of x, -1 for the zero polynomial."""
    return x.bit_length() - 1


def pol_mul(x: int, y: int) -> int:
    """Carry-less product of x and y."""
    res = 0
    while y:
        if y & 1:
            res ^= x
        x <<= 1
        y >>= 1
    return res


def pol_mod(x: int, d: int) -> int:
    """Remainder of x divided by d."""
    if d == 0:
        raise ZeroDivisionError("polynomial division by zero")
    dd = pol_deg(d)
    while x and pol_deg(x) >= dd:
        x ^= d << (pol_deg(x) - dd)
    return x


def pol_mulmod(x: int, f: int, g: int) -> int:
    """(x * f) mod g."""
    return pol_mod(pol_mul(x, f), g)


def pol_gcd(x: int, f: int) -> int:
    """Greatest common divisor of x and f."""
    while f:
        x, f = f, pol_mod(x, f)
    return x


def _qp(p: int, g: int) -> int:
    """(x^(2^p) - x) mod g."""
    res = 2  # x
    for _ in range(p):
        res = pol_mulmod(res, res, g)
    return pol_mod(res ^ 2, g)


def is_irreducible(x: int) -> bool:
    """
    Ben-Or irreducibility test.

    x is irreducible iff gcd(x, x^(2^i) - x mod x) == 1 for every
    i in 1..deg(x)/2.

    Constants (0 and 1) are never reported irreducible, although restic's
    Pol.Irreducible() accepts 1. Neither can drive the rolling hash.
    """
    if x <= 1:
        return False
    for i in range(1, pol_deg(x) // 2 + 1):
        if pol_gcd(x, _qp(i, x)) != 1:
            return False
    return True


def derive_polynomial(read_bytes: Callable[[int], bytes]) -> int:
    """
    Draw candidates from read_bytes until one is irreducible.

    Candidates are 8 little-endian bytes masked to POLYNOMIAL_DEGREE bits with
    the top and constant coefficients forced to 1.

    Raises:
        ConfigurationError: if no irreducible polynomial was found
    """
    for attempt in range(1, RANDOM_POLYNOMIAL_MAX_TRIES + 1):
        raw = read_bytes(8)
        if len(raw) != 8:
            raise ConfigurationError("random source exhausted while deriving polynomial")
        f = int.from_bytes(raw, "little")
        f &= (1 << (POLYNOMIAL_DEGREE + 1)) - 1
        f |= (1 << POLYNOMIAL_DEGREE) | 1
        if is_irreducible(f):
            logger.debug(f"Found irreducible polynomial {f:#x} after {attempt} tries")
            return f
    raise ConfigurationError("unable to find new random irreducible polynomial")


def random_polynomial() -> int:
    """Random irreducible polynomial of degree POLYNOMIAL_DEGREE."""
    return derive_polynomial(os.urandom)


def parse_polynomial(text: str) -> int:
    """
    Parse a polynomial given as decimal or prefixed (0x, 0o, 0b) integer text.

    Raises:
        ConfigurationError: if text is not an integer in [1, 2^64)
    """
    try:
        value = int(str(text).strip(), 0)
    except ValueError:
        raise ConfigurationError(f"invalid polynomial: {text!r}") from None
    if not 0 < value <= MAX_POLYNOMIAL:
        raise ConfigurationError(f"polynomial out of range: {text!r}")
    return value
