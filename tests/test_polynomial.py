"""
Tests for GF(2) Polynomial Arithmetic

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-25
"""

import io
import random

import pytest

from cchunker_core import ConfigurationError
from cchunker_core.polynomial import (
    DEFAULT_POLYNOMIAL,
    POLYNOMIAL_DEGREE,
    derive_polynomial,
    is_irreducible,
    parse_polynomial,
    pol_deg,
    pol_gcd,
    pol_mod,
    pol_mul,
    pol_mulmod,
    random_polynomial,
)


class TestArithmetic:
    """Tests for degree, product, remainder and gcd."""

    def test_degree(self):
        assert pol_deg(0) == -1
        assert pol_deg(1) == 0
        assert pol_deg(0b1011) == 3
        assert pol_deg(DEFAULT_POLYNOMIAL) == 53

    def test_mul_is_carry_less(self):
        # (x + 1)^2 = x^2 + 1
        assert pol_mul(0b11, 0b11) == 0b101
        # (x^2 + x + 1)^2 = x^4 + x^2 + 1
        assert pol_mul(0b111, 0b111) == 0b10101
        assert pol_mul(DEFAULT_POLYNOMIAL, 1) == DEFAULT_POLYNOMIAL
        assert pol_mul(DEFAULT_POLYNOMIAL, 0) == 0

    def test_mod(self):
        assert pol_mod(0b101, 0b11) == 0
        assert pol_mod(0b111, 0b11) == 1
        assert pol_mod(0b10, 0b111) == 0b10
        assert pol_mod(0, 0b111) == 0

    def test_mod_by_zero(self):
        with pytest.raises(ZeroDivisionError):
            pol_mod(0b101, 0)

    def test_mulmod(self):
        # x * x mod (x^2 + x + 1) = x + 1
        assert pol_mulmod(0b10, 0b10, 0b111) == 0b11

    def test_gcd(self):
        assert pol_gcd(0b101, 0b11) == 0b11
        assert pol_gcd(0b111, 0b11) == 1
        assert pol_gcd(0b10101, 0b111) == 0b111


class TestIrreducible:
    """Tests for the Ben-Or irreducibility test."""

    @pytest.mark.parametrize("pol", [0b10, 0b11, 0b111, 0b1011, 0b1101, DEFAULT_POLYNOMIAL])
    def test_irreducible(self, pol):
        assert is_irreducible(pol)

    @pytest.mark.parametrize("pol", [0, 1, 0b101, 0b10101, 0b110, DEFAULT_POLYNOMIAL - 1])
    def test_reducible(self, pol):
        assert not is_irreducible(pol)

    def test_product_is_reducible(self):
        assert not is_irreducible(pol_mul(0b1011, 0b111))


class TestGeneration:
    """Tests for random polynomial generation."""

    def test_derive_is_deterministic(self):
        source = random.Random(7).randbytes(8 * 4096)
        first = derive_polynomial(io.BytesIO(source).read)
        second = derive_polynomial(io.BytesIO(source).read)
        assert first == second

    def test_derived_shape(self):
        pol = derive_polynomial(io.BytesIO(random.Random(11).randbytes(8 * 4096)).read)
        assert pol_deg(pol) == POLYNOMIAL_DEGREE
        assert pol & 1
        assert is_irreducible(pol)

    def test_exhausted_source(self):
        with pytest.raises(ConfigurationError):
            derive_polynomial(io.BytesIO(b"").read)

    def test_random_polynomial(self):
        pol = random_polynomial()
        assert pol_deg(pol) == POLYNOMIAL_DEGREE
        assert is_irreducible(pol)


class TestParse:
    """Tests for polynomial parsing."""

    def test_hex(self):
        assert parse_polynomial("0x3DA3358B4DC173") == DEFAULT_POLYNOMIAL

    def test_decimal(self):
        assert parse_polynomial(str(DEFAULT_POLYNOMIAL)) == DEFAULT_POLYNOMIAL

    def test_int_passthrough(self):
        assert parse_polynomial(DEFAULT_POLYNOMIAL) == DEFAULT_POLYNOMIAL

    @pytest.mark.parametrize("text", ["", "abc", "0", "-5", str(1 << 64)])
    def test_invalid(self, text):
        with pytest.raises(ConfigurationError):
            parse_polynomial(text)
