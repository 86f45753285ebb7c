#!/usr/bin/env python3
"""
Tests for ProofConfig and the CLI number parsing it relies on.
"""

import argparse
import sys
from fractions import Fraction
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from intervals import inf, sup
from proof_config import ProofConfig, add_config_arguments
from utils import parse_number


def test_defaults_reproduce_the_published_run():
    """N = 20, d = 4, λ₁ = 1/9, s₀ = 0.0005, 30 Newton steps"""
    c = ProofConfig()
    assert (c.N, c.d, c.lambda1, c.s0) == (20, Fraction(4), Fraction(1, 9), Fraction(1, 2000))
    assert c.newton_max_iter == 30
    assert c.floats()["lambda1"] == pytest.approx(1 / 9)


def test_strings_are_parsed_exactly():
    """Decimal strings become exact rationals"""
    c = ProofConfig(d="3.5", lambda1="1/10", s0="0.0005")
    assert c.d == Fraction(7, 2)
    assert c.s0 == Fraction(1, 2000)
    assert parse_number("0.0005").rational == "1/2000"


def test_interval_encloses_the_exact_parameter():
    """config.interval gives a rigorous enclosure"""
    x = ProofConfig().interval("lambda1")
    assert Fraction(inf(x)) <= Fraction(1, 9) <= Fraction(sup(x))


@pytest.mark.parametrize("kwargs", [
    {"d": 0}, {"lambda1": -1}, {"s0": 0}, {"N": -1}, {"char_prec": 20},
    {"lambda1": Fraction(1, 9), "gamma": 8},
])
def test_invalid_configurations_raise(kwargs):
    """Validation failures are ValueErrors"""
    with pytest.raises(ValueError):
        ProofConfig(**kwargs)


def test_gamma_must_be_reciprocal_of_lambda1():
    """λ₁γ = 1 is the reduced model"""
    c = ProofConfig(lambda1=Fraction(1, 9), gamma=9)
    assert c.gamma == 9
    assert c.as_payload()["gamma"] == "9/1"


def test_cli_arguments_round_trip():
    """argparse defaults build the default configuration"""
    ap = argparse.ArgumentParser()
    add_config_arguments(ap)
    args = ap.parse_args(["--N", "6", "--lambda1", "1/9", "--s0", "1/1000"])
    c = ProofConfig.from_args(args)
    assert c.N == 6
    assert c.s0 == Fraction(1, 1000)
    assert c.d == Fraction(4)


def test_unparseable_number_raises():
    """Garbage on the CLI is rejected"""
    with pytest.raises(ValueError):
        parse_number("one ninth")
