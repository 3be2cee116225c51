"""Tests for plain and Firth Newton-Raphson."""

import math

import numpy as np
import pytest

from panassoc.association.fit import build_design_matrix
from panassoc.association.newton import logit_mean, newton_raphson
from panassoc.association.results import (
    FIRTH_FAIL,
    NR_FAIL,
    FitFailure,
    FitMethod,
    FitSuccess,
)
from panassoc.core import FitConfig

pytestmark = pytest.mark.tier0


def _design(presence):
    return np.column_stack([np.ones(len(presence)), presence])


def _haldane(a, b, c, d):
    return math.log((a + 0.5) * (d + 0.5) / ((b + 0.5) * (c + 0.5)))


class TestLogitMean:
    def test_balanced(self):
        assert logit_mean(np.array([0.0, 1.0, 0.0, 1.0])) == 0.0

    def test_quarter(self):
        assert logit_mean(np.array([1.0, 0.0, 0.0, 0.0])) == pytest.approx(-math.log(3.0))


class TestPlainNewton:
    """Tests for unpenalized Newton-Raphson."""

    def test_closed_form_two_by_two(self, two_by_two):
        presence, y = two_by_two(20, 10, 10, 20)
        outcome = newton_raphson(y, _design(presence))

        assert isinstance(outcome, FitSuccess)
        assert outcome.method is FitMethod.NEWTON
        assert outcome.coefficient == pytest.approx(math.log(4.0), abs=1e-6)
        assert outcome.standard_error == pytest.approx(math.sqrt(0.3), abs=1e-6)
        assert 0.0 < outcome.p_value < 0.05
        assert outcome.iterations >= 1

    def test_null_effect(self, two_by_two):
        presence, y = two_by_two(10, 10, 10, 10)
        outcome = newton_raphson(y, _design(presence))

        assert isinstance(outcome, FitSuccess)
        assert outcome.coefficient == pytest.approx(0.0, abs=1e-8)
        assert outcome.p_value == pytest.approx(1.0)

    def test_separation_fails(self, two_by_two):
        """With perfect separation the MLE does not exist."""
        presence, y = two_by_two(10, 0, 0, 30)
        outcome = newton_raphson(y, _design(presence))
        assert outcome == FitFailure(NR_FAIL)

    def test_iteration_cap(self, two_by_two):
        presence, y = two_by_two(20, 10, 10, 20)
        outcome = newton_raphson(y, _design(presence), config=FitConfig(max_iterations=1))
        assert outcome == FitFailure(NR_FAIL)

    def test_zero_variance_kmer_fails(self):
        y = np.array([1.0, 0.0] * 10)
        outcome = newton_raphson(y, _design(np.zeros(20)))
        assert outcome == FitFailure(NR_FAIL)

    def test_with_covariates(self, covariate_data):
        presence, y, covariates = covariate_data
        X = build_design_matrix(presence, covariates)
        outcome = newton_raphson(y, X, config=FitConfig.strict())

        assert isinstance(outcome, FitSuccess)
        assert outcome.coefficient == pytest.approx(1.2, abs=0.8)
        assert outcome.standard_error > 0.0


class TestFirthNewton:
    """Tests for Firth-penalized Newton-Raphson."""

    def test_matches_haldane_correction(self, two_by_two):
        """For a saturated 2x2 model Firth equals adding 0.5 to every cell."""
        presence, y = two_by_two(8, 2, 2, 28)
        outcome = newton_raphson(y, _design(presence), firth=True)

        assert isinstance(outcome, FitSuccess)
        assert outcome.method is FitMethod.FIRTH
        assert outcome.coefficient == pytest.approx(_haldane(8, 2, 2, 28), abs=1e-6)

    def test_shrinks_towards_zero(self, two_by_two):
        presence, y = two_by_two(8, 2, 2, 28)
        plain = newton_raphson(y, _design(presence))
        firth = newton_raphson(y, _design(presence), firth=True)

        assert isinstance(plain, FitSuccess) and isinstance(firth, FitSuccess)
        assert 0.0 < firth.coefficient < plain.coefficient

    def test_finite_under_separation(self, two_by_two):
        presence, y = two_by_two(10, 0, 0, 30)
        outcome = newton_raphson(y, _design(presence), firth=True)

        assert isinstance(outcome, FitSuccess)
        assert outcome.coefficient == pytest.approx(_haldane(10, 0, 0, 30), abs=1e-5)
        assert math.isfinite(outcome.standard_error)
        assert outcome.standard_error > 0.0

    def test_iteration_cap(self, two_by_two):
        presence, y = two_by_two(10, 0, 0, 30)
        outcome = newton_raphson(
            y, _design(presence), firth=True, config=FitConfig(max_iterations=1)
        )
        assert outcome == FitFailure(FIRTH_FAIL)

    def test_zero_variance_kmer_fails(self):
        y = np.array([1.0, 0.0] * 10)
        outcome = newton_raphson(y, _design(np.zeros(20)), firth=True)
        assert outcome == FitFailure(FIRTH_FAIL)
