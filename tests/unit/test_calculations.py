"""Tests for the Compliance Balance formulas and target resolution."""

import pytest

from src.compliance.calculations import (
    ENERGY_CONVERSION_MJ_PER_T,
    REFERENCE_GHG_INTENSITY,
    TARGET_GHG_INTENSITY,
    TargetIntensityPolicy,
    compliance_balance,
    energy,
    percent_diff,
)


# =============================================================================
# Energy in scope
# =============================================================================

class TestEnergy:
    def test_default_conversion(self):
        assert energy(950) == pytest.approx(38_950_000.0)

    def test_custom_conversion(self):
        assert energy(10, conversion_mj_per_t=40_000) == pytest.approx(400_000.0)

    def test_zero_fuel(self):
        assert energy(0) == 0.0

    def test_conversion_constant(self):
        assert ENERGY_CONVERSION_MJ_PER_T == 41_000.0


# =============================================================================
# Compliance Balance
# =============================================================================

class TestComplianceBalance:
    def test_surplus_when_below_target(self):
        """Bulk carrier on VLSFO at 88.2: (89.3368 - 88.2) * 38.95e6."""
        cb = compliance_balance(TARGET_GHG_INTENSITY, 88.2, energy(950))
        assert cb == pytest.approx(44_278_360.0, rel=1e-9)
        assert cb > 0

    def test_deficit_when_above_target(self):
        """Container ship on HFO at 95.5: (89.3368 - 95.5) * 49.2e6."""
        cb = compliance_balance(TARGET_GHG_INTENSITY, 95.5, energy(1200))
        assert cb == pytest.approx(-303_229_440.0, rel=1e-9)

    def test_zero_at_target(self):
        assert compliance_balance(89.3368, 89.3368, 1e6) == 0.0

    def test_zero_energy(self):
        assert compliance_balance(89.3368, 95.0, 0.0) == 0.0


# =============================================================================
# Percentage difference
# =============================================================================

class TestPercentDiff:
    def test_higher_comparison(self):
        assert percent_diff(80.0, 88.0) == pytest.approx(10.0)

    def test_lower_comparison(self):
        assert percent_diff(95.5, 88.2) == pytest.approx(-7.6439790, abs=1e-6)

    def test_zero_baseline(self):
        assert percent_diff(0.0, 50.0) == 0.0


# =============================================================================
# Target policy
# =============================================================================

class TestTargetIntensityPolicy:
    def test_default_target(self):
        assert TargetIntensityPolicy().target_for(2024) == TARGET_GHG_INTENSITY

    def test_year_override(self):
        policy = TargetIntensityPolicy(by_year={2030: 85.6904})
        assert policy.target_for(2030) == 85.6904
        assert policy.target_for(2029) == TARGET_GHG_INTENSITY

    def test_from_reduction_matches_constant(self):
        policy = TargetIntensityPolicy.from_reduction(REFERENCE_GHG_INTENSITY, 2.0)
        assert policy.default == pytest.approx(TARGET_GHG_INTENSITY)

    def test_from_reduction_six_percent(self):
        policy = TargetIntensityPolicy.from_reduction(reduction_pct=6.0)
        assert policy.default == pytest.approx(85.6904)
