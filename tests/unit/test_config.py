"""Tests for the compliance parameters in Settings."""

import pytest

from api.config import Settings


class TestTargetPolicy:
    def test_default_derived_from_reference(self):
        policy = Settings().target_policy()
        assert policy.target_for(2024) == pytest.approx(89.3368)

    def test_reference_and_reduction_overrides(self):
        settings = Settings(reference_ghg_intensity=100.0, target_reduction_pct=6.0)
        assert settings.target_policy().target_for(2025) == pytest.approx(94.0)

    def test_explicit_target_wins(self):
        settings = Settings(target_ghg_intensity=88.0, reference_ghg_intensity=100.0)
        assert settings.target_policy().target_for(2024) == 88.0

    def test_per_year_override(self):
        settings = Settings(target_intensity_by_year={2030: 85.6904})
        policy = settings.target_policy()

        assert policy.target_for(2030) == 85.6904
        assert policy.target_for(2024) == pytest.approx(89.3368)
