"""Tests for the banking engine: surplus banking and FIFO application."""

import math

import pytest

from api.repositories import SqlAlchemyBankingRepository
from src.compliance.errors import ConsistencyError, NotFoundError, ValidationError


def _unapplied(uow, ship_id):
    return sorted(uow.banking.find_unapplied(ship_id), key=lambda e: e.id)


def _all_entries(uow, ship_id):
    return sorted(uow.banking.find_by_ship(ship_id), key=lambda e: e.id)


# =============================================================================
# bank_surplus
# =============================================================================

class TestBankSurplus:
    def test_reduces_cb_and_raises_balance(self, banking, add_compliance, cb_of):
        add_compliance("SHIP-A", 2024, 1000.0)

        result = banking.bank_surplus("SHIP-A", 2024, 400.0)

        assert result.cb_before == 1000.0
        assert result.applied == 400.0
        assert result.cb_after == 600.0
        assert result.year == 2024
        assert cb_of("SHIP-A", 2024) == pytest.approx(600.0)
        assert banking.get_available_balance("SHIP-A") == pytest.approx(400.0)

    def test_bank_entire_surplus(self, banking, add_compliance, cb_of):
        add_compliance("SHIP-A", 2024, 250.0)

        banking.bank_surplus("SHIP-A", 2024, 250.0)

        assert cb_of("SHIP-A", 2024) == 0.0
        assert banking.get_available_balance("SHIP-A") == pytest.approx(250.0)

    def test_creates_unapplied_entry(self, banking, uow, add_compliance):
        add_compliance("SHIP-A", 2024, 1000.0)
        banking.bank_surplus("SHIP-A", 2024, 300.0)

        entries = _all_entries(uow, "SHIP-A")
        assert len(entries) == 1
        assert entries[0].year == 2024
        assert entries[0].amount_gco2eq == 300.0
        assert entries[0].applied is False
        assert entries[0].applied_year is None

    @pytest.mark.parametrize("amount", [0.0, -5.0, math.nan, math.inf])
    def test_rejects_non_positive_amount(self, banking, uow, add_compliance, cb_of, amount):
        add_compliance("SHIP-A", 2024, 1000.0)

        with pytest.raises(ValidationError, match="non-positive"):
            banking.bank_surplus("SHIP-A", 2024, amount)

        assert cb_of("SHIP-A", 2024) == 1000.0
        assert uow.banking.find_by_ship("SHIP-A") == []

    def test_rejects_amount_above_surplus(self, banking, uow, add_compliance, cb_of):
        add_compliance("SHIP-A", 2024, 100.0)

        with pytest.raises(ValidationError, match="exceeds available surplus"):
            banking.bank_surplus("SHIP-A", 2024, 100.5)

        assert cb_of("SHIP-A", 2024) == 100.0
        assert banking.get_available_balance("SHIP-A") == 0.0

    def test_rejects_deficit_record(self, banking, add_compliance, cb_of):
        add_compliance("SHIP-B", 2024, -500.0)

        with pytest.raises(ValidationError, match="negative or zero"):
            banking.bank_surplus("SHIP-B", 2024, 10.0)

        assert cb_of("SHIP-B", 2024) == -500.0

    def test_rejects_zero_record(self, banking, add_compliance):
        add_compliance("SHIP-B", 2024, 0.0)

        with pytest.raises(ValidationError):
            banking.bank_surplus("SHIP-B", 2024, 1.0)

    def test_missing_record(self, banking):
        with pytest.raises(NotFoundError):
            banking.bank_surplus("NOPE", 2024, 10.0)


# =============================================================================
# apply_banked
# =============================================================================

class TestApplyBanked:
    @pytest.fixture
    def two_entries(self, banking, add_compliance):
        """E1(5) then E2(10) banked from 2024, and a 2025 deficit of -20."""
        add_compliance("SHIP-A", 2024, 100.0)
        add_compliance("SHIP-A", 2025, -20.0)
        banking.bank_surplus("SHIP-A", 2024, 5.0)
        banking.bank_surplus("SHIP-A", 2024, 10.0)

    def test_fifo_split(self, banking, uow, two_entries):
        banking.apply_banked("SHIP-A", 2025, 7.0)

        e1, e2, remainder = _all_entries(uow, "SHIP-A")

        assert e1.amount_gco2eq == pytest.approx(5.0)
        assert e1.applied is True
        assert e1.applied_year == 2025

        assert e2.amount_gco2eq == pytest.approx(2.0)
        assert e2.applied is True
        assert e2.applied_year == 2025

        assert remainder.amount_gco2eq == pytest.approx(8.0)
        assert remainder.applied is False
        assert remainder.applied_year is None
        assert remainder.year == 2024

    def test_updates_deficit_cb(self, banking, cb_of, two_entries):
        result = banking.apply_banked("SHIP-A", 2025, 7.0)

        assert result.cb_before == pytest.approx(-20.0)
        assert result.applied == pytest.approx(7.0)
        assert result.cb_after == pytest.approx(-13.0)
        assert result.year == 2025
        assert cb_of("SHIP-A", 2025) == pytest.approx(-13.0)
        # Origin year untouched
        assert cb_of("SHIP-A", 2024) == pytest.approx(85.0)

    def test_balance_drops_by_applied(self, banking, two_entries):
        before = banking.get_available_balance("SHIP-A")
        banking.apply_banked("SHIP-A", 2025, 7.0)
        assert banking.get_available_balance("SHIP-A") == pytest.approx(before - 7.0)

    def test_total_amount_conserved(self, banking, uow, two_entries):
        banking.apply_banked("SHIP-A", 2025, 7.0)
        banking.apply_banked("SHIP-A", 2025, 3.5)

        total = sum(e.amount_gco2eq for e in _all_entries(uow, "SHIP-A"))
        assert total == pytest.approx(15.0)
        assert banking.get_available_balance("SHIP-A") == pytest.approx(4.5)

    def test_exact_entry_amount_no_split(self, banking, uow, two_entries):
        banking.apply_banked("SHIP-A", 2025, 5.0)

        entries = _all_entries(uow, "SHIP-A")
        assert len(entries) == 2
        assert [e.applied for e in entries] == [True, False]

    def test_apply_everything(self, banking, uow, two_entries):
        banking.apply_banked("SHIP-A", 2025, 15.0)

        assert banking.get_available_balance("SHIP-A") == 0.0
        assert _unapplied(uow, "SHIP-A") == []

    def test_tiny_amount_still_consumes_oldest_entry(self, banking, uow, cb_of, two_entries):
        banking.apply_banked("SHIP-A", 2025, 5e-7)

        assert cb_of("SHIP-A", 2025) == pytest.approx(-20.0 + 5e-7, abs=1e-12)
        assert banking.get_available_balance("SHIP-A") == pytest.approx(15.0 - 5e-7, abs=1e-12)

        e1, e2, remainder = _all_entries(uow, "SHIP-A")
        assert e1.applied is True
        assert e1.amount_gco2eq == pytest.approx(5e-7, abs=1e-12)
        assert e2.applied is False
        assert remainder.amount_gco2eq == pytest.approx(5.0 - 5e-7, abs=1e-12)
        assert remainder.applied is False

    def test_rejects_above_available(self, banking, uow, cb_of, two_entries):
        with pytest.raises(ValidationError, match="Insufficient banked balance"):
            banking.apply_banked("SHIP-A", 2025, 15.01)

        assert cb_of("SHIP-A", 2025) == -20.0
        assert len(_unapplied(uow, "SHIP-A")) == 2

    @pytest.mark.parametrize("amount", [0.0, -1.0])
    def test_rejects_non_positive(self, banking, two_entries, amount):
        with pytest.raises(ValidationError):
            banking.apply_banked("SHIP-A", 2025, amount)

    def test_missing_deficit_record(self, banking, uow, two_entries):
        with pytest.raises(NotFoundError):
            banking.apply_banked("SHIP-A", 2026, 5.0)

        assert banking.get_available_balance("SHIP-A") == pytest.approx(15.0)

    def test_exhausted_entries_raise_consistency_error(self, banking, uow, cb_of, two_entries):
        class OverstatedBalance(SqlAlchemyBankingRepository):
            def sum_unapplied(self, ship_id):
                return 1_000.0

        uow.banking = OverstatedBalance(uow.db)

        with pytest.raises(ConsistencyError):
            banking.apply_banked("SHIP-A", 2025, 50.0)

        # Nothing from the failed call is kept
        assert cb_of("SHIP-A", 2025) == -20.0
        assert [e.applied for e in _all_entries(uow, "SHIP-A")] == [False, False]


# =============================================================================
# Records
# =============================================================================

class TestBankingRecords:
    def test_newest_first(self, banking, add_compliance):
        add_compliance("SHIP-A", 2024, 100.0)
        banking.bank_surplus("SHIP-A", 2024, 1.0)
        banking.bank_surplus("SHIP-A", 2024, 2.0)

        records = banking.get_banking_records("SHIP-A")
        assert [r.amount_gco2eq for r in records] == [2.0, 1.0]

    def test_year_filter_includes_applied_year(self, banking, add_compliance):
        add_compliance("SHIP-A", 2024, 100.0)
        add_compliance("SHIP-A", 2025, -50.0)
        banking.bank_surplus("SHIP-A", 2024, 10.0)
        banking.apply_banked("SHIP-A", 2025, 10.0)

        assert len(banking.get_banking_records("SHIP-A", 2024)) == 1
        assert len(banking.get_banking_records("SHIP-A", 2025)) == 1
        assert banking.get_banking_records("SHIP-A", 2023) == []

    def test_other_ships_excluded(self, banking, add_compliance):
        add_compliance("SHIP-A", 2024, 100.0)
        banking.bank_surplus("SHIP-A", 2024, 10.0)

        assert banking.get_banking_records("SHIP-B") == []
        assert banking.get_available_balance("SHIP-B") == 0.0
