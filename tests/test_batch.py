"""
Tests for batch assembly, totals and the lifetime earnings ledger.
"""

import pytest

from pipelines.payroll import (
    build_batch_record,
    compute_batch,
    compute_totals,
    lifetime_earnings_before,
    verify_totals,
)
from refpay.models import RefereeRecord, RefereeSettings, ScheduleEntry

JOHN = RefereeRecord("001", "JOHN SMITH")
JANE = RefereeRecord("002", "JANE DOE")


def _flat_settings(*employee_numbers, rate=30.0):
    return {
        emp: RefereeSettings(employee_number=emp, has_fixed_rate=True, fixed_rate=rate, has_admin_fee=False)
        for emp in employee_numbers
    }


class TestComputeBatch:
    """Test one payroll line per referee."""

    def test_merges_names_resolving_to_same_referee(self, rates, global_settings):
        assignments = [
            (ScheduleEntry("Smith, John", {"12u": 2}), JOHN),
            (ScheduleEntry("J. Smith", {"12u": 1, "Senior": 1}), JOHN),
            (ScheduleEntry("Doe Jane", {"Senior": 1}), JANE),
        ]
        lines = compute_batch(assignments, rates, global_settings, {}, {})

        assert [line.employee_number for line in lines] == ["002", "001"]
        john = lines[1]
        assert john.categories == {"12u": 3, "Senior": 1}
        assert john.games == 4
        assert john.gross_pay == 3 * 29 + 40
        assert john.schedule_name == "Smith, John / J. Smith"

    def test_sorted_by_referee_name(self, rates, global_settings):
        assignments = [
            (ScheduleEntry("Smith", {"12u": 1}), JOHN),
            (ScheduleEntry("Doe", {"12u": 1}), JANE),
        ]
        lines = compute_batch(assignments, rates, global_settings, {}, {})
        assert [line.referee_name for line in lines] == ["JANE DOE", "JOHN SMITH"]

    def test_unresolved_name_paid_under_schedule_name(self, rates, global_settings):
        lines = compute_batch([(ScheduleEntry("Mystery Person", {"Mini": 2}), None)], rates, global_settings, {}, {})
        assert lines[0].employee_number == "Mystery Person"
        assert lines[0].referee_name == "Mystery Person"
        assert lines[0].gross_pay == 50.0

    def test_default_admin_fee_policy(self, rates, global_settings):
        """Without stored settings, exempt employee numbers skip the admin fee."""
        exempt = RefereeRecord("346", "PAMELA L PEREZ MENDEZ")
        assignments = [
            (ScheduleEntry("Perez Pamela", {"12u": 2}), exempt),
            (ScheduleEntry("Smith", {"12u": 2}), JOHN),
        ]
        lines = {line.employee_number: line for line in compute_batch(assignments, rates, global_settings, {}, {})}
        assert lines["346"].admin_fee == 0.0
        assert lines["001"].admin_fee == 4.0

    def test_standing_extra_pay(self, rates, global_settings):
        carmelo = RefereeRecord("2594", "CARMELO DE LA ROSA")
        entry = ScheduleEntry("De La Rosa Carmelo", {"12u": 1})

        lines = compute_batch([(entry, carmelo)], rates, global_settings, {}, {})
        assert lines[0].extra_pay == 175.0

        lines = compute_batch([(entry, carmelo)], rates, global_settings, {}, {}, extra_pay={"2594": 0.0})
        assert lines[0].extra_pay == 0.0

    def test_extra_pay_and_fines_by_employee(self, rates, global_settings):
        lines = compute_batch(
            [(ScheduleEntry("Smith", {"12u": 1}), JOHN)],
            rates,
            global_settings,
            {},
            {},
            extra_pay={"001": 15.0},
            fines={"001": 5.0},
        )
        assert lines[0].extra_pay == 15.0
        assert lines[0].fines == 5.0
        assert lines[0].net_pay == pytest.approx(29 + 15 - 2 - 1 - 5)

    def test_exemption_consumed_across_batches(self, global_settings):
        """300 tax-free, then 200 of the next 300, then nothing left."""
        assignments = [(ScheduleEntry("Smith", {"Senior": 10}), JOHN)]
        settings = _flat_settings("001")
        history = []
        taxes = []
        for i in range(3):
            lifetime = lifetime_earnings_before(history)
            lines = compute_batch(assignments, {}, global_settings, settings, lifetime)
            history.append(build_batch_record(lines, ("2024-01-01", "2024-01-07"), batch_id=f"b{i}"))
            taxes.append(lines[0].hacienda_tax)
        assert taxes == pytest.approx([0.0, 10.0, 30.0])


class TestTotals:
    """Test aggregation and the totals consistency check."""

    def _batch(self, rates, global_settings):
        assignments = [
            (ScheduleEntry("Smith", {"12u": 4, "Senior": 1}), JOHN),
            (ScheduleEntry("Doe", {"14uF": 2}), JANE),
        ]
        lines = compute_batch(assignments, rates, global_settings, {}, {}, fines={"002": 3.0})
        return build_batch_record(lines, ("2024-01-06", "2024-01-13"), timestamp=1700000000.0)

    def test_totals_are_sums_of_lines(self, rates, global_settings):
        batch = self._batch(rates, global_settings)
        totals = batch.totals
        assert totals.total_games == 7
        assert totals.gross_pay == pytest.approx(sum(line.gross_pay for line in batch.referees))
        assert totals.total_fines == 3.0
        assert totals.net_pay == pytest.approx(sum(line.net_pay for line in batch.referees))

    def test_net_equals_earnings_minus_deductions(self, rates, global_settings):
        batch = self._batch(rates, global_settings)
        t = batch.totals
        expected = t.gross_pay + t.total_extra_pay - t.total_admin_fees - t.total_tax - t.total_deposit - t.total_fines
        assert t.net_pay == pytest.approx(expected)

    def test_verify_totals(self, rates, global_settings):
        batch = self._batch(rates, global_settings)
        assert verify_totals(batch) == []

        batch.totals.net_pay += 1.0
        assert verify_totals(batch) == ["net_pay"]

    def test_verify_tolerates_rounding(self, rates, global_settings):
        batch = self._batch(rates, global_settings)
        batch.totals.total_tax += 0.005
        assert verify_totals(batch) == []

    def test_default_batch_id_from_timestamp(self, rates, global_settings):
        batch = self._batch(rates, global_settings)
        assert batch.id == "batch_1700000000000"
        assert batch.timestamp == 1700000000.0

    def test_empty_batch(self):
        totals = compute_totals([])
        assert totals.net_pay == 0.0
        assert totals.total_games == 0


class TestLedger:
    """Test lifetime earnings across saved batches."""

    def test_sums_gross_and_extra(self, rates, global_settings):
        carmelo = RefereeRecord("2594", "CARMELO DE LA ROSA")
        lines = compute_batch([(ScheduleEntry("Carmelo", {"12u": 1}), carmelo)], rates, global_settings, {}, {})
        batch = build_batch_record(lines, ("2024-01-01", "2024-01-07"), batch_id="a")

        assert lifetime_earnings_before([batch]) == {"2594": 29.0 + 175.0}

    def test_excludes_batch_being_recomputed(self, rates, global_settings):
        lines = compute_batch([(ScheduleEntry("Smith", {"12u": 1}), JOHN)], rates, global_settings, {}, {})
        first = build_batch_record(lines, ("2024-01-01", "2024-01-07"), batch_id="a")
        second = build_batch_record(lines, ("2024-01-08", "2024-01-14"), batch_id="b")

        assert lifetime_earnings_before([first, second]) == {"001": 58.0}
        assert lifetime_earnings_before([first, second], exclude_batch_id="b") == {"001": 29.0}
