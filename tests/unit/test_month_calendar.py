"""Unit tests for the month calendar generator."""

from datetime import date

from rental_ledger.services.month_calendar import (
    CALENDAR_MONTHS,
    MONTHS_PER_PAGE,
    MonthSelection,
    generate_month_calendar,
    paginate,
)


class TestGenerateMonthCalendar:
    """Test calendar window generation."""

    def test_window_has_36_months(self):
        months = generate_month_calendar(date(2025, 1, 15), None, [], today=date(2025, 1, 20))
        assert len(months) == CALENDAR_MONTHS == 36

    def test_window_starts_at_current_month_when_start_is_past(self):
        months = generate_month_calendar(date(2025, 1, 15), None, [], today=date(2025, 1, 20))
        assert months[0].date == date(2025, 1, 1)

    def test_window_starts_at_start_month_when_start_is_future(self):
        months = generate_month_calendar(date(2025, 6, 10), None, [], today=date(2025, 1, 20))
        assert months[0].date == date(2025, 6, 1)

    def test_window_starts_at_today_for_old_contracts(self):
        months = generate_month_calendar(date(2022, 3, 1), None, [], today=date(2025, 1, 20))
        assert months[0].date == date(2025, 1, 1)

    def test_months_are_consecutive_first_days(self):
        months = generate_month_calendar(date(2025, 11, 3), None, [], today=date(2025, 1, 1))
        assert [m.key for m in months[:4]] == ["2025-11", "2025-12", "2026-01", "2026-02"]
        assert all(m.date.day == 1 for m in months)

    def test_exactly_paid_keys_are_marked_paid(self):
        paid = ["2025-02", "2025-05", "2024-12", "2030-01"]
        months = generate_month_calendar(date(2025, 1, 15), None, paid, today=date(2025, 1, 20))
        assert [m.key for m in months if m.paid] == ["2025-02", "2025-05"]

    def test_paid_months_accept_json_string(self):
        months = generate_month_calendar(
            date(2025, 1, 15), None, '["2025-01","2025-02"]', today=date(2025, 1, 20)
        )
        assert [m.key for m in months if m.paid] == ["2025-01", "2025-02"]

    def test_malformed_paid_months_mark_nothing_paid(self):
        months = generate_month_calendar(date(2025, 1, 15), None, "{oops", today=date(2025, 1, 20))
        assert not any(m.paid for m in months)

    def test_months_up_to_end_date_are_preselected(self):
        months = generate_month_calendar(
            date(2025, 1, 15), date(2025, 3, 31), [], today=date(2025, 1, 20)
        )
        assert [m.key for m in months if m.selected] == ["2025-01", "2025-02", "2025-03"]

    def test_mid_month_end_date_selects_its_month(self):
        months = generate_month_calendar(
            date(2025, 1, 15), date(2025, 2, 14), [], today=date(2025, 1, 20)
        )
        assert [m.key for m in months if m.selected] == ["2025-01", "2025-02"]

    def test_past_end_date_selects_nothing(self):
        months = generate_month_calendar(
            date(2024, 1, 1), date(2024, 6, 30), [], today=date(2025, 1, 20)
        )
        assert not any(m.selected for m in months)

    def test_missing_start_date_gives_empty_window(self):
        assert generate_month_calendar(None, None, [], today=date(2025, 1, 20)) == ()


class TestPaginate:
    """Test calendar pagination."""

    def _window(self):
        return generate_month_calendar(date(2025, 1, 1), None, [], today=date(2025, 1, 1))

    def test_pages_of_twelve(self):
        page = paginate(self._window(), 1)
        assert page.total_pages == 3
        assert page.offset == MONTHS_PER_PAGE
        assert len(page.months) == 12
        assert page.months[0].key == "2026-01"

    def test_out_of_range_pages_are_clamped(self):
        assert paginate(self._window(), 7).page == 2
        assert paginate(self._window(), -3).page == 0

    def test_empty_window_has_one_page(self):
        page = paginate((), 0)
        assert page.total_pages == 1
        assert page.months == ()

    def test_month_selection_key(self):
        assert MonthSelection(date=date(2025, 7, 1)).key == "2025-07"
