from datetime import datetime

import pytest

from finance_insights import calculations as calc
from finance_insights.models import DateRange, ExpenseRecord, IncomeRecord, SpendingIntensity


def expense(amount, category, when, record_id=None):
    return ExpenseRecord(id=record_id or f"e-{category}-{when:%Y%m%d%H%M}-{amount}", amount=amount, category=category, date=when)


def income(amount, when, kind='salary'):
    return IncomeRecord(id=f"i-{when:%Y%m%d}-{amount}", amount=amount, type=kind, date=when)


def sample_expenses():
    return [
        expense(10000, 'rent', datetime(2024, 1, 3)),
        expense(20000, 'groceries', datetime(2024, 1, 5)),
        expense(5000, 'rent', datetime(2024, 1, 9)),
    ]


def test_totals_of_empty_lists_are_zero():
    assert calc.total_expenses([]) == 0
    assert calc.total_income([]) == 0
    assert calc.net_amount([], []) == 0


def test_net_amount_can_be_negative():
    assert calc.net_amount([income(1000, datetime(2024, 1, 1))], sample_expenses()) == -34000


def test_savings_rate_is_zero_without_income():
    assert calc.savings_rate([], sample_expenses()) == 0.0
    assert calc.savings_rate([], []) == 0.0


def test_savings_rate():
    records = [income(100000, datetime(2024, 1, 1))]
    assert calc.savings_rate(records, [expense(25000, 'rent', datetime(2024, 1, 2))]) == pytest.approx(75.0)


def test_category_breakdown_groups_and_sorts_by_amount():
    breakdown = calc.category_breakdown(sample_expenses())
    assert [entry.category for entry in breakdown] == ['groceries', 'rent']

    groceries, rent = breakdown
    assert groceries.amount == 20000
    assert groceries.count == 1
    assert groceries.percentage == pytest.approx(57.142857, rel=1e-5)
    assert rent.amount == 15000
    assert rent.count == 2
    assert rent.percentage == pytest.approx(42.857142, rel=1e-5)
    assert sum(entry.percentage for entry in breakdown) == pytest.approx(100.0)


def test_category_breakdown_ties_ordered_by_category_id():
    records = [
        expense(500, 'travel', datetime(2024, 1, 1)),
        expense(500, 'amazon', datetime(2024, 1, 2)),
        expense(900, 'fuel', datetime(2024, 1, 3)),
    ]
    assert [entry.category for entry in calc.category_breakdown(records)] == ['fuel', 'amazon', 'travel']


def test_category_breakdown_empty_when_nothing_spent():
    assert calc.category_breakdown([]) == []
    assert calc.category_breakdown([expense(0, 'rent', datetime(2024, 1, 1))]) == []
    assert calc.top_category([]) is None


def test_top_category():
    assert calc.top_category(sample_expenses()).category == 'groceries'


def test_monthly_totals_sorted_by_calendar_not_name():
    records = [
        expense(100, 'rent', datetime(2024, 2, 10)),
        expense(200, 'rent', datetime(2023, 12, 1)),
        expense(300, 'rent', datetime(2024, 11, 30)),
        expense(400, 'rent', datetime(2024, 1, 15)),
        expense(50, 'gas', datetime(2024, 1, 20)),
    ]
    totals = calc.monthly_totals(records)
    assert [t.key for t in totals] == ['2023-12', '2024-01', '2024-02', '2024-11']
    assert [t.month for t in totals] == ['Dec', 'Jan', 'Feb', 'Nov']
    assert totals[1].total == 450
    assert totals[1].count == 2
    assert totals[0].year == 2023


def test_monthly_totals_empty():
    assert calc.monthly_totals([]) == []


def test_weekly_trend_running_average():
    records = [
        expense(1000, 'groceries', datetime(2024, 1, 2)),
        expense(3000, 'groceries', datetime(2024, 1, 8)),
        expense(2000, 'amazon', datetime(2024, 1, 16)),
    ]
    trend = calc.weekly_trend(records, datetime(2024, 1, 1), datetime(2024, 1, 31, 23, 59, 59))

    assert [entry.week for entry in trend] == [1, 2, 3, 4, 5]
    assert [entry.amount for entry in trend] == [1000, 3000, 2000, 0, 0]
    assert trend[0].running_average == trend[0].amount
    assert [entry.running_average for entry in trend] == pytest.approx([1000, 2000, 2000, 1500, 1200])
    assert trend[0].week_start == datetime(2023, 12, 31)
    assert trend[0].week_end == datetime(2024, 1, 6, 23, 59, 59, 999999)


def test_weekly_trend_counts_whole_first_week():
    records = [expense(700, 'fuel', datetime(2023, 12, 31, 10, 0))]
    trend = calc.weekly_trend(records, datetime(2024, 1, 1), datetime(2024, 1, 6, 23, 59, 59))
    assert len(trend) == 1
    assert trend[0].amount == 700


def test_income_vs_expenses_always_six_months():
    now = datetime(2024, 6, 15)
    records_in = [income(100000, datetime(2024, 3, 1))]
    records_out = [
        expense(30000, 'rent', datetime(2024, 3, 10)),
        expense(99999, 'rent', datetime(2023, 12, 1)),
    ]
    rows = calc.income_vs_expenses(records_in, records_out, now=now)

    assert len(rows) == calc.INCOME_VS_EXPENSES_MONTHS == 6
    assert [row.period for row in rows] == ['Jan 2024', 'Feb 2024', 'Mar 2024', 'Apr 2024', 'May 2024', 'Jun 2024']
    march = rows[2]
    assert (march.income, march.expenses, march.net) == (100000, 30000, 70000)
    assert march.savings_rate == pytest.approx(70.0)
    assert rows[0].income == rows[0].expenses == 0
    assert rows[0].savings_rate == 0.0


def test_income_vs_expenses_with_no_records():
    rows = calc.income_vs_expenses([], [], now=datetime(2024, 2, 1))
    assert len(rows) == 6
    assert rows[0].period == 'Sep 2023'
    assert all(row.net == 0 for row in rows)


@pytest.mark.parametrize(
    'amount, level',
    [(0, 0), (1, 1), (4999, 1), (5000, 2), (9999, 2), (10000, 3), (19999, 3), (20000, 4), (500000, 4)],
)
def test_spending_intensity_levels(amount, level):
    assert calc.spending_intensity(amount, SpendingIntensity()) == level


def test_spending_intensity_uses_supplied_thresholds():
    thresholds = SpendingIntensity(low=100, medium=200, high=300)
    assert calc.spending_intensity(150, thresholds) == 2


def test_daily_spending_one_entry_per_day():
    records = [
        expense(3000, 'groceries', datetime(2024, 1, 1, 9, 0)),
        expense(4000, 'eating_out', datetime(2024, 1, 1, 18, 0)),
        expense(25000, 'travel', datetime(2024, 1, 3, 12, 0)),
        expense(100, 'fuel', datetime(2024, 1, 4, 8, 0)),
    ]
    days = calc.daily_spending(records, datetime(2024, 1, 1), datetime(2024, 1, 3, 23, 59, 59), SpendingIntensity())

    assert [d.date for d in days] == [datetime(2024, 1, 1), datetime(2024, 1, 2), datetime(2024, 1, 3)]
    assert [d.amount for d in days] == [7000, 0, 25000]
    assert [d.intensity for d in days] == [2, 0, 4]


def test_daily_spending_without_records():
    days = calc.daily_spending([], datetime(2024, 2, 1), datetime(2024, 2, 29, 23, 59, 59), SpendingIntensity())
    assert len(days) == 29
    assert all(d.amount == 0 and d.intensity == 0 for d in days)


def test_percentage_change_zero_baseline():
    assert calc.percentage_change(500, 0) == 100.0
    assert calc.percentage_change(0, 0) == 0.0
    assert calc.percentage_change(1500, 1000) == pytest.approx(50.0)
    assert calc.percentage_change(500, 1000) == pytest.approx(-50.0)


def test_month_over_month_change():
    now = datetime(2024, 3, 15)
    assert calc.month_over_month_change([expense(500, 'rent', datetime(2024, 3, 2))], now=now) == 100.0
    assert calc.month_over_month_change([], now=now) == 0.0

    records = [
        expense(1000, 'rent', datetime(2024, 2, 20)),
        expense(1500, 'rent', datetime(2024, 3, 1)),
        expense(9999, 'rent', datetime(2024, 1, 20)),
    ]
    assert calc.month_over_month_change(records, now=now) == pytest.approx(50.0)


def test_filter_by_date_range_is_inclusive():
    rng = DateRange(datetime(2024, 1, 3), datetime(2024, 1, 5))
    kept = calc.filter_by_date_range(sample_expenses(), rng)
    assert [record.amount for record in kept] == [10000, 20000]


def test_averages():
    assert calc.average_daily_spending(31000, 31) == pytest.approx(1000.0)
    assert calc.average_daily_spending(1000, 0) == 0.0
    assert calc.average_monthly_spending([]) == 0.0
    totals = calc.monthly_totals(sample_expenses() + [expense(5000, 'gas', datetime(2024, 2, 1))])
    assert calc.average_monthly_spending(totals) == pytest.approx(20000.0)


def test_entries_to_frame():
    frame = calc.entries_to_frame(calc.category_breakdown(sample_expenses()))
    assert list(frame.columns) == ['category', 'amount', 'percentage', 'count']
    assert frame['amount'].sum() == 35000


def test_aggregations_do_not_mutate_input():
    records = sample_expenses()
    snapshot = list(records)
    calc.category_breakdown(records)
    calc.monthly_totals(records)
    calc.weekly_trend(records, datetime(2024, 1, 1), datetime(2024, 1, 31))
    assert records == snapshot
