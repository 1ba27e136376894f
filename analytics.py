"""
In-memory views over a user's expenses.

Everything here works on already-loaded rows: the expense/category join
used by the records list, the calendar month model, the chart buckets and
the autocomplete filter. Nothing touches the database.
"""

import calendar
from datetime import date
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from schemas import (
    CalendarDay,
    CalendarMonth,
    CategoryBucket,
    CategoryResponse,
    ChartData,
    DayBucket,
    ExpenseResponse,
    JoinedExpense,
)


def join_expenses(expenses: Iterable, categories: Iterable) -> list[JoinedExpense]:
    """Attach each expense's category; expenses without a resolvable category are dropped."""
    category_map = {
        cat.id: CategoryResponse.model_validate(cat) for cat in categories
    }
    joined = []
    for exp in expenses:
        category = category_map.get(exp.category_id)
        if category is None:
            continue
        data = ExpenseResponse.model_validate(exp).model_dump()
        joined.append(JoinedExpense(**data, category=category))

    # stable sort keeps the caller's order within one day
    joined.sort(key=lambda exp: exp.date, reverse=True)
    return joined


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    shifted = date(year, month, 1) + relativedelta(months=offset)
    return shifted.year, shifted.month


def month_view(
    expenses: list[JoinedExpense], year: int, month: int, today: Optional[date] = None
) -> CalendarMonth:
    today = today or date.today()

    totals: dict[date, float] = {}
    for exp in expenses:
        if exp.date.year == year and exp.date.month == month:
            totals[exp.date] = totals.get(exp.date, 0.0) + exp.amount

    _, days_in_month = calendar.monthrange(year, month)
    days = []
    for day in range(1, days_in_month + 1):
        current = date(year, month, day)
        days.append(
            CalendarDay(
                date=current,
                day=day,
                has_expenses=current in totals,
                total=round(totals.get(current, 0.0), 2),
                is_today=current == today,
            )
        )

    # Sunday-first grid: Monday is weekday() 0
    leading_blanks = (date(year, month, 1).weekday() + 1) % 7

    return CalendarMonth(
        year=year,
        month=month,
        leading_blanks=leading_blanks,
        days=days,
        previous=shift_month(year, month, -1),
        next=shift_month(year, month, 1),
    )


def default_chart_range(today: Optional[date] = None) -> tuple[date, date]:
    today = today or date.today()
    return today.replace(day=1), today


def chart_data(
    expenses: list[JoinedExpense], start_date: date, end_date: date
) -> ChartData:
    """
    Buckets for the two charts over an inclusive date range.

    by_category keeps the order in which categories first appear in
    ``expenses``; by_day is sorted by date ascending.
    """
    in_range = [exp for exp in expenses if start_date <= exp.date <= end_date]

    by_category: dict[str, CategoryBucket] = {}
    by_day: dict[date, float] = {}
    for exp in in_range:
        bucket = by_category.get(exp.category.id)
        if bucket:
            bucket.value += exp.amount
        else:
            by_category[exp.category.id] = CategoryBucket(
                category_id=exp.category.id,
                name=exp.category.name,
                color=exp.category.color,
                value=exp.amount,
            )
        by_day[exp.date] = by_day.get(exp.date, 0.0) + exp.amount

    for bucket in by_category.values():
        bucket.value = round(bucket.value, 2)

    return ChartData(
        start_date=start_date,
        end_date=end_date,
        total=round(sum(exp.amount for exp in in_range), 2),
        by_category=list(by_category.values()),
        by_day=[
            DayBucket(date=day, label=f"{day.month}/{day.day}", amount=round(amount, 2))
            for day, amount in sorted(by_day.items())
        ],
    )


def filter_suggestions(values: Iterable[Optional[str]], query: str = "") -> list[str]:
    """Distinct non-empty values containing ``query`` (case-insensitive), sorted."""
    needle = query.strip().lower()
    distinct = {value for value in values if value}
    if needle:
        distinct = {value for value in distinct if needle in value.lower()}
    return sorted(distinct, key=str.lower)
