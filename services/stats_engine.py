"""Report calculations for the tracker.

Everything here is a pure function of a Document (or its parts) and an
explicit ``today``. Nothing is cached or persisted; pages call in fresh on
every request.

Weeks are fixed 7-day windows anchored on the period's start date, not
calendar weeks. Each window is worth exactly ``frequency`` dots per habit so
extra completions in one week never pay off another week's quota.
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List

from utils import daterange, format_date, format_date_with_day, round_half_up

GREEN = 'green'
RED = 'red'
GRAY = 'gray'

ELAPSED = 'elapsed'
CURRENT = 'current'
FUTURE = 'future'

WEEK_LENGTH = 7


def tracking_days(period):
    return (period.end_date - period.start_date).days + 1


def elapsed_days(period, today):
    """Days from the start through today inclusive, clamped to the period."""
    if today < period.start_date:
        return 0
    if today > period.end_date:
        return tracking_days(period)
    return (today - period.start_date).days + 1


def days_remaining(period, today):
    # Counts today, so the last day of the period still has 1 day left
    if today > period.end_date:
        return 0
    return (period.end_date - today).days + 1


def progress_percent(period, today):
    if today > period.end_date:
        return 100
    total = tracking_days(period)
    percent = round_half_up(100 * (total - days_remaining(period, today)), total)
    return max(0, min(100, percent))


def expected_completions(days, frequency):
    """Prorate a weekly frequency over ``days``; partial weeks count too."""
    return round_half_up(frequency * days, WEEK_LENGTH)


def percent_of(part, total):
    return round_half_up(100 * part, total) if total > 0 else 0


@dataclass
class WeekDots:
    start: date
    end: date
    completions: int
    status: str
    green: int = 0
    red: int = 0
    gray: int = 0

    def to_dict(self):
        return {
            'start': format_date(self.start),
            'end': format_date(self.end),
            'completions': self.completions,
            'status': self.status,
            'green': self.green,
            'red': self.red,
            'gray': self.gray,
        }


@dataclass
class HabitDots:
    green: int = 0
    red: int = 0
    gray: int = 0
    weeks: List[WeekDots] = field(default_factory=list)

    @property
    def total(self):
        return self.green + self.red + self.gray

    @property
    def percent(self):
        return percent_of(self.green, self.total)

    @property
    def sequence(self):
        return [GREEN] * self.green + [RED] * self.red + [GRAY] * self.gray

    def to_dict(self):
        return {
            'green': self.green,
            'red': self.red,
            'gray': self.gray,
            'total': self.total,
            'percent': self.percent,
            'weeks': [w.to_dict() for w in self.weeks],
        }


def iter_weeks(start_date, end_date):
    week_start = start_date
    while week_start <= end_date:
        week_end = min(week_start + timedelta(days=WEEK_LENGTH - 1), end_date)
        yield week_start, week_end
        week_start += timedelta(days=WEEK_LENGTH)


def classify_week(week_start, week_end, completions, frequency, today):
    week = WeekDots(start=week_start, end=week_end, completions=completions, status=CURRENT)

    if week_end < today:
        # A missed quota stays red for good
        week.status = ELAPSED
        week.green = min(completions, frequency)
        week.red = max(0, frequency - completions)
    elif week_start > today:
        week.status = FUTURE
        week.gray = frequency
    else:
        # Days left after today; today's marks are already in completions
        remaining = (week_end - today).days
        max_possible = completions + remaining
        week.green = min(completions, frequency)
        week.red = max(0, frequency - max_possible)
        week.gray = max(0, min(remaining, frequency - completions))

    return week


def calculate_weekly_dots(days, habit_name, frequency, start_date, end_date, today):
    """Green/red/gray dots for one habit across the tracking period.

    ``days`` is the completion log (date -> set of habit names).
    """
    dots = HabitDots()
    for week_start, week_end in iter_weeks(start_date, end_date):
        completions = sum(
            1 for d in daterange(week_start, week_end) if habit_name in days.get(d, ())
        )
        week = classify_week(week_start, week_end, completions, frequency, today)
        dots.green += week.green
        dots.red += week.red
        dots.gray += week.gray
        dots.weeks.append(week)
    return dots


@dataclass
class ReportStats:
    start_date: date
    end_date: date
    today: date
    tracking_days: int
    elapsed_days: int
    days_remaining: int
    habit_stats: Dict[str, int]
    habit_expected: Dict[str, int]
    habit_elapsed_expected: Dict[str, int]
    habit_frequencies: Dict[str, int]
    habit_dots: Dict[str, HabitDots]
    total_checks: int
    total_possible: int
    total_elapsed_possible: int
    progress_percent: int

    @property
    def habit_percent(self):
        return {name: dots.percent for name, dots in self.habit_dots.items()}

    def to_dict(self):
        return {
            'startDate': format_date(self.start_date),
            'endDate': format_date(self.end_date),
            'today': format_date(self.today),
            'trackingDays': self.tracking_days,
            'elapsedDays': self.elapsed_days,
            'daysRemaining': self.days_remaining,
            'habitStats': self.habit_stats,
            'habitExpected': self.habit_expected,
            'habitElapsedExpected': self.habit_elapsed_expected,
            'habitFrequencies': self.habit_frequencies,
            'habitDots': {name: dots.to_dict() for name, dots in self.habit_dots.items()},
            'habitPercent': self.habit_percent,
            'totalChecks': self.total_checks,
            'totalPossible': self.total_possible,
            'totalElapsedPossible': self.total_elapsed_possible,
            'progressPercent': self.progress_percent,
        }


def calculate_report_stats(document, today):
    period = document.period
    total_days = tracking_days(period)
    elapsed = elapsed_days(period, today)

    habit_frequencies = {h.name: h.frequency for h in document.habits}
    habit_stats = dict.fromkeys(habit_frequencies, 0)
    total_checks = 0

    # Only marks inside the period and for habits still registered count
    for d, names in document.days.items():
        if d not in period:
            continue
        for name in names:
            if name in habit_stats:
                habit_stats[name] += 1
                total_checks += 1

    habit_expected = {}
    habit_elapsed_expected = {}
    habit_dots = {}
    for name, frequency in habit_frequencies.items():
        habit_expected[name] = expected_completions(total_days, frequency)
        habit_elapsed_expected[name] = expected_completions(elapsed, frequency)
        habit_dots[name] = calculate_weekly_dots(
            document.days, name, frequency, period.start_date, period.end_date, today
        )

    total_possible = sum(habit_expected.values())

    return ReportStats(
        start_date=period.start_date,
        end_date=period.end_date,
        today=today,
        tracking_days=total_days,
        elapsed_days=elapsed,
        days_remaining=days_remaining(period, today),
        habit_stats=habit_stats,
        habit_expected=habit_expected,
        habit_elapsed_expected=habit_elapsed_expected,
        habit_frequencies=habit_frequencies,
        habit_dots=habit_dots,
        total_checks=total_checks,
        total_possible=total_possible,
        total_elapsed_possible=sum(habit_elapsed_expected.values()),
        progress_percent=percent_of(total_checks, total_possible),
    )


@dataclass
class DayRow:
    date: date
    label: str
    is_today: bool
    checked: Dict[str, bool]

    @property
    def key(self):
        return format_date(self.date)

    def to_dict(self):
        return {'date': self.key, 'label': self.label, 'isToday': self.is_today, 'checked': self.checked}


@dataclass
class TrackingInfo:
    start_date: date
    end_date: date
    today: date
    tracking_days: int
    days_remaining: int
    progress_percent: int
    habits: list
    rows: List[DayRow]

    def to_dict(self):
        return {
            'startDate': format_date(self.start_date),
            'endDate': format_date(self.end_date),
            'today': format_date(self.today),
            'trackingDays': self.tracking_days,
            'daysRemaining': self.days_remaining,
            'progressPercent': self.progress_percent,
            'habits': [h.to_dict() for h in self.habits],
            'rows': [r.to_dict() for r in self.rows],
        }


def calculate_tracking_info(document, today):
    period = document.period
    names = document.habit_names
    rows = [
        DayRow(
            date=d,
            label=format_date_with_day(d),
            is_today=(d == today),
            checked={name: document.is_checked(d, name) for name in names},
        )
        for d in daterange(period.start_date, period.end_date)
    ]
    return TrackingInfo(
        start_date=period.start_date,
        end_date=period.end_date,
        today=today,
        tracking_days=tracking_days(period),
        days_remaining=days_remaining(period, today),
        progress_percent=progress_percent(period, today),
        habits=list(document.habits),
        rows=rows,
    )


@dataclass
class SummaryStats:
    habits_count: int
    tracking_days: int
    days_with_data: int
    total_checks: int
    start_date: date
    end_date: date
    habits: list

    def to_dict(self):
        return {
            'habitsCount': self.habits_count,
            'trackingDays': self.tracking_days,
            'daysWithData': self.days_with_data,
            'totalChecks': self.total_checks,
            'startDate': format_date(self.start_date),
            'endDate': format_date(self.end_date),
            'habits': [h.to_dict() for h in self.habits],
        }


def calculate_summary_stats(document):
    """All-time counters for the settings page; ignores the period bounds."""
    return SummaryStats(
        habits_count=len(document.habits),
        tracking_days=tracking_days(document.period),
        days_with_data=len(document.days),
        total_checks=sum(len(names) for names in document.days.values()),
        start_date=document.period.start_date,
        end_date=document.period.end_date,
        habits=list(document.habits),
    )
