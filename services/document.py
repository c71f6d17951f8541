"""In-memory shape of the tracker document.

The persisted JSON looks like::

    {
      "columns": [{"name": "Run", "frequency": 3}],
      "days": {"2024-01-01": {"Run": true}},
      "startDate": "2024-01-01",
      "endDate": "2024-01-07"
    }

Older files stored ``columns`` as bare strings; those are read as habits with
a frequency of 7. That normalisation happens here and nowhere else.
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional, Set

from errors import InvalidHabit, InvalidPeriod, MalformedImport
from utils import format_date, parse_date

MIN_FREQUENCY = 1
MAX_FREQUENCY = 7
DEFAULT_FREQUENCY = 7


@dataclass
class Habit:
    name: str
    frequency: int = DEFAULT_FREQUENCY

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidHabit('Habit name cannot be empty')
        self.name = self.name.strip()
        if isinstance(self.frequency, bool) or not isinstance(self.frequency, int):
            raise InvalidHabit(f'Frequency for "{self.name}" must be a whole number')
        if not MIN_FREQUENCY <= self.frequency <= MAX_FREQUENCY:
            raise InvalidHabit(
                f'Frequency for "{self.name}" must be between {MIN_FREQUENCY} and {MAX_FREQUENCY}'
            )

    def to_dict(self):
        return {'name': self.name, 'frequency': self.frequency}


@dataclass(frozen=True)
class TrackingPeriod:
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date > self.end_date:
            raise InvalidPeriod(
                f'End date {format_date(self.end_date)} is before start date {format_date(self.start_date)}'
            )

    @classmethod
    def from_length(cls, start_date, number_of_days):
        if number_of_days < 1:
            raise InvalidPeriod('Number of days must be at least 1')
        try:
            end_date = start_date + timedelta(days=number_of_days - 1)
        except OverflowError as e:
            raise InvalidPeriod('Number of days is out of range') from e
        return cls(start_date, end_date)

    def __contains__(self, d):
        return self.start_date <= d <= self.end_date


@dataclass
class Document:
    habits: List[Habit]
    period: TrackingPeriod
    days: Dict[date, Set[str]] = field(default_factory=dict)
    # Owned by the store, never exported
    version: int = 0

    @classmethod
    def empty(cls, today):
        return cls(habits=[], period=TrackingPeriod(today, today))

    @property
    def habit_names(self):
        return [h.name for h in self.habits]

    def get_habit(self, name) -> Optional[Habit]:
        for habit in self.habits:
            if habit.name == name:
                return habit
        return None

    def is_checked(self, d, name):
        return name in self.days.get(d, ())

    @classmethod
    def from_dict(cls, data, default_period=None):
        """Build a document from its JSON form.

        Raises MalformedImport when the structure can't be understood and
        InvalidPeriod when the stored period runs backwards. A missing period
        falls back to ``default_period``.
        """
        if not isinstance(data, dict):
            raise MalformedImport('Document must be a JSON object')

        columns = data.get('columns') or []
        if not isinstance(columns, list):
            raise MalformedImport('"columns" must be a list')

        habits = []
        seen = set()
        for column in columns:
            try:
                if isinstance(column, str):
                    habit = Habit(column, DEFAULT_FREQUENCY)
                elif isinstance(column, dict):
                    frequency = column.get('frequency')
                    if frequency is None:
                        frequency = DEFAULT_FREQUENCY
                    habit = Habit(column.get('name'), frequency)
                else:
                    raise MalformedImport(f'Unsupported habit entry: {column!r}')
            except InvalidHabit as e:
                raise MalformedImport(e.message) from e
            if habit.name in seen:
                raise MalformedImport(f'Duplicate habit "{habit.name}"')
            seen.add(habit.name)
            habits.append(habit)

        raw_days = data.get('days') or {}
        if not isinstance(raw_days, dict):
            raise MalformedImport('"days" must be an object keyed by date')

        days = {}
        for key, marks in raw_days.items():
            try:
                d = parse_date(key)
            except (AttributeError, ValueError) as e:
                raise MalformedImport(f'Invalid date "{key}"') from e
            if isinstance(marks, dict):
                names = {name for name, done in marks.items() if done}
            elif isinstance(marks, list):
                names = {name for name in marks if isinstance(name, str)}
            else:
                raise MalformedImport(f'Invalid entry for {key}')
            if names:
                days[d] = names

        start, end = data.get('startDate'), data.get('endDate')
        if start and end:
            try:
                period = TrackingPeriod(parse_date(start), parse_date(end))
            except (AttributeError, ValueError) as e:
                raise MalformedImport('Invalid tracking period dates') from e
        elif default_period is not None:
            period = default_period
        else:
            raise MalformedImport('Document has no tracking period')

        return cls(habits=habits, period=period, days=days)

    def to_dict(self):
        return {
            'columns': [h.to_dict() for h in self.habits],
            'days': {
                format_date(d): {name: True for name in sorted(names)}
                for d, names in sorted(self.days.items())
                if names
            },
            'startDate': format_date(self.period.start_date),
            'endDate': format_date(self.period.end_date),
        }
