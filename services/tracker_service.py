"""Mutations on the tracker document.

Each operation loads the document, validates, changes it and saves it back.
Validation errors are raised before anything is saved, so a rejected request
never touches stored data.
"""
import json
import logging

from errors import InvalidHabit, InvalidPeriod, MalformedImport
from services.document import DEFAULT_FREQUENCY, Document, Habit, TrackingPeriod
from utils import format_date, parse_date

logger = logging.getLogger(__name__)


def _mutate(store, change):
    with store.write_lock():
        document = store.load()
        result = change(document)
        store.save(document)
        return result


def parse_frequency(value):
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_FREQUENCY
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidHabit(f'Frequency must be a whole number, got "{value}"')


def _require_habit(document, name):
    if not isinstance(name, str):
        raise InvalidHabit(f'Habit name must be text, got {name!r}')
    habit = document.get_habit(name.strip())
    if habit is None:
        raise InvalidHabit(f'Unknown habit "{name}"')
    return habit


def add_habit(store, name, frequency=DEFAULT_FREQUENCY):
    habit = Habit(name or '', parse_frequency(frequency))

    def change(document):
        if document.get_habit(habit.name):
            raise InvalidHabit(f'Habit "{habit.name}" already exists')
        document.habits.append(habit)
        return habit

    _mutate(store, change)
    logger.info('Added habit %r (%dx/week)', habit.name, habit.frequency)
    return habit


def update_habit_frequency(store, name, frequency):
    frequency = parse_frequency(frequency)

    def change(document):
        habit = _require_habit(document, name)
        updated = Habit(habit.name, frequency)
        habit.frequency = updated.frequency
        return habit

    habit = _mutate(store, change)
    logger.info('Habit %r now %dx/week', habit.name, habit.frequency)
    return habit


def rename_habit(store, name, new_name):
    def change(document):
        habit = _require_habit(document, name)
        renamed = Habit(new_name or '', habit.frequency)
        if renamed.name == habit.name:
            return habit
        if document.get_habit(renamed.name):
            raise InvalidHabit(f'Habit "{renamed.name}" already exists')
        for names in document.days.values():
            if habit.name in names:
                names.discard(habit.name)
                names.add(renamed.name)
        old_name = habit.name
        habit.name = renamed.name
        logger.info('Renamed habit %r to %r', old_name, habit.name)
        return habit

    return _mutate(store, change)


def remove_habit(store, name):
    def change(document):
        habit = _require_habit(document, name)
        document.habits.remove(habit)
        for d in list(document.days):
            document.days[d].discard(habit.name)
            if not document.days[d]:
                del document.days[d]
        return habit

    habit = _mutate(store, change)
    logger.info('Removed habit %r and its history', habit.name)
    return habit


def _parse_day(value):
    if not value:
        raise InvalidHabit('A day is required')
    try:
        return parse_date(value)
    except (AttributeError, TypeError, ValueError):
        raise InvalidHabit(f'Invalid day "{value}", expected YYYY-MM-DD')


def set_completion(store, day, name, checked):
    """Mark or unmark one habit on one day. Returns the new state."""
    d = _parse_day(day)
    if not name:
        raise InvalidHabit('A habit is required')
    if not isinstance(name, str):
        raise InvalidHabit(f'Habit name must be text, got {name!r}')

    def change(document):
        habit = _require_habit(document, name)
        if checked:
            document.days.setdefault(d, set()).add(habit.name)
        else:
            names = document.days.get(d)
            if names is not None:
                names.discard(habit.name)
                if not names:
                    del document.days[d]
        return bool(checked)

    return _mutate(store, change)


def toggle_completion(store, day, name):
    d = _parse_day(day)

    def change(document):
        habit = _require_habit(document, name)
        names = document.days.setdefault(d, set())
        if habit.name in names:
            names.discard(habit.name)
        else:
            names.add(habit.name)
        checked = habit.name in names
        if not names:
            del document.days[d]
        return checked

    return _mutate(store, change)


def update_period(store, start_date, number_of_days):
    try:
        start = parse_date(start_date)
    except (AttributeError, TypeError, ValueError):
        raise InvalidPeriod(f'Invalid start date "{start_date}", expected YYYY-MM-DD')
    try:
        number_of_days = int(number_of_days)
    except (TypeError, ValueError):
        raise InvalidPeriod(f'Number of days must be a whole number, got "{number_of_days}"')
    period = TrackingPeriod.from_length(start, number_of_days)

    def change(document):
        document.period = period
        return period

    _mutate(store, change)
    logger.info('Tracking period set to %s - %s', format_date(period.start_date), format_date(period.end_date))
    return period


def reset_data(store):
    def change(document):
        cleared = len(document.days)
        document.days.clear()
        return cleared

    cleared = _mutate(store, change)
    logger.info('Reset tracker data, cleared %d days', cleared)
    return cleared


def export_document(store):
    return store.load().to_dict()


def import_document(store, data):
    """Replace the stored document with ``data`` (a dict, or raw JSON)."""
    if isinstance(data, (bytes, str)):
        try:
            data = json.loads(data)
        except ValueError as e:
            raise MalformedImport('Import file is not valid JSON') from e
    if not isinstance(data, dict):
        raise MalformedImport('Import must be a JSON object')
    missing = [key for key in ('columns', 'days') if key not in data]
    if missing:
        raise MalformedImport(f'Import is missing required keys: {", ".join(missing)}')

    def change(document):
        imported = Document.from_dict(data, default_period=document.period)
        document.habits = imported.habits
        document.days = imported.days
        document.period = imported.period
        return document

    document = _mutate(store, change)
    logger.info('Imported %d habits and %d days', len(document.habits), len(document.days))
    return document
