from datetime import date, datetime, timedelta
from flask import current_app, has_app_context

DATE_FORMAT = '%Y-%m-%d'

# Sunday first, matching date.strftime('%w')
DAY_NAMES = ['DOM', 'LUN', 'MAR', 'MER', 'GIO', 'VEN', 'SAB']


def parse_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value.strip(), DATE_FORMAT).date()


def format_date(d):
    return d.strftime(DATE_FORMAT)


def format_date_with_day(d):
    return f"{DAY_NAMES[int(d.strftime('%w'))]} {d.strftime('%d/%m')}"


def daterange(start, end):
    """Inclusive range of days from start to end."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def round_half_up(numerator, denominator):
    """Round numerator/denominator to the nearest int, halves away from zero.

    Works on integers so 12.5 becomes 13 (the builtin round() would give 12).
    """
    if denominator == 0:
        return 0
    if denominator < 0:
        numerator, denominator = -numerator, -denominator
    if numerator < 0:
        return -((-2 * numerator + denominator) // (2 * denominator))
    return (2 * numerator + denominator) // (2 * denominator)


def current_date():
    """Today's date, unless the app pins one with TRACKER_TODAY."""
    if has_app_context():
        pinned = current_app.config.get('TRACKER_TODAY')
        if pinned:
            return parse_date(pinned)
    return date.today()
