"""
Date Window Resolution
======================

Turns the dashboard/report/list filter parameters into concrete
[start, end] datetimes in the active time zone. A None bound means the
window is open on that side; (None, None) means "all data".
"""

from datetime import datetime, time

from dateutil.relativedelta import relativedelta
from django.core.exceptions import ValidationError
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime


INDONESIAN_MONTHS = [
    'Januari', 'Februari', 'Maret', 'April', 'Mei', 'Juni',
    'Juli', 'Agustus', 'September', 'Oktober', 'November', 'Desember',
]

INDONESIAN_MONTHS_SHORT = [
    'Jan', 'Feb', 'Mar', 'Apr', 'Mei', 'Jun',
    'Jul', 'Agu', 'Sep', 'Okt', 'Nov', 'Des',
]

DASHBOARD_FILTER_TYPES = ['current_month', 'one_month_ago', 'two_months_ago', 'all', 'date_range']

# preset name -> months back from the current month
REPORT_PRESETS = {
    'current_month': 0,
    'last_month': 1,
    '1_month_back': 1,
    'two_months_ago': 2,
    '2_months_back': 2,
}

LIST_PRESETS = {
    'current_month': (0, 0),
    '1_month_back': (1, 1),
    '2_months_back': (2, 2),
    'last_3_months': (2, 0),
}


# =============================================================================
# PRIMITIVES
# =============================================================================

def local_now(now=None):
    return timezone.localtime(now or timezone.now())


def month_bounds(now=None, months_back=0):
    """First and last instant of the month `months_back` months before `now`"""
    current = local_now(now)
    start = current.replace(day=1, hour=0, minute=0, second=0, microsecond=0) - relativedelta(months=months_back)
    end = start + relativedelta(months=1) - relativedelta(microseconds=1)
    return start, end


def start_of_day(day):
    return timezone.make_aware(datetime.combine(day, time.min))


def end_of_day(day):
    return timezone.make_aware(datetime.combine(day, time.max))


def parse_date_param(value, field):
    """
    Parse 'YYYY-MM-DD' or an ISO datetime query parameter into a date

    Raises ValidationError keyed by `field` when the value does not parse.
    """
    if value in (None, ''):
        return None
    try:
        parsed = parse_datetime(value) or parse_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError({field: f"Format tanggal tidak valid: {value}"})
    if isinstance(parsed, datetime):
        if timezone.is_aware(parsed):
            parsed = timezone.localtime(parsed)
        return parsed.date()
    return parsed


def trailing_months(count=6, now=None):
    """(start, end) for the last `count` months, oldest first, current month last"""
    return [month_bounds(now, months_back) for months_back in range(count - 1, -1, -1)]


# =============================================================================
# RESOLVERS
# =============================================================================

def resolve_dashboard_window(filter_type=None, start_date=None, end_date=None, now=None):
    """
    Dashboard filter_type -> (start, end)

    - current_month / one_month_ago / two_months_ago: that calendar month
    - date_range: start_date 00:00 .. end_date 23:59:59.999999
    - all: (None, None)
    """
    filter_type = filter_type or 'current_month'

    if filter_type == 'current_month':
        return month_bounds(now, 0)
    if filter_type == 'one_month_ago':
        return month_bounds(now, 1)
    if filter_type == 'two_months_ago':
        return month_bounds(now, 2)
    if filter_type == 'all':
        return None, None
    if filter_type == 'date_range':
        start = parse_date_param(start_date, 'start_date')
        end = parse_date_param(end_date, 'end_date')
        errors = {}
        if start is None:
            errors['start_date'] = "Tanggal mulai wajib diisi untuk rentang tanggal"
        if end is None:
            errors['end_date'] = "Tanggal akhir wajib diisi untuk rentang tanggal"
        if errors:
            raise ValidationError(errors)
        if end < start:
            raise ValidationError({'end_date': "Tanggal akhir harus setelah tanggal mulai"})
        return start_of_day(start), end_of_day(end)

    raise ValidationError({'filter_type': f"Jenis filter tidak dikenal: {filter_type}"})


def resolve_report_window(date_preset=None, date_from=None, date_to=None, now=None):
    """
    Report parameters -> (start, end)

    Explicit dateFrom/dateTo win over a preset; either side may be open.
    Unknown presets and 'all_data' mean no bounds.
    """
    start = parse_date_param(date_from, 'dateFrom')
    end = parse_date_param(date_to, 'dateTo')
    if start or end:
        return (
            start_of_day(start) if start else None,
            end_of_day(end) if end else None,
        )

    if date_preset in REPORT_PRESETS:
        return month_bounds(now, REPORT_PRESETS[date_preset])
    return None, None


def resolve_list_window(date_preset=None, date_from=None, date_to=None, now=None):
    """Transaction list parameters -> (start, end) on the transaction date"""
    start = parse_date_param(date_from, 'date_from')
    end = parse_date_param(date_to, 'date_to')
    window_start = start_of_day(start) if start else None
    window_end = end_of_day(end) if end else None

    if date_preset in LIST_PRESETS:
        oldest, newest = LIST_PRESETS[date_preset]
        preset_start = month_bounds(now, oldest)[0]
        preset_end = month_bounds(now, newest)[1]
        window_start = max(window_start, preset_start) if window_start else preset_start
        window_end = min(window_end, preset_end) if window_end else preset_end

    return window_start, window_end


# =============================================================================
# LABELS
# =============================================================================

def month_label(moment):
    """'Oktober 2026'"""
    return f"{INDONESIAN_MONTHS[moment.month - 1]} {moment.year}"


def short_month_label(moment):
    """'Okt 2026'"""
    return f"{INDONESIAN_MONTHS_SHORT[moment.month - 1]} {moment.year}"


def window_label(start, end):
    """
    Human label for a report window, used in export filenames

    - no bounds: 'Semua Data'
    - one calendar month: 'Oktober 2026'
    - only a start: 'sejak Agustus 2026'
    - only an end: 'sampai Oktober 2026'
    - anything else: 'Agustus 2026 - Oktober 2026'
    """
    if start is None and end is None:
        return 'Semua Data'
    if start is not None and timezone.is_aware(start):
        start = timezone.localtime(start)
    if end is not None and timezone.is_aware(end):
        end = timezone.localtime(end)
    if end is None:
        return f"sejak {month_label(start)}"
    if start is None:
        return f"sampai {month_label(end)}"
    if (start.year, start.month) == (end.year, end.month):
        return month_label(start)
    return f"{month_label(start)} - {month_label(end)}"
