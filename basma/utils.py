from datetime import datetime, date, timezone


def utcnow():
    """Current UTC time as a naive datetime, the form stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_datetime(value):
    """
    Parses an ISO-8601 string (or passes through a datetime) into naive UTC.

    Returns:
        datetime or None if value is empty.

    Raises:
        ValueError: if the string is not ISO-8601.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_date(value):
    """Parses 'YYYY-MM-DD' into a date; empty values give None."""
    if value is None or value == '':
        return None
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()


def isoformat(value):
    return value.isoformat() if value else None


def get_request_data():
    """JSON body when present, otherwise the submitted form."""
    from flask import request
    return request.get_json(silent=True) or request.form


def parse_int(value, default=None):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_limit(value, default, maximum=None):
    """Page size from a query string: default when missing, else clamped to 1..maximum."""
    limit = parse_int(value)
    if limit is None:
        return default
    limit = max(limit, 1)
    if maximum is not None:
        limit = min(limit, maximum)
    return limit
