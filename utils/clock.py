from datetime import datetime, timedelta


def utc_now():
    return datetime.utcnow()


def utc_today():
    return utc_now().date()


def day_start(day, days_back=0):
    """Midnight of `day`, optionally shifted back a number of days."""
    return datetime.combine(day, datetime.min.time()) - timedelta(days=days_back)
