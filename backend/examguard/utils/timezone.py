"""
Time helpers.

All timestamps are stored as naive UTC taken from the server clock; the
configured display timezone is applied only when rendering.
"""
from datetime import datetime
import pytz

from ..core.config import settings


def get_display_tz():
    return pytz.timezone(settings.default_timezone)


def get_server_now() -> datetime:
    """Current server time as naive UTC, the form stored in the database"""
    return datetime.now(pytz.UTC).replace(tzinfo=None)


def utc_to_local(utc_dt: datetime) -> datetime:
    if utc_dt.tzinfo is None:
        utc_dt = utc_dt.replace(tzinfo=pytz.UTC)
    return utc_dt.astimezone(get_display_tz())


def format_local_time(dt: datetime, format_str: str = None) -> str:
    return utc_to_local(dt).strftime(format_str or settings.timezone_display_format)


def get_timezone_info() -> dict:
    now = utc_to_local(get_server_now())
    return {
        "timezone": settings.default_timezone,
        "offset": now.strftime("%z"),
        "current_time": now.strftime(settings.timezone_display_format)
    }
