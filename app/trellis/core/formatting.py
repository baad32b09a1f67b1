from datetime import datetime, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from trellis.core.logger import get_logger

log = get_logger("Formatting")


def format_duration(seconds: Union[int, float, str, None], hour_unit: str = "h", minute_unit: str = "m") -> str:
    """3725 -> '1h 2m'. Leere Werte zählen als 0."""
    try:
        total = float(seconds or 0)
    except (TypeError, ValueError):
        total = 0.0

    hours = int(total // 3600)
    minutes = int(round((total % 3600) / 60))
    if minutes >= 60:
        hours += 1
        minutes -= 60
    return f"{hours}{hour_unit} {minutes}{minute_unit}"


def _parse(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    text = str(value).replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        log.debug(f"Kein ISO-Datum: {value!r}")
        return None


def format_datetime(value, tz_name: Optional[str] = None) -> str:
    """ISO-Zeitstempel in der Firmen-Zeitzone, z.B. 'March 5, 2024, 14:03:00 (GMT+01:00)'."""
    moment = _parse(value)
    if moment is None:
        return str(value or "")
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)

    if tz_name:
        try:
            moment = moment.astimezone(ZoneInfo(tz_name))
        except ZoneInfoNotFoundError:
            log.warning(f"⚠️ Unbekannte Zeitzone '{tz_name}', bleibe bei UTC")

    offset = moment.strftime("%z")
    offset = f"{offset[:3]}:{offset[3:]}" if offset else "+00:00"
    return f"{moment.strftime('%B')} {moment.day}, {moment.year}, {moment.strftime('%H:%M:%S')} (GMT{offset})"


def format_date(value) -> str:
    moment = _parse(value)
    if moment is None:
        return str(value or "")
    return moment.strftime("%Y-%m-%d")
