from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_utc(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts a trailing 'Z'. Naive timestamps are taken to be UTC.
    Raises ValueError on anything unparsable, including instants that
    fall outside the datetime range once shifted to UTC.
    """
    text = value.strip()
    if not text:
        raise ValueError("empty timestamp")
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        raise ValueError(f"timestamp out of range: {value}")


def iso_ms(moment: datetime) -> str:
    """Render as 'YYYY-MM-DDTHH:MM:SS.mmmZ' (millisecond precision, UTC)."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def to_iso(moment: datetime) -> str:
    """ISO-8601 in UTC with a 'Z' suffix, matching the JSON views."""
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
