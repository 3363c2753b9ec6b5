"""Time helpers. All persisted timestamps are naive UTC."""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: Optional[datetime]) -> datetime:
    """Normalize a caller-supplied clock value; None means now."""
    if value is None:
        return utcnow()
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def to_epoch_ms(value: datetime) -> int:
    return int(as_naive_utc(value).replace(tzinfo=timezone.utc).timestamp() * 1000)
