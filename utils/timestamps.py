# utils/timestamps.py
import time
from datetime import datetime, timezone


def now_ms() -> int:
    """Current time as epoch milliseconds"""
    return int(time.time() * 1000)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ms_to_iso(value: int) -> str:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc).isoformat()
