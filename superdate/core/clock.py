from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as an aware UTC datetime; every stored timestamp uses it."""
    return datetime.now(timezone.utc)
