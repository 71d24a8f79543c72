from datetime import datetime, timezone


def utcnow() -> datetime:
    """Request-time clock; a FastAPI dependency so tests can pin it."""
    return datetime.now(timezone.utc)
