"""Text helpers for commit rows."""

from datetime import datetime, timezone


def format_relative_date(timestamp: str, now: datetime | None = None) -> str:
    """Short relative age like "5m ago". Unparseable input is returned unchanged."""
    try:
        when = datetime.fromisoformat(timestamp)
    except ValueError:
        return timestamp
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)

    if now is None:
        now = datetime.now(timezone.utc)
    seconds = int((now - when).total_seconds())

    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    days = hours // 24
    if days < 30:
        return f"{days}d ago"
    if days < 365:
        return f"{days // 30}mo ago"
    return f"{days // 365}y ago"


def elide_refs(refs: list[str], max_visible: int) -> tuple[list[str], int]:
    """Split ref labels into the ones shown as badges and the overflow count."""
    if max_visible < 0:
        max_visible = 0
    return refs[:max_visible], max(0, len(refs) - max_visible)
