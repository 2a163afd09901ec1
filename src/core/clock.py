"""Calendar date source shared by the request path and the overdue scanner."""

from datetime import date


def today() -> date:
    """Return the current local calendar date."""
    return date.today()
