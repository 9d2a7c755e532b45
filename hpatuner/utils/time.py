"""Manages all datetime-related operations."""

from datetime import datetime, timezone

# RFC 3339 with a literal Z, the form Kubernetes uses for metav1.Time.
KUBE_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

def get_timestamp(utc=True):
    """Returns the current timestamp, either UTC or local."""

    return datetime.now(timezone.utc) if utc else datetime.now()

def format_timestamp(date=None, format=KUBE_TIME_FORMAT):
    """Formats a datetime object as a Kubernetes timestamp string."""

    date = date or get_timestamp()
    if date.tzinfo is not None:
        date = date.astimezone(timezone.utc)
    return date.strftime(format)
