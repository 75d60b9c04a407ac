from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return current UTC time as an aware datetime.

    Every timestamp that crosses the wire (startedAt, lastSync, metrics
    snapshots) is serialized from this value, so it carries its tzinfo.
    """
    return datetime.now(UTC)
