from datetime import UTC, datetime


class Datetime:
    """系统内部时间一律为带时区的 UTC"""

    @staticmethod
    def now() -> datetime:
        return datetime.now(UTC)

    @staticmethod
    def ensure_aware(dt: datetime | None) -> datetime | None:
        """
        SQLite 读回的 DateTime 不带时区，统一视为 UTC
        """
        if dt is None:
            return None
        if dt.tzinfo is None:
            return dt.replace(tzinfo=UTC)
        return dt
