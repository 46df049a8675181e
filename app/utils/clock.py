# app/utils/clock.py
from datetime import datetime, timezone


class SystemClock:
    """Zegar systemowy, w testach podmieniany na deterministyczny."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
