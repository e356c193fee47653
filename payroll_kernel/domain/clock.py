"""
Clock -- Deterministic date abstraction.

Responsibility:
    Provides an injectable clock so that engine and service code never call
    ``date.today()`` directly.  Rolling sick pay windows and tax year
    resolution both depend on "today"; routing that through a Clock keeps
    every calculation reproducible.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O (except SystemClock,
    which is the one sanctioned boundary for reading the current date).

Failure modes:
    - DeterministicClock.advance() rejects negative day counts.
"""

from abc import ABC, abstractmethod
from datetime import UTC, date, datetime, timedelta


class Clock(ABC):
    """
    Abstract clock interface.

    Contract:
        Services that need the current date receive a Clock via constructor
        injection.  Engines take explicit reference dates instead.

    Guarantees:
        - ``now()`` returns a timezone-aware ``datetime``.
        - ``today()`` returns the calendar date of ``now()``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time."""
        ...

    def today(self) -> date:
        """Get the current calendar date."""
        return self.now().date()


class SystemClock(Clock):
    """Production clock that returns actual system time in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class DeterministicClock(Clock):
    """
    Test clock with controlled time.

    Guarantees:
        ``today()`` returns the same date on repeated calls until
        ``advance()`` or ``set_date()`` is called.
    """

    def __init__(self, fixed_date: date | None = None):
        self._fixed_date = fixed_date or date(2024, 4, 6)

    def now(self) -> datetime:
        return datetime(
            self._fixed_date.year,
            self._fixed_date.month,
            self._fixed_date.day,
            12,
            0,
            0,
            tzinfo=UTC,
        )

    def set_date(self, fixed_date: date) -> None:
        """Set the clock to a specific date."""
        self._fixed_date = fixed_date

    def advance(self, days: int = 1) -> None:
        """Advance the clock by the specified number of days."""
        if days < 0:
            raise ValueError("DeterministicClock cannot move backwards")
        self._fixed_date = self._fixed_date + timedelta(days=days)
