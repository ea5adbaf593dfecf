"""Clock port — injectable time source for scheduling logic."""

from abc import ABC, abstractmethod
from datetime import datetime


class Clock(ABC):

    @abstractmethod
    def now(self) -> datetime:
        """Current time as a timezone-aware UTC datetime."""
        ...
