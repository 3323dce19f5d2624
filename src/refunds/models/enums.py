"""Enumeration types for refund data models."""

from enum import Enum


class ItemType(str, Enum):
    """Category of rental item a booking was made for."""

    CARS = "cars"
    YACHTS = "yachts"
    JETS = "jets"
    PROPERTIES = "properties"

    @classmethod
    def resolve(cls, value: str | None) -> "ItemType":
        """Map a raw item type to a known category, defaulting to cars."""
        try:
            return cls(value)
        except ValueError:
            return cls.CARS


class EventSeverity(str, Enum):
    """Severity of a structured refund event."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
