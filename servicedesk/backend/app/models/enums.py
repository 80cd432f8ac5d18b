# servicedesk/backend/app/models/enums.py
import enum
from typing import Optional

from ..errors import ValidationError


class Role(str, enum.Enum):
    ADMIN = "Admin"
    TECHNICIAN = "Technician"
    USER = "User"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        """Case-insensitive lookup. Raises ValidationError for unknown names."""
        raw = (value or "").strip()
        if not raw:
            raise ValidationError("Role cannot be empty")
        for role in cls:
            if role.value.lower() == raw.lower():
                return role
        raise ValidationError(
            f"Invalid role '{raw}'. Allowed: {', '.join(r.value for r in cls)}"
        )


class Priority(enum.IntEnum):
    # Stored as integers so ordering by priority is Low < Normal < High
    LOW = 0
    NORMAL = 1
    HIGH = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value: str) -> "Priority":
        """Case-insensitive lookup. Raises ValidationError for unknown names."""
        raw = (value or "").strip()
        for priority in cls:
            if priority.label.lower() == raw.lower():
                return priority
        raise ValidationError("Priority must be one of: Low, Normal, High")


class Status(enum.IntEnum):
    """Canonical status vocabulary; values are the request_statuses ids."""

    OPEN = 1
    IN_PROGRESS = 2
    RESOLVED = 3
    CLOSED = 4

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @classmethod
    def from_value(cls, value) -> Optional["Status"]:
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return None


_STATUS_LABELS = {
    Status.OPEN: "Open",
    Status.IN_PROGRESS: "InProgress",
    Status.RESOLVED: "Resolved",
    Status.CLOSED: "Closed",
}
