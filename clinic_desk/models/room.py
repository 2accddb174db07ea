"""Room model definition."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class RoomType(Enum):
    """Kinds of rooms found in the clinic layout."""

    EXAM = "exam"
    PROCEDURE = "procedure"
    WAITING = "waiting"

    @classmethod
    def from_keyword(cls, text: str) -> "RoomType":
        """Resolve a layout keyword such as ``Exam`` to a room type."""

        for room_type in cls:
            if room_type.value == text.strip().lower():
                return room_type
        raise ValueError(f"Unknown room type: {text}")


@dataclass(frozen=True)
class RoomBounds:
    """Rectangle of a room on the clinic map."""

    lower_left_x: int
    lower_left_y: int
    upper_right_x: int
    upper_right_y: int

    def contains(self, x: int, y: int) -> bool:
        return (
            self.lower_left_x <= x <= self.upper_right_x
            and self.lower_left_y <= y <= self.upper_right_y
        )


@dataclass(eq=False)
class Room:
    """Represents a single room and the patients currently inside it."""

    number: int
    bounds: RoomBounds
    type: RoomType
    name: str
    patient_serials: List[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.number <= 0:
            raise ValueError("Room number must be a positive integer.")
        if not self.name or not self.name.strip():
            raise ValueError("Room name cannot be empty.")

    def __setattr__(self, key, value) -> None:
        if key in ("number", "type") and key in self.__dict__:
            raise AttributeError(f"Room {key} cannot change after construction")
        super().__setattr__(key, value)

    @classmethod
    def from_layout_line(cls, line: str, number: int) -> "Room":
        """Build a room from ``x1 y1 x2 y2 <type> <name...>``."""

        parts = line.split()
        if len(parts) < 6:
            raise ValueError(f"Invalid room input format: {line}")

        try:
            coordinates = [int(part) for part in parts[:4]]
        except ValueError as exc:
            raise ValueError(f"Invalid room coordinates: {line}") from exc

        return cls(
            number=number,
            bounds=RoomBounds(*coordinates),
            type=RoomType.from_keyword(parts[4]),
            name=" ".join(parts[5:]),
        )

    @property
    def is_waiting_room(self) -> bool:
        return self.type is RoomType.WAITING

    @property
    def is_clinical(self) -> bool:
        """True for exam and procedure rooms."""

        return self.type in (RoomType.EXAM, RoomType.PROCEDURE)

    @property
    def is_occupied(self) -> bool:
        """Clinical rooms hold one patient at a time; waiting rooms never fill."""

        return self.is_clinical and bool(self.patient_serials)

    def matches(self, name: str) -> bool:
        return self.name.lower() == name.strip().lower()

    def admit(self, serial_number: int) -> None:
        if serial_number not in self.patient_serials:
            self.patient_serials.append(serial_number)

    def release(self, serial_number: int) -> bool:
        if serial_number in self.patient_serials:
            self.patient_serials.remove(serial_number)
            return True
        return False

    def __str__(self) -> str:
        return f"{self.name} ({self.type.value}, #{self.number})"
