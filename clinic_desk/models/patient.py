"""Patient model definition."""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from clinic_desk.models.room import Room, RoomType
from clinic_desk.models.visit_record import VisitRecord
from clinic_desk.services.serials import SerialNumberIssuer, get_serial_issuer, patient_key

DATE_OF_BIRTH_FORMAT = "%m/%d/%Y"


def parse_date_of_birth(text: str) -> date:
    """Parse a ``M/d/yyyy`` date of birth."""

    try:
        return datetime.strptime(text.strip(), DATE_OF_BIRTH_FORMAT).date()
    except (AttributeError, ValueError) as exc:
        raise ValueError("Invalid date format. Please use M/d/yyyy.") from exc


def format_date_of_birth(value: date) -> str:
    return f"{value.month}/{value.day}/{value.year}"


@dataclass
class DeactivationRecord:
    deactivated_on: date
    reactivated_on: Optional[date] = None

    @property
    def is_open(self) -> bool:
        return self.reactivated_on is None


@dataclass(eq=False)
class Patient:
    """Represents a patient registered with the clinic."""

    serial_number: int
    first_name: str
    last_name: str
    date_of_birth: date
    room_number: Optional[int] = None
    room_name: Optional[str] = None
    room_type: Optional[RoomType] = None
    visit_records: List[VisitRecord] = field(default_factory=list)
    deactivation_history: List[DeactivationRecord] = field(default_factory=list)
    staff_serials: List[int] = field(default_factory=list)
    deactivated: bool = False

    @classmethod
    def new(
        cls,
        first_name: str,
        last_name: str,
        date_of_birth: date,
        *,
        issuer: Optional[SerialNumberIssuer] = None,
    ) -> "Patient":
        """Create a patient, reusing the serial of an identical name and birth date."""

        if not first_name or not first_name.strip():
            raise ValueError("First name cannot be empty.")
        if not last_name or not last_name.strip():
            raise ValueError("Last name cannot be empty.")
        if date_of_birth is None:
            raise ValueError("Date of birth is required.")

        issuer = issuer or get_serial_issuer()
        return cls(
            serial_number=issuer.patient_serial(first_name, last_name, date_of_birth),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            date_of_birth=date_of_birth,
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def same_person(self, first_name: str, last_name: str, date_of_birth: date) -> bool:
        return patient_key(self.first_name, self.last_name, self.date_of_birth) == patient_key(
            first_name, last_name, date_of_birth
        )

    # ----- Room ----------------------------------------------------------
    def place_in(self, room: Room) -> None:
        self.room_number = room.number
        self.room_name = room.name
        self.room_type = room.type

    def clear_room(self) -> None:
        self.room_number = None
        self.room_name = None
        self.room_type = None

    # ----- Visits --------------------------------------------------------
    def add_visit_record(self, record: VisitRecord) -> None:
        """Insert ``record`` keeping the history ordered by timestamp."""

        keys = [visit.registered_at for visit in self.visit_records]
        self.visit_records.insert(bisect.bisect_right(keys, record.registered_at), record)

    @property
    def last_visit(self) -> Optional[VisitRecord]:
        return self.visit_records[-1] if self.visit_records else None

    # ----- Activation ----------------------------------------------------
    def deactivate(self, on: Optional[date] = None) -> None:
        if self.deactivated:
            return
        self.deactivated = True
        self.deactivation_history.append(DeactivationRecord(on or date.today()))

    def reactivate(self, on: Optional[date] = None) -> None:
        if not self.deactivated:
            return
        self.deactivated = False
        if self.deactivation_history and self.deactivation_history[-1].is_open:
            self.deactivation_history[-1].reactivated_on = on or date.today()

    @property
    def last_deactivation_date(self) -> Optional[date]:
        """Date of the open deactivation, or None once reactivated."""

        if self.deactivation_history and self.deactivation_history[-1].is_open:
            return self.deactivation_history[-1].deactivated_on
        return None

    def describe(self, care_team: Optional[List[str]] = None) -> str:
        """Return the full patient information as display text."""

        lines = [
            "Patient Information:",
            f"Serial Number: {self.serial_number}",
            f"Name: {self.full_name}",
            f"Date of Birth: {format_date_of_birth(self.date_of_birth)}",
            f"Status: {'Deactivated' if self.deactivated else 'Active'}",
            f"Room Number: {self.room_number if self.room_number is not None else 'N/A'}",
            f"Room Name: {self.room_name or 'N/A'}",
            f"Room Type: {self.room_type.value if self.room_type else 'N/A'}",
        ]

        if care_team:
            lines.append("Assigned Clinical Staff:")
            lines.extend(f"\t{name}" for name in care_team)
        else:
            lines.append("No assigned clinical staff.")

        if not self.visit_records:
            lines.append("No visit records available.")
        else:
            lines.append("Visit Records:")
            for visit in self.visit_records:
                lines.append(f"\tRegistration Date and Time: {visit.registered_at:%m/%d/%Y %H:%M:%S}")
                lines.append(f"\tChief Complaint: {visit.chief_complaint}")
                lines.append(f"\tBody Temperature: {visit.body_temperature:.1f}°C")
                lines.append("\t--------------------------")

        return "\n".join(lines)

    def __str__(self) -> str:
        return self.full_name
