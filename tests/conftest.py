from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from clinic_desk.models.room import Room, RoomBounds, RoomType
from clinic_desk.models.staff import EducationLevel, Staff, new_clinical_staff
from clinic_desk.services.registry import Clinic, get_clinic
from clinic_desk.services.serials import get_serial_issuer

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture(autouse=True)
def fresh_serials() -> Iterator[None]:
    """Every test starts with serial numbers counting from 1."""

    get_serial_issuer().reset()
    get_clinic.cache_clear()
    yield
    get_serial_issuer().reset()
    get_clinic.cache_clear()


@pytest.fixture
def layout_path() -> Path:
    return DATA_DIR / "clinic_layout.txt"


@pytest.fixture
def clinic() -> Clinic:
    """Front (waiting), Triage (exam), ExamRoom (exam) and Surgical (procedure)."""

    clinic = Clinic("Sample Clinic")
    clinic.add_room(Room(1, RoomBounds(0, 0, 10, 10), RoomType.WAITING, "Front"))
    clinic.add_room(Room(2, RoomBounds(10, 0, 20, 10), RoomType.EXAM, "Triage"))
    clinic.add_room(Room(3, RoomBounds(20, 0, 30, 10), RoomType.EXAM, "ExamRoom"))
    clinic.add_room(Room(4, RoomBounds(0, 10, 30, 20), RoomType.PROCEDURE, "Surgical"))
    return clinic


@pytest.fixture
def physician(clinic: Clinic) -> Staff:
    return clinic.register_staff(
        new_clinical_staff("Physician", "Amy", "Smith", EducationLevel.DOCTORAL, "1234567890")
    )


@pytest.fixture
def nurse(clinic: Clinic) -> Staff:
    return clinic.register_staff(
        new_clinical_staff("Nurse", "Ben", "Jones", EducationLevel.MASTERS, "0987654321")
    )
