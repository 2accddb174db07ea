"""Read-only front desk reports built from the clinic registry."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import List, Optional

from pydantic import BaseModel, Field

from clinic_desk.models.patient import Patient, format_date_of_birth
from clinic_desk.services.registry import Clinic
from clinic_desk.utils.config import get_settings

LOGGER = logging.getLogger(__name__)


class PatientListing(BaseModel):
    serial_number: int
    full_name: str
    date_of_birth: str
    room_number: Optional[int] = None
    room_name: Optional[str] = None
    room_type: Optional[str] = None
    deactivated: bool = False

    @classmethod
    def from_patient(cls, patient: Patient) -> "PatientListing":
        return cls(
            serial_number=patient.serial_number,
            full_name=patient.full_name,
            date_of_birth=format_date_of_birth(patient.date_of_birth),
            room_number=patient.room_number,
            room_name=patient.room_name,
            room_type=patient.room_type.value if patient.room_type else None,
            deactivated=patient.deactivated,
        )


class ClinicalStaffListing(BaseModel):
    serial_number: int
    name: str
    job_title: str
    education_level: str
    license_id: Optional[str] = None


class StaffPatientCount(BaseModel):
    serial_number: int
    name: str
    unique_patients_assigned: int
    status: str


class InactivePatient(BaseModel):
    serial_number: int
    full_name: str
    deactivated_on: date
    days_inactive: int


class StaleVisitPatient(BaseModel):
    serial_number: int
    full_name: str
    last_visit_date: date


class FrequentVisitor(BaseModel):
    serial_number: int
    full_name: str
    visits_in_window: int


class StaffWithRecentVisits(BaseModel):
    serial_number: int
    name: str
    job_title: str
    patients: List[str] = Field(default_factory=list)


class RoomOccupant(BaseModel):
    serial_number: int
    full_name: str
    latest_complaint: Optional[str] = None


class RoomSeating(BaseModel):
    room_number: int
    name: str
    type: str
    occupied: bool
    patients: List[RoomOccupant] = Field(default_factory=list)


def _window(days: Optional[int]) -> int:
    return days if days is not None else get_settings().report_window_days


def list_active_patients(clinic: Clinic) -> List[PatientListing]:
    """Every patient not yet sent home, with room and birth date."""

    return [PatientListing.from_patient(patient) for patient in clinic.active_patients()]


def list_active_clinical_staff(clinic: Clinic) -> List[ClinicalStaffListing]:
    return [
        ClinicalStaffListing(
            serial_number=member.serial_number,
            name=member.display_name,
            job_title=member.job_title,
            education_level=member.education_level.name.title(),
            license_id=member.license_id,
        )
        for member in clinic.active_clinical_staff()
    ]


def clinical_staff_patient_counts(clinic: Clinic) -> List[StaffPatientCount]:
    """Lifetime count of distinct patients assigned to each clinical staff member."""

    return [
        StaffPatientCount(
            serial_number=member.serial_number,
            name=member.full_name,
            unique_patients_assigned=member.unique_patient_count,
            status="Inactive" if member.deactivated else "Active",
        )
        for member in clinic.clinical_staff()
    ]


def inactive_patients_for_year(
    clinic: Clinic,
    today: Optional[date] = None,
    days: Optional[int] = None,
) -> List[InactivePatient]:
    """Discharged patients whose last deactivation is older than the window."""

    today = today or date.today()
    window = _window(days)
    rows: List[InactivePatient] = []
    for patient in clinic.patients:
        deactivated_on = patient.last_deactivation_date
        if not patient.deactivated or deactivated_on is None:
            continue
        days_inactive = (today - deactivated_on).days
        if days_inactive > window:
            rows.append(
                InactivePatient(
                    serial_number=patient.serial_number,
                    full_name=patient.full_name,
                    deactivated_on=deactivated_on,
                    days_inactive=days_inactive,
                )
            )
    LOGGER.debug("Found %s patients inactive for more than %s days", len(rows), window)
    return rows


def patients_with_stale_visits(
    clinic: Clinic,
    today: Optional[date] = None,
    days: Optional[int] = None,
) -> List[StaleVisitPatient]:
    """Discharged patients whose last visit happened before the window."""

    today = today or date.today()
    window = _window(days)
    rows: List[StaleVisitPatient] = []
    for patient in clinic.patients:
        last_visit = patient.last_visit
        if not patient.deactivated or last_visit is None:
            continue
        if (today - last_visit.visit_date).days > window:
            rows.append(
                StaleVisitPatient(
                    serial_number=patient.serial_number,
                    full_name=patient.full_name,
                    last_visit_date=last_visit.visit_date,
                )
            )
    return rows


def patients_with_multiple_visits(
    clinic: Clinic,
    today: Optional[date] = None,
    days: Optional[int] = None,
) -> List[FrequentVisitor]:
    """Patients with two or more visits registered after ``today - days``."""

    today = today or date.today()
    cutoff = today - timedelta(days=_window(days))
    rows: List[FrequentVisitor] = []
    for patient in clinic.patients:
        recent = sum(1 for visit in patient.visit_records if visit.visit_date > cutoff)
        if recent >= 2:
            rows.append(
                FrequentVisitor(
                    serial_number=patient.serial_number,
                    full_name=patient.full_name,
                    visits_in_window=recent,
                )
            )
    return rows


def clinical_staff_with_recent_visits(
    clinic: Clinic,
    today: Optional[date] = None,
    days: Optional[int] = None,
) -> List[StaffWithRecentVisits]:
    """Active clinical staff caring for active patients seen within the window."""

    window = _window(days)
    rows: List[StaffWithRecentVisits] = []
    for member in clinic.active_clinical_staff():
        names = [
            patient.full_name
            for patient in clinic.patients_of(member)
            if not patient.deactivated
            and patient.last_visit is not None
            and patient.last_visit.is_within(window, today)
        ]
        if names:
            rows.append(
                StaffWithRecentVisits(
                    serial_number=member.serial_number,
                    name=member.full_name,
                    job_title=member.job_title,
                    patients=names,
                )
            )
    return rows


def seating_chart(clinic: Clinic) -> List[RoomSeating]:
    """Each room with the patients in it and their latest complaint."""

    chart: List[RoomSeating] = []
    for room in clinic.rooms:
        occupants = [
            RoomOccupant(
                serial_number=patient.serial_number,
                full_name=patient.full_name,
                latest_complaint=patient.last_visit.chief_complaint if patient.last_visit else None,
            )
            for patient in clinic.roster_of(room)
        ]
        chart.append(
            RoomSeating(
                room_number=room.number,
                name=room.name,
                type=room.type.value,
                occupied=room.is_occupied,
                patients=occupants,
            )
        )
    return chart
