"""Patient front desk router."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from clinic_desk.models.patient import Patient, parse_date_of_birth
from clinic_desk.models.visit_record import VisitRecord, parse_visit_date
from clinic_desk.routers import ensure_ok
from clinic_desk.services.registry import Clinic, OperationResult, get_clinic
from clinic_desk.services.reports import PatientListing, list_active_patients

LOGGER = logging.getLogger(__name__)

router = APIRouter()


class PatientRegistration(BaseModel):
    """Inbound registration form."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    date_of_birth: str = Field(min_length=1, description="M/d/yyyy")


class RoomAssignmentRequest(BaseModel):
    room_name: str = Field(min_length=1)


class VisitRequest(BaseModel):
    visit_date: str = Field(description="yyyy-MM-dd")
    visit_time: Optional[str] = Field(default=None, description="HH:mm:ss")
    chief_complaint: str
    body_temperature: float


class StaffAssignmentRequest(BaseModel):
    staff_serial: int


class DischargeRequest(BaseModel):
    approving_staff_serial: int


class PatientDetail(PatientListing):
    care_team: List[str] = Field(default_factory=list)
    visits: List[VisitRecord] = Field(default_factory=list)
    in_exam_or_procedure_room: bool = False


def _get_patient(clinic: Clinic, serial_number: int) -> Patient:
    patient = clinic.find_patient_by_serial(serial_number)
    if patient is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Patient with serial number {serial_number} not found",
        )
    return patient


def _detail(clinic: Clinic, patient: Patient) -> PatientDetail:
    listing = PatientListing.from_patient(patient)
    return PatientDetail(
        **listing.model_dump(),
        care_team=[member.display_name for member in clinic.care_team_of(patient)],
        visits=list(patient.visit_records),
        in_exam_or_procedure_room=clinic.is_patient_in_exam_or_procedure_room(patient),
    )


@router.post("", response_model=PatientListing, status_code=status.HTTP_201_CREATED)
def register_patient(
    payload: PatientRegistration,
    clinic: Clinic = Depends(get_clinic),
) -> PatientListing:
    """Register a patient or bring back a discharged one."""

    candidate = Patient.new(
        payload.first_name,
        payload.last_name,
        parse_date_of_birth(payload.date_of_birth),
    )
    registered = clinic.register_patient(candidate)
    if registered is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Duplicate patient found. This patient is already registered.",
        )
    return PatientListing.from_patient(registered)


@router.get("", response_model=List[PatientListing])
def list_patients(clinic: Clinic = Depends(get_clinic)) -> List[PatientListing]:
    return list_active_patients(clinic)


@router.get("/search", response_model=PatientDetail)
def search_patient(
    first_name: str,
    last_name: str,
    date_of_birth: Optional[str] = None,
    clinic: Clinic = Depends(get_clinic),
) -> PatientDetail:
    if date_of_birth:
        patient = clinic.find_patient(first_name, last_name, parse_date_of_birth(date_of_birth))
    else:
        patient = clinic.find_patient_by_name(first_name, last_name)
    if patient is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Patient not found")
    return _detail(clinic, patient)


@router.get("/{serial_number}", response_model=PatientDetail)
def get_patient(serial_number: int, clinic: Clinic = Depends(get_clinic)) -> PatientDetail:
    return _detail(clinic, _get_patient(clinic, serial_number))


@router.get("/{serial_number}/summary", response_class=PlainTextResponse)
def patient_summary(serial_number: int, clinic: Clinic = Depends(get_clinic)) -> str:
    patient = _get_patient(clinic, serial_number)
    return patient.describe([member.display_name for member in clinic.care_team_of(patient)])


@router.post("/{serial_number}/room", response_model=OperationResult)
def assign_room(
    serial_number: int,
    payload: RoomAssignmentRequest,
    clinic: Clinic = Depends(get_clinic),
) -> OperationResult:
    patient = _get_patient(clinic, serial_number)
    return ensure_ok(clinic.assign_patient_to_room(patient, payload.room_name))


@router.post(
    "/{serial_number}/visits",
    response_model=VisitRecord,
    status_code=status.HTTP_201_CREATED,
)
def add_visit(
    serial_number: int,
    payload: VisitRequest,
    clinic: Clinic = Depends(get_clinic),
) -> VisitRecord:
    patient = _get_patient(clinic, serial_number)
    return clinic.add_visit_record(
        patient,
        parse_visit_date(payload.visit_date, payload.visit_time),
        payload.chief_complaint,
        payload.body_temperature,
    )


@router.post("/{serial_number}/staff", response_model=OperationResult)
def assign_staff(
    serial_number: int,
    payload: StaffAssignmentRequest,
    clinic: Clinic = Depends(get_clinic),
) -> OperationResult:
    patient = _get_patient(clinic, serial_number)
    staff_member = clinic.find_staff_by_serial(payload.staff_serial)
    if staff_member is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Staff member with serial number {payload.staff_serial} not found",
        )
    return ensure_ok(clinic.assign_clinical_staff_to_patient(patient, staff_member))


@router.delete("/{serial_number}/staff/{staff_serial}", response_model=OperationResult)
def unassign_staff(
    serial_number: int,
    staff_serial: int,
    clinic: Clinic = Depends(get_clinic),
) -> OperationResult:
    return ensure_ok(clinic.unassign_clinical_staff_from_patient(staff_serial, serial_number))


@router.post("/{serial_number}/discharge", response_model=PatientListing)
def discharge(
    serial_number: int,
    payload: DischargeRequest,
    clinic: Clinic = Depends(get_clinic),
) -> PatientListing:
    """Send a patient home; only an active physician may approve."""

    patient = _get_patient(clinic, serial_number)
    approver = clinic.find_clinical_staff_by_serial(payload.approving_staff_serial)
    if approver is None or approver.deactivated or not approver.is_physician:
        LOGGER.info(
            "Discharge of patient %s refused: staff %s is not an active physician",
            serial_number,
            payload.approving_staff_serial,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Discharge must be approved by an active physician",
        )
    return PatientListing.from_patient(clinic.send_patient_home(patient, approver))
