"""Clinic registry: rooms, patients and staff with their assignment rules."""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime
from enum import Enum
from functools import lru_cache, wraps
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from clinic_desk.models.patient import Patient
from clinic_desk.models.room import Room
from clinic_desk.models.staff import Staff
from clinic_desk.models.visit_record import VisitRecord
from clinic_desk.services.serials import name_key
from clinic_desk.utils.config import get_settings

LOGGER = logging.getLogger(__name__)


class ClinicStateError(RuntimeError):
    """Raised when an operation would break the state of the clinic."""


def synchronized(method):
    """Run a registry method while holding the registry lock."""

    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class Rejection(str, Enum):
    ROOM_NOT_FOUND = "room_not_found"
    ROOM_OCCUPIED = "room_occupied"
    DEMOTION_TO_WAITING = "demotion_to_waiting"
    ALREADY_IN_ROOM = "already_in_room"
    PATIENT_DEACTIVATED = "patient_deactivated"
    PATIENT_NOT_FOUND = "patient_not_found"
    STAFF_NOT_FOUND = "staff_not_found"
    NOT_CLINICAL = "not_clinical"
    STAFF_DEACTIVATED = "staff_deactivated"
    ALREADY_ASSIGNED = "already_assigned"
    NOT_ASSIGNED = "not_assigned"


class OperationResult(BaseModel):
    """Outcome of an operation that may be turned down by a business rule."""

    ok: bool
    message: str
    reason: Optional[Rejection] = None

    @classmethod
    def success(cls, message: str) -> "OperationResult":
        LOGGER.info(message)
        return cls(ok=True, message=message)

    @classmethod
    def rejected(cls, reason: Rejection, message: str) -> "OperationResult":
        LOGGER.info("Rejected (%s): %s", reason.value, message)
        return cls(ok=False, message=message, reason=reason)


class Clinic:
    """In-memory registry that owns every room, patient and staff member.

    Rooms and staff rosters refer to patients by serial number and patients
    refer to their care team the same way, so each link is resolved through
    this registry and only changed by :meth:`_link` / :meth:`_unlink` and the
    room helpers below.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        *,
        default_waiting_room_number: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self._name = name or settings.clinic_name
        self.default_waiting_room_number = (
            default_waiting_room_number or settings.default_waiting_room_number
        )
        self._rooms: List[Room] = []
        self._patients: Dict[int, Patient] = {}
        self._staff: Dict[int, Staff] = {}
        # patient serial -> room number the patient was admitted into
        self._admissions: Dict[int, int] = {}
        # guards the collections above and every link between them
        self._lock = threading.RLock()

    # ----- Clinic properties ---------------------------------------------
    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        if not value or not value.strip():
            raise ValueError("Clinic name cannot be empty.")
        self._name = value.strip()

    @property
    @synchronized
    def rooms(self) -> List[Room]:
        return list(self._rooms)

    @property
    @synchronized
    def patients(self) -> List[Patient]:
        """Every patient ever registered, discharged ones included."""

        return list(self._patients.values())

    @property
    @synchronized
    def staff(self) -> List[Staff]:
        return list(self._staff.values())

    @synchronized
    def add_room(self, room: Room) -> None:
        if room is None:
            raise ValueError("Room cannot be null.")
        if self.get_room_by_number(room.number) is not None:
            raise ValueError(f"Room number {room.number} already exists.")
        self._rooms.append(room)

    @synchronized
    def clear_model(self) -> None:
        """Drop every room, patient, staff member and visit record."""

        for room in self._rooms:
            room.patient_serials.clear()
        for patient in self._patients.values():
            patient.visit_records.clear()
        self._rooms.clear()
        self._patients.clear()
        self._staff.clear()
        self._admissions.clear()
        LOGGER.info("Cleared clinic model for %s", self._name)

    # ----- Registration --------------------------------------------------
    @synchronized
    def register_patient(self, candidate: Patient) -> Optional[Patient]:
        """Register ``candidate`` or reactivate the discharged patient it matches.

        Returns None when an active patient with the same name and date of
        birth is already registered.
        """

        if candidate is None:
            raise ValueError("Patient object cannot be null.")

        existing = self.find_patient(
            candidate.first_name,
            candidate.last_name,
            candidate.date_of_birth,
        )
        if existing is not None and not existing.deactivated:
            LOGGER.info(
                "Duplicate patient found. %s is already registered (serial=%s)",
                existing.full_name,
                existing.serial_number,
            )
            return None

        waiting_room = self.get_room_by_number(self.default_waiting_room_number)
        if waiting_room is None:
            raise ValueError(
                f"Primary waiting room with number {self.default_waiting_room_number} not found."
            )

        if existing is not None:
            existing.reactivate()
            self._move_to_room(existing, waiting_room)
            self._admissions[existing.serial_number] = waiting_room.number
            LOGGER.info(
                "Duplicate patient found. Reactivated patient %s (serial=%s)",
                existing.full_name,
                existing.serial_number,
            )
            return existing

        self._check_serial_free(candidate)
        self._patients[candidate.serial_number] = candidate
        self._move_to_room(candidate, waiting_room)
        self._admissions[candidate.serial_number] = waiting_room.number
        LOGGER.info(
            "Patient %s registered in room %s: %s (type=%s)",
            candidate.full_name,
            waiting_room.number,
            waiting_room.name,
            waiting_room.type.value,
        )
        return candidate

    @synchronized
    def add_patient(self, patient: Patient, room_number: int) -> Patient:
        """Admit ``patient`` straight into ``room_number`` as listed in a layout."""

        if patient is None:
            raise ValueError("Patient cannot be null.")
        room = self.get_room_by_number(room_number)
        if room is None:
            raise ValueError(f"Invalid patient room number: {room_number}")

        self._check_serial_free(patient)
        self._patients[patient.serial_number] = patient
        self._move_to_room(patient, room)
        self._admissions[patient.serial_number] = room.number
        return patient

    @synchronized
    def register_staff(self, member: Staff) -> Staff:
        if member is None:
            raise ValueError("Staff cannot be null.")
        self._staff[member.serial_number] = member
        LOGGER.info(
            "Registered %s staff %s (serial=%s)",
            member.kind.value,
            member.display_name,
            member.serial_number,
        )
        return member

    # ----- Rooms ---------------------------------------------------------
    def get_room_by_number(self, room_number: int) -> Optional[Room]:
        return next((room for room in self._rooms if room.number == room_number), None)

    def find_room_by_name(self, room_name: str) -> Optional[Room]:
        if not room_name:
            return None
        return next((room for room in self._rooms if room.matches(room_name)), None)

    def find_room_at(self, x: int, y: int) -> Optional[Room]:
        """Return the room whose map rectangle contains the point."""

        return next((room for room in self._rooms if room.bounds.contains(x, y)), None)

    def is_room_occupied(self, room_name: str) -> bool:
        room = self.find_room_by_name(room_name)
        return room is not None and room.is_occupied

    def roster_of(self, room: Room) -> List[Patient]:
        """Patients currently sitting in ``room``."""

        return self._resolve_patients(room.patient_serials)

    @synchronized
    def patients_in_room(self, room: Room) -> List[Patient]:
        """Active patients whose recorded room is ``room``."""

        if room is None:
            raise ValueError("Room cannot be null.")
        return [
            patient
            for patient in self._patients.values()
            if not patient.deactivated and patient.room_number == room.number
        ]

    def current_room_of(self, patient: Patient) -> Optional[Room]:
        """Find the room whose roster lists ``patient``."""

        if patient is None:
            raise ValueError("Patient cannot be null.")
        return next(
            (room for room in self._rooms if patient.serial_number in room.patient_serials),
            None,
        )

    def admission_room_for(self, patient: Patient) -> Optional[Room]:
        """Room the patient was admitted into at registration or layout load.

        Moves between rooms do not change the admission; discharge clears it.
        """

        if patient is None:
            raise ValueError("Patient cannot be null.")
        room_number = self._admissions.get(patient.serial_number)
        if room_number is None:
            return None
        return self.get_room_by_number(room_number)

    def is_patient_in_exam_or_procedure_room(self, patient: Patient) -> bool:
        room = self.admission_room_for(patient)
        return room is not None and room.is_clinical

    @synchronized
    def assign_patient_to_room(self, patient: Patient, room_name: str) -> OperationResult:
        """Move ``patient`` into the room called ``room_name``."""

        if patient is None:
            raise ValueError("Patient cannot be null.")
        if not room_name or not room_name.strip():
            raise ValueError("Room name cannot be null or empty.")
        patient = self._require_patient(patient)

        target = self.find_room_by_name(room_name)
        if target is None:
            return OperationResult.rejected(
                Rejection.ROOM_NOT_FOUND,
                f"Room with name '{room_name}' not found.",
            )
        if patient.deactivated:
            return OperationResult.rejected(
                Rejection.PATIENT_DEACTIVATED,
                f"{patient.full_name} has been sent home and cannot be assigned a room.",
            )
        if target.is_occupied and not target.is_waiting_room:
            return OperationResult.rejected(
                Rejection.ROOM_OCCUPIED,
                "The selected room is already occupied by another patient.",
            )
        if target.is_waiting_room and self.is_patient_in_exam_or_procedure_room(patient):
            return OperationResult.rejected(
                Rejection.DEMOTION_TO_WAITING,
                "Patient is already in an Exam or Procedure Room and cannot be assigned "
                "to a Waiting Room.",
            )

        current = self.current_room_of(patient)
        if current is target:
            return OperationResult.rejected(
                Rejection.ALREADY_IN_ROOM,
                "Patient is already assigned to the specified room.",
            )

        self._move_to_room(patient, target)
        return OperationResult.success(
            f"Patient {patient.full_name} assigned to room: {target.name}"
        )

    # ----- Staff assignment ----------------------------------------------
    @synchronized
    def assign_clinical_staff_to_patient(
        self,
        patient: Patient,
        staff_member: Staff,
    ) -> OperationResult:
        if patient is None:
            raise ValueError("Patient cannot be null.")
        if staff_member is None:
            raise ValueError("Staff member cannot be null.")
        patient = self._require_patient(patient)
        staff_member = self._require_staff(staff_member)

        if not staff_member.has_patient_roster:
            return OperationResult.rejected(
                Rejection.NOT_CLINICAL,
                f"{staff_member.full_name} is not clinical staff.",
            )
        if staff_member.deactivated:
            return OperationResult.rejected(
                Rejection.STAFF_DEACTIVATED,
                "Cannot assign deactivated staff.",
            )
        if patient.deactivated:
            return OperationResult.rejected(
                Rejection.PATIENT_DEACTIVATED,
                f"{patient.full_name} has been sent home.",
            )
        if staff_member.has_patient(patient.serial_number):
            return OperationResult.rejected(
                Rejection.ALREADY_ASSIGNED,
                f"{patient.full_name} is already assigned to {staff_member.display_name}.",
            )

        self._link(staff_member, patient)
        return OperationResult.success(
            f"{staff_member.display_name} has been added to {patient.full_name}'s care team."
        )

    @synchronized
    def unassign_clinical_staff_from_patient(
        self,
        staff_serial: int,
        patient_serial: int,
    ) -> OperationResult:
        staff_member = self.find_staff_by_serial(staff_serial)
        if staff_member is None:
            return OperationResult.rejected(
                Rejection.STAFF_NOT_FOUND,
                f"Staff member with serial number {staff_serial} not found.",
            )
        patient = self.find_patient_by_serial(patient_serial)
        if patient is None:
            return OperationResult.rejected(
                Rejection.PATIENT_NOT_FOUND,
                f"Patient with serial number {patient_serial} not found.",
            )
        if not staff_member.has_patient_roster:
            return OperationResult.rejected(
                Rejection.NOT_CLINICAL,
                f"{staff_member.full_name} is not clinical staff.",
            )
        if staff_member.deactivated:
            return OperationResult.rejected(
                Rejection.STAFF_DEACTIVATED,
                f"{staff_member.display_name} is no longer active.",
            )
        if not staff_member.has_patient(patient.serial_number):
            return OperationResult.rejected(
                Rejection.NOT_ASSIGNED,
                f"{patient.full_name} is not assigned to {staff_member.display_name}.",
            )

        self._unlink(staff_member, patient)
        return OperationResult.success(
            f"{staff_member.display_name} has been unassigned from {patient.full_name}."
        )

    @synchronized
    def care_team_of(self, patient: Patient) -> List[Staff]:
        canonical = self._patients.get(patient.serial_number, patient)
        return [
            self._staff[serial] for serial in canonical.staff_serials if serial in self._staff
        ]

    @synchronized
    def patients_of(self, staff_member: Staff) -> List[Patient]:
        return self._resolve_patients(staff_member.patient_serials)

    # ----- Discharge and deactivation ------------------------------------
    @synchronized
    def send_patient_home(
        self,
        patient: Patient,
        approving_staff: Staff,
        on: Optional[date] = None,
    ) -> Patient:
        """Discharge ``patient``; the caller vouches that the approver is a physician."""

        if patient is None:
            raise ValueError("Patient cannot be null.")
        if approving_staff is None:
            raise ValueError("Approving staff cannot be null.")
        patient = self._require_patient(patient)

        if patient.deactivated:
            last_date = patient.last_deactivation_date
            raise ClinicStateError(
                f"Patient {patient.full_name} cannot be deactivated again, as they were "
                f"already deactivated{f' on {last_date.isoformat()}' if last_date else ''}."
            )

        patient.deactivate(on)
        if not patient.deactivated:
            raise ClinicStateError("Failed to deactivate patient.")

        for room in self._rooms:
            room.release(patient.serial_number)
        patient.clear_room()
        self._admissions.pop(patient.serial_number, None)
        for staff_member in self._staff.values():
            if staff_member.has_patient_roster:
                staff_member.drop_patient(patient.serial_number)
        patient.staff_serials.clear()

        LOGGER.info(
            "Patient %s (serial=%s) sent home, approved by %s",
            patient.full_name,
            patient.serial_number,
            approving_staff.display_name,
        )
        return patient

    @synchronized
    def deactivate_staff(self, serial_number: int) -> Staff:
        staff_member = self.find_staff_by_serial(serial_number)
        if staff_member is None or staff_member.deactivated:
            raise ClinicStateError(
                f"Staff member with serial number {serial_number} not found or already "
                "deactivated."
            )

        if staff_member.has_patient_roster:
            for patient in self.patients_of(staff_member):
                if staff_member.serial_number in patient.staff_serials:
                    patient.staff_serials.remove(staff_member.serial_number)
            staff_member.patient_serials.clear()
        staff_member.deactivated = True

        LOGGER.info(
            "Staff member %s deactivated (serial=%s kind=%s)",
            staff_member.display_name,
            staff_member.serial_number,
            staff_member.kind.value,
        )
        return staff_member

    # ----- Visit records -------------------------------------------------
    @synchronized
    def add_visit_record(
        self,
        patient: Patient,
        registered_at: datetime,
        chief_complaint: str,
        body_temperature: float,
    ) -> VisitRecord:
        if patient is None:
            raise ValueError("Patient cannot be null.")
        patient = self._require_patient(patient)
        if patient.deactivated:
            raise ClinicStateError(
                f"Patient {patient.full_name} has been sent home; register them again first."
            )

        record = VisitRecord(
            registered_at=registered_at,
            chief_complaint=chief_complaint,
            body_temperature=body_temperature,
        )
        patient.add_visit_record(record)
        LOGGER.info("Visit record added for %s: %s", patient.full_name, record)
        return record

    # ----- Lookups -------------------------------------------------------
    @synchronized
    def find_patient_by_name(self, first_name: str, last_name: str) -> Optional[Patient]:
        if first_name is None or last_name is None:
            raise ValueError("First name and last name cannot be null.")
        wanted = name_key(first_name, last_name)
        return next(
            (
                patient
                for patient in self._patients.values()
                if name_key(patient.first_name, patient.last_name) == wanted
            ),
            None,
        )

    @synchronized
    def find_patient(
        self,
        first_name: str,
        last_name: str,
        date_of_birth: date,
    ) -> Optional[Patient]:
        """Find the patient with the same name and date of birth."""

        return next(
            (
                patient
                for patient in self._patients.values()
                if patient.same_person(first_name, last_name, date_of_birth)
            ),
            None,
        )

    def find_patient_by_serial(self, serial_number: int) -> Optional[Patient]:
        return self._patients.get(serial_number)

    def find_staff_by_serial(self, serial_number: int) -> Optional[Staff]:
        return self._staff.get(serial_number)

    def find_clinical_staff_by_serial(self, serial_number: int) -> Optional[Staff]:
        member = self._staff.get(serial_number)
        if member is not None and member.has_patient_roster:
            return member
        return None

    @synchronized
    def find_clinical_staff_by_name(self, first_name: str, last_name: str) -> Optional[Staff]:
        if first_name is None or last_name is None:
            raise ValueError("First name and last name cannot be null.")
        wanted = name_key(first_name, last_name)
        return next(
            (
                member
                for member in self.clinical_staff()
                if name_key(member.first_name, member.last_name) == wanted
            ),
            None,
        )

    @synchronized
    def active_patients(self) -> List[Patient]:
        return [patient for patient in self._patients.values() if not patient.deactivated]

    @synchronized
    def clinical_staff(self) -> List[Staff]:
        return [member for member in self._staff.values() if member.has_patient_roster]

    def active_clinical_staff(self) -> List[Staff]:
        return [member for member in self.clinical_staff() if not member.deactivated]

    def physicians(self) -> List[Staff]:
        return [member for member in self.active_clinical_staff() if member.is_physician]

    # ----- Internal helpers ----------------------------------------------
    def _check_serial_free(self, patient: Patient) -> None:
        holder = self._patients.get(patient.serial_number)
        if holder is not None and holder is not patient:
            raise ClinicStateError(
                f"Serial number {patient.serial_number} already belongs to {holder.full_name}, "
                f"cannot register {patient.full_name} under it."
            )

    def _require_patient(self, patient: Patient) -> Patient:
        canonical = self._patients.get(patient.serial_number)
        if canonical is None:
            raise ValueError(f"Patient {patient.full_name} is not registered with the clinic.")
        return canonical

    def _require_staff(self, staff_member: Staff) -> Staff:
        canonical = self._staff.get(staff_member.serial_number)
        if canonical is None:
            raise ValueError(f"{staff_member.full_name} is not registered with the clinic.")
        return canonical

    def _resolve_patients(self, serials: Iterable[int]) -> List[Patient]:
        return [self._patients[serial] for serial in serials if serial in self._patients]

    def _move_to_room(self, patient: Patient, room: Room) -> None:
        for other in self._rooms:
            if other is not room:
                other.release(patient.serial_number)
        room.admit(patient.serial_number)
        patient.place_in(room)

    @staticmethod
    def _link(staff_member: Staff, patient: Patient) -> None:
        staff_member.take_patient(patient.serial_number)
        if staff_member.serial_number not in patient.staff_serials:
            patient.staff_serials.append(staff_member.serial_number)

    @staticmethod
    def _unlink(staff_member: Staff, patient: Patient) -> None:
        staff_member.drop_patient(patient.serial_number)
        if staff_member.serial_number in patient.staff_serials:
            patient.staff_serials.remove(staff_member.serial_number)


@lru_cache()
def get_clinic() -> Clinic:
    """Return the process-wide clinic, loading the configured layout if any."""

    settings = get_settings()
    if settings.layout_file:
        from clinic_layout.parser import parse_layout_file

        LOGGER.info("Loading clinic layout from %s", settings.layout_file)
        return parse_layout_file(settings.layout_file)
    return Clinic(settings.clinic_name)
