"""Patient and staff registration rules."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from clinic_desk.models.patient import Patient, parse_date_of_birth
from clinic_desk.models.room import RoomType
from clinic_desk.models.staff import (
    EducationLevel,
    StaffKind,
    new_clinical_staff,
    new_non_clinical_staff,
    new_staff_from_identifier,
)
from clinic_desk.services.registry import Clinic, ClinicStateError


def _patient(first: str, last: str, dob: str) -> Patient:
    return Patient.new(first, last, parse_date_of_birth(dob))


def test_identical_name_and_birth_date_share_serial_number() -> None:
    first = _patient("Jane", "Doe", "3/4/1990")
    second = _patient("Jane", "Doe", "3/4/1990")
    other = _patient("John", "Roe", "1/2/1980")

    assert first is not second
    assert first.serial_number == second.serial_number == 1
    assert other.serial_number == 2


def test_register_places_patient_in_default_waiting_room(clinic: Clinic) -> None:
    patient = clinic.register_patient(_patient("Future", "Follicle", "6/6/1986"))

    assert patient is not None
    front = clinic.get_room_by_number(1)
    assert clinic.current_room_of(patient) is front
    assert clinic.admission_room_for(patient) is front
    assert patient.room_number == 1
    assert patient.room_name == "Front"
    assert patient.room_type is RoomType.WAITING
    assert patient in clinic.patients


def test_duplicate_active_patient_is_not_registered_twice(clinic: Clinic) -> None:
    original = clinic.register_patient(_patient("Jane", "Doe", "3/4/1990"))
    duplicate = clinic.register_patient(_patient("JANE", "doe", "3/4/1990"))

    assert original is not None
    assert duplicate is None
    assert len(clinic.patients) == 1
    assert clinic.get_room_by_number(1).patient_serials == [original.serial_number]


def test_reactivation_returns_original_patient(clinic: Clinic, physician) -> None:
    original = clinic.register_patient(_patient("Jane", "Doe", "3/4/1990"))
    clinic.assign_patient_to_room(original, "Triage")
    clinic.send_patient_home(original, physician)

    returned = clinic.register_patient(_patient("Jane", "Doe", "3/4/1990"))

    assert returned is original
    assert not returned.deactivated
    assert returned.room_name == "Front"
    assert clinic.current_room_of(returned).number == 1
    assert returned.deactivation_history[-1].reactivated_on == date.today()
    assert returned.last_deactivation_date is None
    assert len(clinic.patients) == 1


def test_missing_waiting_room_is_a_hard_error() -> None:
    clinic = Clinic("Empty Clinic")

    with pytest.raises(ValueError, match="waiting room"):
        clinic.register_patient(_patient("Jane", "Doe", "3/4/1990"))

    assert clinic.patients == []


def test_register_rejects_missing_arguments(clinic: Clinic) -> None:
    with pytest.raises(ValueError):
        clinic.register_patient(None)
    with pytest.raises(ValueError):
        clinic.register_staff(None)


def test_invalid_date_of_birth() -> None:
    with pytest.raises(ValueError, match="M/d/yyyy"):
        parse_date_of_birth("1990-03-04")


def test_staff_serials_are_shared_across_kinds() -> None:
    doctor = new_clinical_staff("Physician", "Amy", "Smith", EducationLevel.DOCTORAL, "1234567890")
    clerk = new_non_clinical_staff("Receptionist", "Cara", "Lee", EducationLevel.ALLIED, "CPR-A")
    nurse = new_clinical_staff("Nurse", "Ben", "Jones", EducationLevel.MASTERS, "0987654321")

    assert [doctor.serial_number, clerk.serial_number, nurse.serial_number] == [1, 2, 3]
    assert doctor.prefix == "Dr."
    assert nurse.prefix == "Nr."
    assert clerk.prefix == ""
    assert not clerk.has_patient_roster


def test_identifier_decides_staff_kind() -> None:
    clinical = new_staff_from_identifier(
        "Technician", "Tom", "Hart", EducationLevel.ALLIED, "5555555555"
    )
    non_clinical = new_staff_from_identifier(
        "Janitor", "Sam", "Ray", EducationLevel.ALLIED, "555555555"
    )

    assert clinical.kind is StaffKind.CLINICAL
    assert clinical.license_id == "5555555555"
    assert non_clinical.kind is StaffKind.NON_CLINICAL


def test_clinical_staff_requires_ten_digit_license() -> None:
    with pytest.raises(ValueError, match="10 digits"):
        new_clinical_staff("Physician", "Amy", "Smith", EducationLevel.DOCTORAL, "12345")


def test_lookups_return_none_when_missing(clinic: Clinic, physician) -> None:
    assert clinic.find_patient_by_name("Nobody", "Here") is None
    assert clinic.find_patient_by_serial(99) is None
    assert clinic.find_staff_by_serial(99) is None
    assert clinic.find_room_by_name("Attic") is None
    assert clinic.find_clinical_staff_by_name("amy", "SMITH") is physician


def test_find_patient_by_name_and_birth_date(clinic: Clinic) -> None:
    older = clinic.register_patient(_patient("Sam", "Lane", "1/1/1950"))
    younger = clinic.register_patient(_patient("Sam", "Lane", "1/1/2000"))

    assert clinic.find_patient_by_name("sam", "lane") is older
    assert clinic.find_patient("Sam", "Lane", date(2000, 1, 1)) is younger
    assert clinic.find_patient("Sam", "Lane", date(2000, 1, 1) + timedelta(days=1)) is None


def test_clear_model_empties_everything(clinic: Clinic, physician) -> None:
    patient = clinic.register_patient(_patient("Jane", "Doe", "3/4/1990"))
    clinic.add_visit_record(patient, datetime(2024, 2, 25, 10, 30), "Cough", 37.0)

    clinic.clear_model()

    assert clinic.rooms == []
    assert clinic.patients == []
    assert clinic.staff == []
    assert patient.visit_records == []


def test_casefolded_names_are_the_same_patient(clinic: Clinic, physician) -> None:
    """Names that fold to the same text share one record and one care team."""

    first = clinic.register_patient(_patient("Hans", "Strauß", "1/1/1970"))
    clinic.assign_clinical_staff_to_patient(first, physician)

    second = _patient("Hans", "STRAUSS", "1/1/1970")

    assert second.serial_number == first.serial_number
    assert clinic.register_patient(second) is None
    assert clinic.patients == [first]
    assert clinic.find_patient_by_serial(first.serial_number) is first
    assert clinic.find_patient_by_name("hans", "strauss") is first
    assert clinic.patients_of(physician) == [first]
    assert clinic.care_team_of(first) == [physician]


def test_serial_number_held_by_another_patient_is_not_replaced(clinic: Clinic) -> None:
    jane = clinic.register_patient(_patient("Jane", "Doe", "3/4/1990"))
    impostor = Patient(
        serial_number=jane.serial_number,
        first_name="Mia",
        last_name="Poe",
        date_of_birth=date(2001, 7, 8),
    )

    with pytest.raises(ClinicStateError, match="already belongs to Jane Doe"):
        clinic.register_patient(impostor)
    with pytest.raises(ClinicStateError):
        clinic.add_patient(impostor, 2)

    assert clinic.find_patient_by_serial(jane.serial_number) is jane
    assert clinic.current_room_of(jane).name == "Front"
    assert clinic.get_room_by_number(2).patient_serials == []
