"""Front desk reports."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pytest

from clinic_desk.models.patient import Patient, parse_date_of_birth
from clinic_desk.models.staff import EducationLevel, Staff, new_non_clinical_staff
from clinic_desk.services import reports
from clinic_desk.services.registry import Clinic

TODAY = date(2024, 6, 1)


def _days_ago(days: int) -> datetime:
    return datetime.combine(TODAY - timedelta(days=days), time(9, 0))


@pytest.fixture
def jane(clinic: Clinic) -> Patient:
    return clinic.register_patient(Patient.new("Jane", "Doe", parse_date_of_birth("3/4/1990")))


@pytest.fixture
def john(clinic: Clinic) -> Patient:
    return clinic.register_patient(Patient.new("John", "Roe", parse_date_of_birth("1/2/1980")))


def test_visit_window_reports(clinic: Clinic, jane: Patient, john: Patient, physician: Staff) -> None:
    """Two visits in the last year count; a lone old visit only shows once discharged."""

    for days in (400, 10, 5):
        clinic.add_visit_record(jane, _days_ago(days), "Check up", 36.9)
    clinic.add_visit_record(john, _days_ago(400), "Check up", 36.9)

    frequent = reports.patients_with_multiple_visits(clinic, today=TODAY)
    assert [(row.full_name, row.visits_in_window) for row in frequent] == [("Jane Doe", 2)]
    assert reports.patients_with_stale_visits(clinic, today=TODAY) == []

    clinic.send_patient_home(john, physician, on=TODAY)

    stale = reports.patients_with_stale_visits(clinic, today=TODAY)
    assert [row.full_name for row in stale] == ["John Roe"]
    assert stale[0].last_visit_date == TODAY - timedelta(days=400)


def test_visit_exactly_a_year_ago_is_outside_multiple_visit_window(
    clinic: Clinic,
    jane: Patient,
) -> None:
    clinic.add_visit_record(jane, _days_ago(365), "Check up", 36.9)
    clinic.add_visit_record(jane, _days_ago(1), "Check up", 36.9)

    assert reports.patients_with_multiple_visits(clinic, today=TODAY) == []
    assert len(reports.patients_with_multiple_visits(clinic, today=TODAY, days=400)) == 1


def test_inactive_patients_for_year(clinic: Clinic, jane: Patient, john: Patient, physician: Staff) -> None:
    clinic.send_patient_home(jane, physician, on=TODAY - timedelta(days=366))
    clinic.send_patient_home(john, physician, on=TODAY - timedelta(days=365))

    rows = reports.inactive_patients_for_year(clinic, today=TODAY)

    assert [(row.full_name, row.days_inactive) for row in rows] == [("Jane Doe", 366)]
    assert rows[0].deactivated_on == TODAY - timedelta(days=366)


def test_reactivated_patient_is_not_inactive(clinic: Clinic, jane: Patient, physician: Staff) -> None:
    clinic.send_patient_home(jane, physician, on=TODAY - timedelta(days=500))
    clinic.register_patient(Patient.new("Jane", "Doe", parse_date_of_birth("3/4/1990")))

    assert reports.inactive_patients_for_year(clinic, today=TODAY) == []


def test_active_patient_listing(clinic: Clinic, jane: Patient, john: Patient, physician: Staff) -> None:
    clinic.assign_patient_to_room(john, "Triage")
    clinic.send_patient_home(jane, physician)

    rows = reports.list_active_patients(clinic)

    assert len(rows) == 1
    assert rows[0].full_name == "John Roe"
    assert rows[0].date_of_birth == "1/2/1980"
    assert rows[0].room_name == "Triage"
    assert rows[0].room_type == "exam"


def test_clinical_staff_listing_skips_non_clinical_and_inactive(
    clinic: Clinic,
    physician: Staff,
    nurse: Staff,
) -> None:
    clinic.register_staff(
        new_non_clinical_staff("Receptionist", "Cara", "Lee", EducationLevel.ALLIED, "CPR-A")
    )
    clinic.deactivate_staff(nurse.serial_number)

    rows = reports.list_active_clinical_staff(clinic)

    assert [row.name for row in rows] == ["Dr. Amy Smith"]
    assert rows[0].education_level == "Doctoral"
    assert rows[0].license_id == "1234567890"


def test_patient_counts_include_inactive_staff(
    clinic: Clinic,
    jane: Patient,
    john: Patient,
    physician: Staff,
    nurse: Staff,
) -> None:
    clinic.assign_clinical_staff_to_patient(jane, physician)
    clinic.assign_clinical_staff_to_patient(john, physician)
    clinic.assign_clinical_staff_to_patient(jane, nurse)
    clinic.deactivate_staff(nurse.serial_number)

    rows = {row.name: row for row in reports.clinical_staff_patient_counts(clinic)}

    assert rows["Amy Smith"].unique_patients_assigned == 2
    assert rows["Amy Smith"].status == "Active"
    assert rows["Ben Jones"].unique_patients_assigned == 1
    assert rows["Ben Jones"].status == "Inactive"


def test_staff_with_recent_visits(
    clinic: Clinic,
    jane: Patient,
    john: Patient,
    physician: Staff,
    nurse: Staff,
) -> None:
    clinic.add_visit_record(jane, _days_ago(30), "Cough", 37.4)
    clinic.add_visit_record(john, _days_ago(700), "Rash", 36.8)
    clinic.assign_clinical_staff_to_patient(jane, physician)
    clinic.assign_clinical_staff_to_patient(john, physician)
    clinic.assign_clinical_staff_to_patient(john, nurse)

    rows = reports.clinical_staff_with_recent_visits(clinic, today=TODAY)

    assert len(rows) == 1
    assert rows[0].name == "Amy Smith"
    assert rows[0].patients == ["Jane Doe"]


def test_seating_chart(clinic: Clinic, jane: Patient, john: Patient) -> None:
    clinic.assign_patient_to_room(jane, "Surgical")
    clinic.add_visit_record(jane, _days_ago(0), "Laceration", 37.0)

    chart = {row.name: row for row in reports.seating_chart(clinic)}

    assert chart["Surgical"].occupied
    assert [occupant.latest_complaint for occupant in chart["Surgical"].patients] == ["Laceration"]
    assert [occupant.full_name for occupant in chart["Front"].patients] == ["John Roe"]
    assert not chart["Front"].occupied
    assert chart["Triage"].patients == []
