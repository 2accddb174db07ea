"""Reporting router."""

from typing import List

from fastapi import APIRouter, Depends

from clinic_desk.services import reports
from clinic_desk.services.registry import Clinic, get_clinic

router = APIRouter()


@router.get("/staff-patient-counts", response_model=List[reports.StaffPatientCount])
def staff_patient_counts(clinic: Clinic = Depends(get_clinic)) -> List[reports.StaffPatientCount]:
    return reports.clinical_staff_patient_counts(clinic)


@router.get("/inactive-patients", response_model=List[reports.InactivePatient])
def inactive_patients(clinic: Clinic = Depends(get_clinic)) -> List[reports.InactivePatient]:
    return reports.inactive_patients_for_year(clinic)


@router.get("/stale-visits", response_model=List[reports.StaleVisitPatient])
def stale_visits(clinic: Clinic = Depends(get_clinic)) -> List[reports.StaleVisitPatient]:
    return reports.patients_with_stale_visits(clinic)


@router.get("/frequent-visitors", response_model=List[reports.FrequentVisitor])
def frequent_visitors(clinic: Clinic = Depends(get_clinic)) -> List[reports.FrequentVisitor]:
    return reports.patients_with_multiple_visits(clinic)


@router.get("/staff-with-recent-visits", response_model=List[reports.StaffWithRecentVisits])
def staff_with_recent_visits(
    clinic: Clinic = Depends(get_clinic),
) -> List[reports.StaffWithRecentVisits]:
    return reports.clinical_staff_with_recent_visits(clinic)
