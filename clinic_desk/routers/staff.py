"""Staff registration and deactivation router."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from clinic_desk.models.staff import (
    EducationLevel,
    Staff,
    new_clinical_staff,
    new_non_clinical_staff,
    new_staff_from_identifier,
)
from clinic_desk.services.registry import Clinic, get_clinic
from clinic_desk.services.reports import ClinicalStaffListing, list_active_clinical_staff

router = APIRouter()


class StaffRegistration(BaseModel):
    """Inbound staff form.

    With ``clinical`` true the identifier must be a 10 digit NPI, with
    ``clinical`` false the identifier is kept as the CPR level. Left out, the
    identifier decides the kind the same way the layout file does.
    """

    job_title: str = Field(min_length=1)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    education_level: str = Field(description="doctoral, masters or allied")
    identifier: str = Field(min_length=1)
    clinical: Optional[bool] = None


class StaffView(BaseModel):
    serial_number: int
    name: str
    job_title: str
    kind: str
    deactivated: bool

    @classmethod
    def from_staff(cls, member: Staff) -> "StaffView":
        return cls(
            serial_number=member.serial_number,
            name=member.display_name,
            job_title=member.job_title,
            kind=member.kind.value,
            deactivated=member.deactivated,
        )


@router.post("", response_model=StaffView, status_code=status.HTTP_201_CREATED)
def register_staff(
    payload: StaffRegistration,
    clinic: Clinic = Depends(get_clinic),
) -> StaffView:
    education = EducationLevel.from_keyword(payload.education_level)
    if payload.clinical:
        member = new_clinical_staff(
            payload.job_title,
            payload.first_name,
            payload.last_name,
            education,
            payload.identifier,
        )
    elif payload.clinical is False:
        member = new_non_clinical_staff(
            payload.job_title,
            payload.first_name,
            payload.last_name,
            education,
            payload.identifier,
        )
    else:
        member = new_staff_from_identifier(
            payload.job_title,
            payload.first_name,
            payload.last_name,
            education,
            payload.identifier,
        )
    return StaffView.from_staff(clinic.register_staff(member))


@router.get("", response_model=List[ClinicalStaffListing])
def list_clinical_staff(clinic: Clinic = Depends(get_clinic)) -> List[ClinicalStaffListing]:
    return list_active_clinical_staff(clinic)


@router.post("/{serial_number}/deactivate", response_model=StaffView)
def deactivate_staff(serial_number: int, clinic: Clinic = Depends(get_clinic)) -> StaffView:
    return StaffView.from_staff(clinic.deactivate_staff(serial_number))
