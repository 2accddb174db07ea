"""Staff model definition."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set

from clinic_desk.services.serials import SerialNumberIssuer, get_serial_issuer

LICENSE_ID_PATTERN = re.compile(r"\d{10}")

TITLE_PREFIXES = {
    "physician": "Dr.",
    "nurse": "Nr.",
}


class EducationLevel(Enum):
    DOCTORAL = "doctoral"
    MASTERS = "masters"
    ALLIED = "allied"

    @classmethod
    def from_keyword(cls, text: str) -> "EducationLevel":
        try:
            return cls(text.strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown education level: {text}") from exc


class StaffKind(Enum):
    """Tag distinguishing staff who carry a patient roster."""

    CLINICAL = "clinical"
    NON_CLINICAL = "non_clinical"

    @property
    def has_patient_roster(self) -> bool:
        return self is StaffKind.CLINICAL


def is_valid_license_id(value: Optional[str]) -> bool:
    """Return True for a 10 digit provider identifier."""

    return bool(value) and LICENSE_ID_PATTERN.fullmatch(value.strip()) is not None


@dataclass(eq=False)
class Staff:
    """A member of the clinic staff.

    Clinical staff keep the serial numbers of the patients currently in their
    care and, separately, every patient they have ever been assigned so the
    lifetime count survives unassignment.
    """

    serial_number: int
    job_title: str
    first_name: str
    last_name: str
    education_level: EducationLevel
    kind: StaffKind
    license_id: Optional[str] = None
    cpr_level: Optional[str] = None
    patient_serials: List[int] = field(default_factory=list)
    lifetime_patient_serials: Set[int] = field(default_factory=set)
    deactivated: bool = False

    @property
    def has_patient_roster(self) -> bool:
        return self.kind.has_patient_roster

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def prefix(self) -> str:
        return TITLE_PREFIXES.get(self.job_title.strip().lower(), "")

    @property
    def display_name(self) -> str:
        return f"{self.prefix} {self.full_name}".strip()

    @property
    def is_physician(self) -> bool:
        return self.job_title.strip().lower() == "physician"

    @property
    def unique_patient_count(self) -> int:
        return len(self.lifetime_patient_serials)

    def has_patient(self, serial_number: int) -> bool:
        return serial_number in self.patient_serials

    def take_patient(self, serial_number: int) -> None:
        if not self.has_patient_roster:
            raise ValueError(f"{self.full_name} does not keep a patient roster.")
        if serial_number not in self.patient_serials:
            self.patient_serials.append(serial_number)
        self.lifetime_patient_serials.add(serial_number)

    def drop_patient(self, serial_number: int) -> bool:
        if serial_number in self.patient_serials:
            self.patient_serials.remove(serial_number)
            return True
        return False

    def __str__(self) -> str:
        return f"{self.display_name} - {self.job_title}"


def _check_names(job_title: str, first_name: str, last_name: str) -> None:
    for label, value in (
        ("Job title", job_title),
        ("First name", first_name),
        ("Last name", last_name),
    ):
        if not value or not value.strip():
            raise ValueError(f"{label} cannot be empty.")


def new_clinical_staff(
    job_title: str,
    first_name: str,
    last_name: str,
    education_level: EducationLevel,
    license_id: str,
    *,
    issuer: Optional[SerialNumberIssuer] = None,
) -> Staff:
    """Create clinical staff with the next staff serial number."""

    _check_names(job_title, first_name, last_name)
    if not is_valid_license_id(license_id):
        raise ValueError("Invalid NPI. The NPI must contain 10 digits.")

    issuer = issuer or get_serial_issuer()
    return Staff(
        serial_number=issuer.next_staff_serial(),
        job_title=job_title.strip(),
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        education_level=education_level,
        kind=StaffKind.CLINICAL,
        license_id=license_id.strip(),
    )


def new_non_clinical_staff(
    job_title: str,
    first_name: str,
    last_name: str,
    education_level: EducationLevel,
    cpr_level: Optional[str] = None,
    *,
    issuer: Optional[SerialNumberIssuer] = None,
) -> Staff:
    _check_names(job_title, first_name, last_name)

    issuer = issuer or get_serial_issuer()
    return Staff(
        serial_number=issuer.next_staff_serial(),
        job_title=job_title.strip(),
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        education_level=education_level,
        kind=StaffKind.NON_CLINICAL,
        cpr_level=cpr_level,
    )


def new_staff_from_identifier(
    job_title: str,
    first_name: str,
    last_name: str,
    education_level: EducationLevel,
    identifier: str,
    *,
    issuer: Optional[SerialNumberIssuer] = None,
) -> Staff:
    """Clinical when ``identifier`` is a 10 digit license id, non-clinical otherwise."""

    if is_valid_license_id(identifier):
        return new_clinical_staff(
            job_title, first_name, last_name, education_level, identifier, issuer=issuer
        )
    return new_non_clinical_staff(
        job_title, first_name, last_name, education_level, identifier, issuer=issuer
    )
