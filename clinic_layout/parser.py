"""Clinic layout file loader."""

from __future__ import annotations

import logging
from io import StringIO
from pathlib import Path
from typing import Iterator, List, TextIO, Union

from clinic_desk.models.patient import Patient, parse_date_of_birth
from clinic_desk.models.room import Room
from clinic_desk.models.staff import EducationLevel, new_staff_from_identifier
from clinic_desk.services.registry import Clinic, ClinicStateError

LOGGER = logging.getLogger(__name__)


class LayoutFormatError(ValueError):
    """Raised when a layout file does not follow the expected format."""


class ClinicLayoutParser:
    """Builds a :class:`Clinic` from the text layout format.

    The layout is a clinic name line followed by three counted sections: rooms
    (``x1 y1 x2 y2 <type> <name>``), staff (``<title> <first> <last>
    <education> <identifier>``) and patients (``<room> <first> <last>
    <M/d/yyyy>``). A 10 digit staff identifier marks clinical staff.
    """

    def __init__(self, reader: TextIO) -> None:
        if reader is None:
            raise ValueError("Reader cannot be null.")
        self._reader = reader
        self._lines: Iterator[str] = iter(())
        self._line_number = 0

    def parse(self) -> Clinic:
        self._lines = iter(self._reader.read().splitlines())
        self._line_number = 0

        clinic = Clinic(self._parse_clinic_name())
        self._parse_rooms(clinic)
        self._parse_staff(clinic)
        self._parse_patients(clinic)

        LOGGER.info(
            "Loaded clinic %s: rooms=%s staff=%s patients=%s",
            clinic.name,
            len(clinic.rooms),
            len(clinic.staff),
            len(clinic.patients),
        )
        return clinic

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------
    def _parse_clinic_name(self) -> str:
        name = self._next_line()
        if not name:
            raise LayoutFormatError("Clinic name cannot be empty.")
        return name

    def _parse_rooms(self, clinic: Clinic) -> None:
        for index in range(self._parse_count("room")):
            line = self._next_line()
            self._validate_room_line(line)
            try:
                clinic.add_room(Room.from_layout_line(line, index + 1))
            except ValueError as exc:
                raise LayoutFormatError(f"Line {self._line_number}: {exc}") from exc

    def _parse_staff(self, clinic: Clinic) -> None:
        for _ in range(self._parse_count("staff")):
            line = self._next_line()
            if not line:
                continue
            parts = line.split()
            if len(parts) < 5:
                raise LayoutFormatError(f"Invalid staff information format: {line}")

            job_title, first_name, last_name, education, identifier = parts[:5]
            try:
                member = new_staff_from_identifier(
                    job_title,
                    first_name,
                    last_name,
                    EducationLevel.from_keyword(education),
                    identifier,
                )
            except ValueError as exc:
                raise LayoutFormatError(f"Line {self._line_number}: {exc}") from exc
            clinic.register_staff(member)

    def _parse_patients(self, clinic: Clinic) -> None:
        for _ in range(self._parse_count("patient")):
            line = self._next_line()
            if not line:
                continue
            parts = line.split()
            if len(parts) < 4:
                raise LayoutFormatError(f"Invalid patient information format: {line}")

            room_text, first_name, last_name, dob_text = parts[:4]
            try:
                patient = Patient.new(first_name, last_name, parse_date_of_birth(dob_text))
                clinic.add_patient(patient, int(room_text))
            except (ValueError, ClinicStateError) as exc:
                raise LayoutFormatError(f"Line {self._line_number}: {exc}") from exc

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _next_line(self) -> str:
        try:
            line = next(self._lines)
        except StopIteration as exc:
            raise LayoutFormatError(
                f"Unexpected end of layout after line {self._line_number}."
            ) from exc
        self._line_number += 1
        return line.strip()

    def _parse_count(self, section: str) -> int:
        line = self._next_line()
        try:
            count = int(line)
        except ValueError as exc:
            raise LayoutFormatError(
                f"Line {self._line_number}: expected the number of {section} entries, got {line!r}"
            ) from exc
        if count < 0:
            raise LayoutFormatError(f"Line {self._line_number}: negative {section} count")
        return count

    @staticmethod
    def _validate_room_line(line: str) -> None:
        # Room lines open with the first map coordinate.
        if not line:
            raise LayoutFormatError("Room name cannot be empty.")
        if not line[0].isdigit():
            raise LayoutFormatError(f"Invalid room name format: {line}")


def parse_layout_file(path: Union[str, Path]) -> Clinic:
    """Load a clinic from a layout file on disk."""

    with open(path, encoding="utf-8") as handle:
        return ClinicLayoutParser(handle).parse()


def parse_layout_lines(lines: List[str]) -> Clinic:
    return ClinicLayoutParser(StringIO("\n".join(lines))).parse()
