"""Serial number issuing for staff members and patients."""

from __future__ import annotations

import logging
import threading
from datetime import date
from functools import lru_cache
from typing import Dict, Tuple

LOGGER = logging.getLogger(__name__)

PatientKey = Tuple[str, str, date]


def name_key(first_name: str, last_name: str) -> Tuple[str, str]:
    """Case-insensitive form of a person's name used by every name comparison."""

    return (first_name.strip().casefold(), last_name.strip().casefold())


def patient_key(first_name: str, last_name: str, date_of_birth: date) -> PatientKey:
    """Return the identity key used for patient de-duplication."""

    return (*name_key(first_name, last_name), date_of_birth)


class SerialNumberIssuer:
    """Hands out serial numbers that stay unique for the life of the process.

    Staff members share a single counter regardless of kind. Patients are keyed
    by name and date of birth so re-entering the same person yields the serial
    number that was issued the first time.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._next_staff_serial = 1
        self._next_patient_serial = 1
        self._patient_serials: Dict[PatientKey, int] = {}

    def next_staff_serial(self) -> int:
        with self._lock:
            serial = self._next_staff_serial
            self._next_staff_serial += 1
        return serial

    def patient_serial(
        self,
        first_name: str,
        last_name: str,
        date_of_birth: date,
    ) -> int:
        key = patient_key(first_name, last_name, date_of_birth)
        with self._lock:
            serial = self._patient_serials.get(key)
            if serial is None:
                serial = self._next_patient_serial
                self._next_patient_serial += 1
                self._patient_serials[key] = serial
            else:
                LOGGER.debug("Reusing patient serial %s for %s %s", serial, first_name, last_name)
        return serial

    def reset(self) -> None:
        """Forget every issued serial number."""

        with self._lock:
            self._next_staff_serial = 1
            self._next_patient_serial = 1
            self._patient_serials.clear()


@lru_cache()
def get_serial_issuer() -> SerialNumberIssuer:
    """Return the process-wide serial issuer."""

    return SerialNumberIssuer()
