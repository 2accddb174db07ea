"""Room occupancy router."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from clinic_desk.services.registry import Clinic, get_clinic
from clinic_desk.services.reports import PatientListing, RoomSeating, seating_chart

router = APIRouter()


@router.get("", response_model=List[RoomSeating])
def list_rooms(clinic: Clinic = Depends(get_clinic)) -> List[RoomSeating]:
    """Seating chart of the whole clinic."""

    return seating_chart(clinic)


@router.get("/locate", response_model=RoomSeating)
def locate_room(x: int, y: int, clinic: Clinic = Depends(get_clinic)) -> RoomSeating:
    room = clinic.find_room_at(x, y)
    if room is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No room found at the given location",
        )
    return next(seat for seat in seating_chart(clinic) if seat.room_number == room.number)


@router.get("/{room_name}/patients", response_model=List[PatientListing])
def room_patients(room_name: str, clinic: Clinic = Depends(get_clinic)) -> List[PatientListing]:
    room = clinic.find_room_by_name(room_name)
    if room is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Room with name '{room_name}' not found",
        )
    return [PatientListing.from_patient(patient) for patient in clinic.patients_in_room(room)]
