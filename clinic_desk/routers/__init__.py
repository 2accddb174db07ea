"""API router initializers."""

from fastapi import APIRouter, HTTPException, status

from clinic_desk.services.registry import OperationResult, Rejection

NOT_FOUND_REASONS = {
    Rejection.ROOM_NOT_FOUND,
    Rejection.PATIENT_NOT_FOUND,
    Rejection.STAFF_NOT_FOUND,
}


def get_api_router() -> APIRouter:
    """Construct and return the API router."""

    from clinic_desk.routers.patients import router as patients_router
    from clinic_desk.routers.reports import router as reports_router
    from clinic_desk.routers.rooms import router as rooms_router
    from clinic_desk.routers.staff import router as staff_router

    api_router = APIRouter()
    api_router.include_router(patients_router, prefix="/patients", tags=["patients"])
    api_router.include_router(staff_router, prefix="/staff", tags=["staff"])
    api_router.include_router(rooms_router, prefix="/rooms", tags=["rooms"])
    api_router.include_router(reports_router, prefix="/reports", tags=["reports"])
    return api_router


def ensure_ok(result: OperationResult) -> OperationResult:
    """Turn a rejected operation into the matching HTTP error."""

    if result.ok:
        return result
    status_code = (
        status.HTTP_404_NOT_FOUND
        if result.reason in NOT_FOUND_REASONS
        else status.HTTP_409_CONFLICT
    )
    raise HTTPException(
        status_code=status_code,
        detail={"reason": result.reason.value if result.reason else None, "message": result.message},
    )
