from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.schemas.airline import (
    Airline,
    AirlineCreate,
    AirlineUpdate,
    AirlineWithImplementations,
)
from app.schemas.common import MessageResponse
from app.services.airlines import AirlineService
from app.services.errors import ConflictError, DatabaseError, NotFoundError

router = APIRouter(prefix="/api/airlines", tags=["airlines"])


def _server_error(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


@router.get("", response_model=List[Airline], description="List all airlines")
async def list_airlines(db: Session = Depends(get_db)):
    """Returns every airline, ordered by name."""
    try:
        return AirlineService(db).get_all_airlines()
    except DatabaseError:
        raise _server_error("Failed to fetch airlines")


@router.get("/{airline_id}", response_model=Airline)
async def get_airline(airline_id: int, db: Session = Depends(get_db)):
    try:
        return AirlineService(db).get_airline(airline_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseError:
        raise _server_error("Failed to fetch airline")


@router.get(
    "/{airline_id}/implementations",
    response_model=AirlineWithImplementations,
    description="Get an airline together with all of its feature implementations",
)
async def get_airline_implementations(airline_id: int, db: Session = Depends(get_db)):
    """
    Returns the airline and its implementations. Each implementation carries
    the feature's name, category and description, ordered by category then
    feature name.
    """
    try:
        return AirlineService(db).get_airline_with_implementations(airline_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseError:
        raise _server_error("Failed to fetch airline with implementations")


@router.post("", response_model=Airline, status_code=status.HTTP_201_CREATED)
async def create_airline(payload: AirlineCreate, db: Session = Depends(get_db)):
    try:
        return AirlineService(db).create_airline(payload)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except DatabaseError:
        raise _server_error("Failed to create airline")


@router.put("/{airline_id}", response_model=Airline)
async def update_airline(
    airline_id: int, payload: AirlineUpdate, db: Session = Depends(get_db)
):
    """Partial update: only the fields present in the body are changed."""
    try:
        return AirlineService(db).update_airline(airline_id, payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except DatabaseError:
        raise _server_error("Failed to update airline")


@router.delete("/{airline_id}", response_model=MessageResponse)
async def delete_airline(airline_id: int, db: Session = Depends(get_db)):
    """Deletes the airline and all of its implementations."""
    try:
        AirlineService(db).delete_airline(airline_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseError:
        raise _server_error("Failed to delete airline")

    return MessageResponse(message="Airline deleted successfully")
