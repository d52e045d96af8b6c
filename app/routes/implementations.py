import io

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.schemas.common import FileUploadResponse, MessageResponse
from app.schemas.implementation import (
    Implementation,
    ImplementationCreate,
    ImplementationMatrix,
    ImplementationUpdate,
)
from app.services.data_loader import DataLoader
from app.services.errors import ConflictError, DatabaseError, NotFoundError
from app.services.implementations import ImplementationService

router = APIRouter(prefix="/api/implementations", tags=["implementations"])


@router.get("", response_model=List[Implementation])
async def list_implementations(db: Session = Depends(get_db)):
    """Returns every implementation, ordered by airline id and feature id."""
    try:
        return ImplementationService(db).get_all_implementations()
    except DatabaseError:
        raise HTTPException(status_code=500, detail="Failed to fetch implementations")


@router.get(
    "/matrix",
    response_model=ImplementationMatrix,
    description="Airline x feature grid of implementation values",
)
async def get_matrix(db: Session = Depends(get_db)):
    """
    One row per airline (by name) with a cell for every feature (by category,
    then name). Cells without an implementation are null.
    """
    try:
        return ImplementationService(db).get_matrix()
    except DatabaseError:
        raise HTTPException(status_code=500, detail="Failed to build implementation matrix")


@router.post(
    "/import",
    response_model=FileUploadResponse,
    description="Import implementations from a CSV file",
)
async def import_implementations(file: UploadFile = File(...), db: Session = Depends(get_db)):
    """
    Expects the columns airline_id, feature_id, value and notes. Existing
    airline/feature pairs are updated, new ones created. Rows that fail are
    reported in `errors` and skipped.
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="No file provided")

    if not file.filename.endswith((".csv", ".txt")):
        raise HTTPException(
            status_code=400,
            detail="Invalid file format. Expected .csv or .txt file",
        )

    content = await file.read()
    if len(content) == 0:
        raise HTTPException(status_code=400, detail="File is empty")

    try:
        file_content = content.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=400,
            detail="Unable to decode file. Please ensure it's a valid text file with UTF-8 encoding."
        )

    created, updated, errors = DataLoader(db).load_implementations_from_csv(
        io.StringIO(file_content)
    )

    return FileUploadResponse(
        filename=file.filename,
        records_processed=created + updated + len(errors),
        records_created=created,
        records_updated=updated,
        errors=errors,
    )


@router.get("/{implementation_id}", response_model=Implementation)
async def get_implementation(implementation_id: int, db: Session = Depends(get_db)):
    try:
        return ImplementationService(db).get_implementation(implementation_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseError:
        raise HTTPException(status_code=500, detail="Failed to fetch implementation")


@router.get("/{airline_id}/{feature_id}", response_model=Implementation)
async def get_implementation_by_pair(
    airline_id: int, feature_id: int, db: Session = Depends(get_db)
):
    try:
        return ImplementationService(db).get_implementation_by_pair(airline_id, feature_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseError:
        raise HTTPException(status_code=500, detail="Failed to fetch implementation")


@router.post("", response_model=Implementation, status_code=status.HTTP_201_CREATED)
async def create_implementation(
    payload: ImplementationCreate, db: Session = Depends(get_db)
):
    """
    Creates the implementation of a feature for an airline. There can be only
    one per airline/feature pair.
    """
    try:
        return ImplementationService(db).create_implementation(payload)
    except NotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except DatabaseError:
        raise HTTPException(status_code=500, detail="Failed to create implementation")


@router.put("/{airline_id}/{feature_id}", response_model=Implementation)
async def update_implementation(
    airline_id: int,
    feature_id: int,
    payload: ImplementationUpdate,
    db: Session = Depends(get_db),
):
    try:
        return ImplementationService(db).update_implementation(airline_id, feature_id, payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseError:
        raise HTTPException(status_code=500, detail="Failed to update implementation")


@router.delete("/{airline_id}/{feature_id}", response_model=MessageResponse)
async def delete_implementation(
    airline_id: int, feature_id: int, db: Session = Depends(get_db)
):
    try:
        ImplementationService(db).delete_implementation(airline_id, feature_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseError:
        raise HTTPException(status_code=500, detail="Failed to delete implementation")

    return MessageResponse(message="Implementation deleted successfully")
