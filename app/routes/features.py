from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.schemas.common import MessageResponse
from app.schemas.feature import (
    Feature,
    FeatureCreate,
    FeatureUpdate,
    FeatureWithImplementations,
)
from app.services.errors import ConflictError, DatabaseError, NotFoundError
from app.services.features import FeatureService

router = APIRouter(prefix="/api/features", tags=["features"])


@router.get("", response_model=List[Feature], description="List all features")
async def list_features(db: Session = Depends(get_db)):
    """Returns every feature, ordered by category and then name."""
    try:
        return FeatureService(db).get_all_features()
    except DatabaseError:
        raise HTTPException(status_code=500, detail="Failed to fetch features")


@router.get("/{feature_id}", response_model=Feature)
async def get_feature(feature_id: int, db: Session = Depends(get_db)):
    try:
        return FeatureService(db).get_feature(feature_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseError:
        raise HTTPException(status_code=500, detail="Failed to fetch feature")


@router.get(
    "/{feature_id}/implementations",
    response_model=FeatureWithImplementations,
    description="Get a feature together with every airline's implementation of it",
)
async def get_feature_implementations(feature_id: int, db: Session = Depends(get_db)):
    try:
        return FeatureService(db).get_feature_with_implementations(feature_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseError:
        raise HTTPException(
            status_code=500, detail="Failed to fetch feature with implementations"
        )


@router.post("", response_model=Feature, status_code=status.HTTP_201_CREATED)
async def create_feature(payload: FeatureCreate, db: Session = Depends(get_db)):
    try:
        return FeatureService(db).create_feature(payload)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except DatabaseError:
        raise HTTPException(status_code=500, detail="Failed to create feature")


@router.put("/{feature_id}", response_model=Feature)
async def update_feature(
    feature_id: int, payload: FeatureUpdate, db: Session = Depends(get_db)
):
    try:
        return FeatureService(db).update_feature(feature_id, payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except DatabaseError:
        raise HTTPException(status_code=500, detail="Failed to update feature")


@router.delete("/{feature_id}", response_model=MessageResponse)
async def delete_feature(feature_id: int, db: Session = Depends(get_db)):
    try:
        FeatureService(db).delete_feature(feature_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseError:
        raise HTTPException(status_code=500, detail="Failed to delete feature")

    return MessageResponse(message="Feature deleted successfully")
