from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from app.models.enums import FeatureCategory


class FeatureCreate(BaseModel):
    """Payload for creating a feature"""

    category: FeatureCategory
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)

    class Config:
        str_strip_whitespace = True


class FeatureUpdate(BaseModel):
    """Partial feature update; omitted fields are left untouched"""

    category: Optional[FeatureCategory] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)

    class Config:
        str_strip_whitespace = True


class Feature(BaseModel):
    """Feature schema for responses"""

    id: int
    category: FeatureCategory
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FeatureImplementation(BaseModel):
    """Implementation row joined with its airline"""

    id: int
    airline_id: int
    feature_id: int
    value: str
    notes: Optional[str] = None
    airline_name: str
    airline_codes: str
    airline_provider: str
    airline_status: str


class FeatureWithImplementations(Feature):
    implementations: List[FeatureImplementation] = []
