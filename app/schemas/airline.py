from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from app.models.enums import AirlineStatus


class AirlineCreate(BaseModel):
    """Payload for creating an airline"""

    name: str = Field(..., min_length=1, max_length=255)
    codes: str = Field(..., min_length=1, max_length=100, description="Comma-separated codes, e.g. 'LH, OS, SN'")
    provider: str = Field(..., min_length=1, max_length=255)
    status: AirlineStatus

    class Config:
        str_strip_whitespace = True


class AirlineUpdate(BaseModel):
    """Partial airline update; omitted fields are left untouched"""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    codes: Optional[str] = Field(default=None, min_length=1, max_length=100)
    provider: Optional[str] = Field(default=None, min_length=1, max_length=255)
    status: Optional[AirlineStatus] = None

    class Config:
        str_strip_whitespace = True


class Airline(BaseModel):
    """Airline schema for responses"""

    id: int
    name: str
    codes: str
    provider: str
    status: AirlineStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AirlineImplementation(BaseModel):
    """Implementation row joined with its feature"""

    id: int
    airline_id: int
    feature_id: int
    value: str
    notes: Optional[str] = None
    feature_name: str
    feature_category: str
    feature_description: Optional[str] = None


class AirlineWithImplementations(Airline):
    implementations: List[AirlineImplementation] = []
