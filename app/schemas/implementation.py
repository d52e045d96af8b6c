from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime

from app.schemas.feature import Feature


class ImplementationCreate(BaseModel):
    """Payload for creating an implementation"""

    airline_id: int = Field(..., ge=1)
    feature_id: int = Field(..., ge=1)
    value: str = Field(..., min_length=1, max_length=255, description="e.g. Yes, No, Limited, Pilot")
    notes: Optional[str] = Field(default=None, max_length=1000)

    class Config:
        str_strip_whitespace = True


class ImplementationUpdate(BaseModel):
    """Only value and notes can change; the airline/feature pair is the identity"""

    value: Optional[str] = Field(default=None, min_length=1, max_length=255)
    notes: Optional[str] = Field(default=None, max_length=1000)

    class Config:
        str_strip_whitespace = True


class Implementation(BaseModel):
    """Implementation schema for responses"""

    id: int
    airline_id: int
    feature_id: int
    value: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EnrichedImplementation(Implementation):
    """Implementation widened with denormalized airline and feature details"""

    airline_name: str
    airline_codes: str
    airline_provider: str
    airline_status: str
    feature_name: str
    feature_category: str
    feature_description: str


class MatrixRow(BaseModel):
    airline_id: int
    airline_name: str
    airline_codes: str
    cells: Dict[int, Optional[str]] = Field(
        ..., description="Implementation value keyed by feature id, null when not recorded"
    )


class ImplementationMatrix(BaseModel):
    """Airline x feature grid"""

    features: List[Feature]
    rows: List[MatrixRow]
    total_airlines: int
    total_features: int
    total_implementations: int
