from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1)
    timestamp: Optional[datetime] = None

    class Config:
        str_strip_whitespace = True


class ChatRequest(BaseModel):
    """Incoming chat message with optional prior turns"""

    message: str = Field(..., min_length=1, max_length=1000)
    conversation_history: List[ChatMessage] = Field(default=[], alias="conversationHistory")

    class Config:
        str_strip_whitespace = True
        populate_by_name = True


class QueryAnalysis(BaseModel):
    """Classifier verdict, surfaced for observability only"""

    query_type: str
    confidence: float = Field(..., ge=0, le=1)
    airlines: List[str] = []
    features: List[str] = []
    statuses: List[str] = []
    categories: List[str] = []
    providers: List[str] = []


class ChatResponse(BaseModel):
    message: str
    context: List[Dict[str, Any]]
    analysis: QueryAnalysis
    timestamp: datetime


class ExampleQueryGroup(BaseModel):
    category: str
    queries: List[str]
