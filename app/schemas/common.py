from pydantic import BaseModel
from typing import List


class MessageResponse(BaseModel):
    """Plain acknowledgement"""

    message: str


class FileUploadResponse(BaseModel):
    """File upload response"""

    filename: str
    records_processed: int
    records_created: int
    records_updated: int
    errors: List[str] = []
