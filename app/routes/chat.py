import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException
from openai import OpenAI
from sqlalchemy.orm import Session
from typing import List, Optional

from app.config import settings
from app.database import get_db
from app.schemas.chat import ChatRequest, ChatResponse, ExampleQueryGroup
from app.schemas.common import MessageResponse
from app.services.chat import EXAMPLE_QUERIES, ChatService, create_llm_client
from app.services.domain_store import SqlDomainStore
from app.services.errors import ChatServiceError
from app.services.query_parser import QueryParserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])

NOT_CONFIGURED = "AI chat service is not configured. Please set the LLM_API_KEY environment variable."


@lru_cache(maxsize=1)
def get_llm_client() -> OpenAI:
    return create_llm_client()


def get_chat_service(db: Session = Depends(get_db)) -> Optional[ChatService]:
    """None when no API key is configured"""
    if not settings.llm_api_key:
        return None
    return ChatService(QueryParserService(SqlDomainStore(db)), client=get_llm_client())


@router.post("", response_model=ChatResponse, description="Ask a question about the NDC data")
def send_message(
    payload: ChatRequest,
    chat_service: Optional[ChatService] = Depends(get_chat_service),
):
    """
    Answers a free-text question. The question is classified first and only
    the matching slice of airlines, features and implementations is sent to
    the model; that slice is returned as `context`.
    """
    if chat_service is None:
        raise HTTPException(status_code=503, detail=NOT_CONFIGURED)

    try:
        return chat_service.process_message(payload)
    except ChatServiceError as e:
        logger.error(f"Error processing chat message: {e}")
        raise HTTPException(
            status_code=500,
            detail="Failed to process your message. Please try again.",
        )


@router.get("/health", response_model=MessageResponse)
def chat_health(chat_service: Optional[ChatService] = Depends(get_chat_service)):
    if chat_service is None:
        raise HTTPException(status_code=503, detail="AI chat service is not configured")

    if not chat_service.test_connection():
        raise HTTPException(
            status_code=503, detail="AI chat service is not responding correctly"
        )

    return MessageResponse(message="AI chat service is available")


@router.get("/examples", response_model=List[ExampleQueryGroup])
async def get_examples():
    return EXAMPLE_QUERIES
