import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from openai import OpenAI, OpenAIError

from app.config import settings
from app.schemas.chat import ChatRequest, ChatResponse, QueryAnalysis
from app.services.errors import ChatServiceError
from app.services.prompt_builder import build_system_prompt
from app.services.query_parser import QueryEntities, QueryParserService

logger = logging.getLogger(__name__)

CONNECTION_PROBE = 'Hello, can you confirm you can respond? Just say "AI connection successful"'

EXAMPLE_QUERIES = [
    {
        "category": "Airline Features",
        "queries": [
            "Which airlines support dynamic pricing?",
            "Does American Airlines have seat selection?",
            "What features are available for United Airlines?",
        ],
    },
    {
        "category": "Feature Comparison",
        "queries": [
            "Compare baggage options across all airlines",
            "Which airlines offer pet transportation?",
            "Show me all airlines with unaccompanied minor support",
        ],
    },
    {
        "category": "Provider Information",
        "queries": [
            "List all airlines using Sabre provider",
            "What providers are used by European airlines?",
            "Compare features across Altea NDC airlines",
        ],
    },
    {
        "category": "Status Queries",
        "queries": [
            "Which features are in pilot status?",
            "Show production-ready airlines",
            "What features are not yet implemented?",
        ],
    },
]


def create_llm_client() -> OpenAI:
    """Client for the configured chat completion endpoint"""
    return OpenAI(
        api_key=settings.llm_api_key,
        base_url=settings.llm_base_url,
        timeout=settings.llm_timeout_seconds,
    )


def to_analysis(entities: QueryEntities) -> QueryAnalysis:
    return QueryAnalysis(
        query_type=entities.query_type.value,
        confidence=entities.confidence,
        airlines=list(entities.airlines),
        features=list(entities.features),
        statuses=list(entities.statuses),
        categories=list(entities.categories),
        providers=list(entities.providers),
    )


class ChatService:
    """Answers questions about the NDC data through a chat completion model"""

    def __init__(
        self,
        query_parser: QueryParserService,
        client: OpenAI,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ):
        self.query_parser = query_parser
        self.client = client
        self.model = model or settings.llm_model
        self.max_tokens = max_tokens or settings.llm_max_tokens

    def process_message(self, request: ChatRequest) -> ChatResponse:
        """
        Parse the question, build a narrowed data context and ask the model.

        Raises:
            ChatServiceError: When the completion call fails or returns nothing
        """
        entities = self.query_parser.parse_query(request.message)
        context = self.query_parser.build_context(entities)

        logger.info(
            f"Query analysis: {entities.query_type.value} "
            f"(confidence: {entities.confidence})"
        )
        logger.info(f"Context size: {len(context)} items")

        messages = [{"role": "system", "content": build_system_prompt(context)}]
        messages.extend(self._build_message_history(request))

        answer = self._complete(messages, self.max_tokens)
        if not answer:
            raise ChatServiceError("No response from the AI model")

        return ChatResponse(
            message=answer,
            context=context,
            analysis=to_analysis(entities),
            timestamp=datetime.now(timezone.utc),
        )

    def test_connection(self) -> bool:
        """Probe the completion API. Never raises."""
        try:
            answer = self._complete([{"role": "user", "content": CONNECTION_PROBE}], 100)
        except ChatServiceError:
            return False
        return bool(answer) and "successful" in answer.lower()

    def _complete(self, messages: List[Dict[str, str]], max_tokens: int) -> Optional[str]:
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=messages,
            )
        except OpenAIError as e:
            logger.error(f"Chat completion call failed: {e}")
            raise ChatServiceError("Failed to process message with AI") from e

        if not completion.choices:
            return None
        return completion.choices[0].message.content

    def _build_message_history(self, request: ChatRequest) -> List[Dict[str, str]]:
        messages = [
            {"role": message.role, "content": message.content}
            for message in request.conversation_history
        ]
        messages.append({"role": "user", "content": request.message})
        return messages
