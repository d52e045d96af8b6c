"""
Rule-based parsing of chat questions.

A question is mapped to a query intent plus the slice of airline, feature and
implementation data it is about, so the model only receives what it needs.

Matching is plain substring containment against fixed alias tables: no
stemming and no word boundaries, so "seat" also hits "unseated" and the two
letter airline codes hit inside ordinary words. Airlines and features added
later through the API are only recognised when their names contain one of
the canonical keys below.
"""
import logging
from dataclasses import dataclass, fields
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from app.config import settings
from app.schemas.airline import Airline
from app.schemas.feature import Feature
from app.schemas.implementation import EnrichedImplementation, Implementation
from app.services.domain_store import DomainStore

logger = logging.getLogger(__name__)


class QueryType(str, Enum):
    AIRLINE_FEATURES = "airline_features"  # "Does AA have seat selection?"
    FEATURE_AIRLINES = "feature_airlines"  # "Which airlines support dynamic pricing?"
    COMPARISON = "comparison"  # "Compare baggage options across airlines"
    STATUS_QUERY = "status_query"  # "What features are in pilot status?"
    PROVIDER_QUERY = "provider_query"  # "List Sabre airlines"
    GENERAL = "general"


AliasTable = Mapping[str, Tuple[str, ...]]

AIRLINE_ALIASES: AliasTable = MappingProxyType(
    {
        "american": ("aa", "american airlines", "american"),
        "delta": ("dl", "delta air lines", "delta airlines", "delta"),
        "united": ("ua", "united airlines", "united"),
        # One key covers the whole group's carrier codes
        "lufthansa": (
            "lh", "lufthansa group", "lufthansa", "austrian", "os",
            "brussels", "sn", "swiss", "lx",
        ),
        "british": ("ba", "british airways", "british"),
    }
)

FEATURE_ALIASES: AliasTable = MappingProxyType(
    {
        "dynamic pricing": ("dynamic pricing", "pricing", "price", "dynamic price", "fare pricing"),
        "seat selection": ("seat selection", "seat", "seats", "seating", "choose seat"),
        "baggage options": ("baggage", "bags", "luggage", "baggage options", "checked bags"),
        "unaccompanied minors": (
            "unaccompanied minors", "minors", "children", "kids", "unaccompanied", "minor",
        ),
        "pet transportation": ("pet", "pets", "animals", "pet transport", "pet travel"),
        "group bookings": ("group", "groups", "group booking", "bulk booking"),
        "multi-passenger booking": ("multi-passenger", "multiple passengers", "multiple people"),
        "online check-in": ("check-in", "checkin", "online checkin", "web checkin"),
        "corporate payment": ("corporate", "business payment", "corporate billing"),
    }
)

STATUS_ALIASES: AliasTable = MappingProxyType(
    {
        "yes": ("yes", "supported", "available", "support", "have", "offer"),
        "no": ("no", "not supported", "unavailable", "dont have", "not available"),
        "limited": ("limited", "partial", "some", "restricted"),
        "pilot": ("pilot", "testing", "test", "trial", "beta"),
        "production": ("production", "live", "active", "ready"),
        "development": ("development", "dev", "developing", "in progress"),
    }
)

CATEGORY_ALIASES: AliasTable = MappingProxyType(
    {
        "shopping": ("shopping", "search", "pricing", "fare"),
        "booking": ("booking", "reservation", "book"),
        "servicing": ("servicing", "service", "check-in", "checkin"),
        "payment": ("payment", "billing", "pay"),
        "global": ("global", "international"),
    }
)

PROVIDER_ALIASES: AliasTable = MappingProxyType(
    {
        "sabre": ("sabre",),
        "amadeus": ("amadeus",),
        "altea": ("altea", "altea ndc"),
        "accelya": ("accelya", "farelogix"),
    }
)


@dataclass(frozen=True)
class QueryEntities:
    """Entities found in one question, plus the classifier's verdict"""

    airlines: Tuple[str, ...] = ()
    features: Tuple[str, ...] = ()
    statuses: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()
    providers: Tuple[str, ...] = ()
    query_type: QueryType = QueryType.GENERAL
    confidence: float = 0.3

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, list):
                object.__setattr__(self, f.name, tuple(value))


def match_aliases(text: str, table: AliasTable) -> Tuple[str, ...]:
    """
    Return the canonical keys of `table` with at least one surface form
    contained in `text`. The first hit ends the scan for that key only.
    """
    found = []
    for key, surface_forms in table.items():
        for surface_form in surface_forms:
            if surface_form in text:
                found.append(key)
                break
    return tuple(found)


def extract_entities(text: str) -> QueryEntities:
    """Scan a question against every alias table. Intent is left at its default."""
    lowered = text.lower()
    return QueryEntities(
        airlines=match_aliases(lowered, AIRLINE_ALIASES),
        features=match_aliases(lowered, FEATURE_ALIASES),
        statuses=match_aliases(lowered, STATUS_ALIASES),
        categories=match_aliases(lowered, CATEGORY_ALIASES),
        providers=match_aliases(lowered, PROVIDER_ALIASES),
    )


IntentPredicate = Callable[[str, Sequence[str], Sequence[str]], bool]


def _mentions(*phrases: str) -> IntentPredicate:
    return lambda text, airlines, features: any(p in text for p in phrases)


# Ordered: the first matching rule decides. Phrasing cues come before the
# entity-count inferences.
INTENT_RULES: Tuple[Tuple[IntentPredicate, QueryType, float], ...] = (
    (_mentions("which airlines", "what airlines"), QueryType.FEATURE_AIRLINES, 0.9),
    (lambda text, airlines, features: "does" in text and len(airlines) > 0, QueryType.AIRLINE_FEATURES, 0.85),
    (_mentions("compare", "comparison"), QueryType.COMPARISON, 0.8),
    (_mentions("status", "pilot", "production"), QueryType.STATUS_QUERY, 0.8),
    (_mentions("provider", "sabre", "amadeus"), QueryType.PROVIDER_QUERY, 0.8),
    (lambda text, airlines, features: len(airlines) > 0 and len(features) > 0, QueryType.AIRLINE_FEATURES, 0.7),
    (lambda text, airlines, features: len(features) > 0 and len(airlines) == 0, QueryType.FEATURE_AIRLINES, 0.7),
    (lambda text, airlines, features: len(airlines) > 1, QueryType.COMPARISON, 0.6),
)

GENERAL_CONFIDENCE = 0.3


def classify_query(
    text: str, airlines: Sequence[str], features: Sequence[str]
) -> Tuple[QueryType, float]:
    """Classify an already lowercased question"""
    for predicate, query_type, confidence in INTENT_RULES:
        if predicate(text, airlines, features):
            return query_type, confidence
    return QueryType.GENERAL, GENERAL_CONFIDENCE


class QueryParserService:
    """Turns a question into entities and a bounded, enriched data context"""

    def __init__(
        self,
        store: DomainStore,
        general_sample_size: Optional[int] = None,
        comparison_sample_size: Optional[int] = None,
        fallback_size: Optional[int] = None,
    ):
        self.store = store
        self.general_sample_size = (
            settings.context_general_sample_size
            if general_sample_size is None
            else general_sample_size
        )
        self.comparison_sample_size = (
            settings.context_comparison_sample_size
            if comparison_sample_size is None
            else comparison_sample_size
        )
        self.fallback_size = (
            settings.context_fallback_size if fallback_size is None else fallback_size
        )

    def parse_query(self, query: str) -> QueryEntities:
        entities = extract_entities(query)
        query_type, confidence = classify_query(
            query.lower(), entities.airlines, entities.features
        )
        return QueryEntities(
            airlines=entities.airlines,
            features=entities.features,
            statuses=entities.statuses,
            categories=entities.categories,
            providers=entities.providers,
            query_type=query_type,
            confidence=confidence,
        )

    def build_context(self, entities: QueryEntities) -> List[Dict[str, Any]]:
        """
        Build the data context for a parsed question.

        Output order is fixed: enriched implementation rows, then one
        {"airlines": [...]} item, then one {"features": [...]} item.

        A failing store read is logged and answered with a small sample of
        airlines and features instead; this method does not raise.
        """
        airlines = None
        features = None

        try:
            airlines = self.store.get_all_airlines()
            features = self.store.get_all_features()

            airline_map = {a.id: a for a in airlines}
            feature_map = {f.id: f for f in features}

            relevant_airlines = self._relevant_airlines(airlines, entities.airlines)
            relevant_features = self._relevant_features(features, entities.features)

            implementations = self._select_implementations(
                entities, relevant_airlines, relevant_features
            )

            context: List[Dict[str, Any]] = [
                self._enrich(impl, airline_map, feature_map) for impl in implementations
            ]
            context.append({"airlines": [a.model_dump(mode="json") for a in relevant_airlines]})
            context.append({"features": [f.model_dump(mode="json") for f in relevant_features]})
            return context

        except Exception:
            logger.exception("Error building optimized context, using fallback sample")
            return self._fallback_context(airlines, features)

    def _relevant_airlines(
        self, airlines: List[Airline], keys: Sequence[str]
    ) -> List[Airline]:
        if not keys:
            return list(airlines)
        return [
            airline
            for airline in airlines
            if any(
                key in airline.name.lower() or key.upper() in airline.codes.upper()
                for key in keys
            )
        ]

    def _relevant_features(
        self, features: List[Feature], keys: Sequence[str]
    ) -> List[Feature]:
        if not keys:
            return list(features)
        return [
            feature
            for feature in features
            if any(
                key in feature.name.lower() or feature.name.lower() in key
                for key in keys
            )
        ]

    def _select_implementations(
        self,
        entities: QueryEntities,
        relevant_airlines: List[Airline],
        relevant_features: List[Feature],
    ) -> List[Implementation]:
        airline_ids = {a.id for a in relevant_airlines}
        feature_ids = {f.id for f in relevant_features}
        query_type = entities.query_type

        if query_type == QueryType.AIRLINE_FEATURES:
            if not airline_ids or not feature_ids:
                return []
            return [
                i
                for i in self.store.get_all_implementations()
                if i.airline_id in airline_ids and i.feature_id in feature_ids
            ]

        if query_type == QueryType.FEATURE_AIRLINES:
            if not feature_ids:
                return []
            return [
                i for i in self.store.get_all_implementations() if i.feature_id in feature_ids
            ]

        if query_type == QueryType.COMPARISON:
            implementations = self.store.get_all_implementations()
            if feature_ids:
                return [i for i in implementations if i.feature_id in feature_ids]
            if airline_ids:
                return [i for i in implementations if i.airline_id in airline_ids]
            return implementations[: self.comparison_sample_size]

        if query_type == QueryType.STATUS_QUERY:
            if not entities.statuses:
                return []
            return [
                i
                for i in self.store.get_all_implementations()
                if any(status in i.value.lower() for status in entities.statuses)
            ]

        if query_type == QueryType.PROVIDER_QUERY:
            provider_airline_ids = {
                a.id
                for a in relevant_airlines
                if any(p in a.provider.lower() for p in entities.providers)
            }
            if not provider_airline_ids:
                return []
            return [
                i
                for i in self.store.get_all_implementations()
                if i.airline_id in provider_airline_ids
            ]

        return self.store.get_all_implementations()[: self.general_sample_size]

    def _enrich(
        self,
        implementation: Implementation,
        airline_map: Dict[int, Airline],
        feature_map: Dict[int, Feature],
    ) -> Dict[str, Any]:
        airline = airline_map.get(implementation.airline_id)
        feature = feature_map.get(implementation.feature_id)

        enriched = EnrichedImplementation(
            **implementation.model_dump(),
            airline_name=(
                airline.name if airline else f"Unknown Airline (ID: {implementation.airline_id})"
            ),
            airline_codes=airline.codes if airline else "Unknown",
            airline_provider=airline.provider if airline else "Unknown",
            airline_status=airline.status.value if airline else "Unknown",
            feature_name=(
                feature.name if feature else f"Unknown Feature (ID: {implementation.feature_id})"
            ),
            feature_category=feature.category.value if feature else "Unknown",
            feature_description=(feature.description if feature else None) or "No description",
        )
        return enriched.model_dump(mode="json")

    def _fallback_context(
        self, airlines: Optional[List[Airline]], features: Optional[List[Feature]]
    ) -> List[Dict[str, Any]]:
        if airlines is None:
            airlines = self._read_or_empty(self.store.get_all_airlines)
        if features is None:
            features = self._read_or_empty(self.store.get_all_features)

        limit = self.fallback_size
        return [
            {"airlines": [a.model_dump(mode="json") for a in airlines[:limit]]},
            {"features": [f.model_dump(mode="json") for f in features[:limit]]},
        ]

    def _read_or_empty(self, read: Callable[[], List[Any]]) -> List[Any]:
        try:
            return read()
        except Exception:
            logger.exception("Fallback context read failed, using empty reference data")
            return []
