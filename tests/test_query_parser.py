import logging

import pytest

from app.schemas.implementation import Implementation
from app.services.query_parser import (
    AIRLINE_ALIASES,
    FEATURE_ALIASES,
    PROVIDER_ALIASES,
    QueryEntities,
    QueryParserService,
    QueryType,
    classify_query,
    extract_entities,
    match_aliases,
)


def implementation_rows(context):
    return [item for item in context if "airline_id" in item]


def marker(context, key):
    return next(item[key] for item in context if key in item)


# Entity extraction


def test_extracts_airline_code_and_feature():
    entities = extract_entities("Does AA have seat selection?")

    assert entities.airlines == ("american",)
    assert entities.features == ("seat selection",)
    assert "yes" in entities.statuses


def test_extraction_is_case_insensitive():
    assert extract_entities("DYNAMIC PRICING").features == ("dynamic pricing",)


def test_group_member_codes_resolve_to_lufthansa():
    assert extract_entities("What about SN and LX?").airlines == ("lufthansa",)


def test_each_key_reported_once_in_table_order():
    entities = extract_entities("compare delta and united")

    assert set(entities.airlines) == {"delta", "united"}
    assert entities.airlines == tuple(k for k in AIRLINE_ALIASES if k in entities.airlines)


def test_provider_aliases():
    entities = extract_entities("Which carriers use Farelogix or Altea NDC?")

    assert set(entities.providers) == {"altea", "accelya"}


def test_substring_matches_inside_words():
    assert "seat selection" in extract_entities("they were unseated").features


def test_nothing_found():
    entities = extract_entities("hello")

    assert entities.airlines == ()
    assert entities.features == ()
    assert entities.statuses == ()
    assert entities.categories == ()
    assert entities.providers == ()


def test_empty_text():
    entities = extract_entities("")

    assert entities == QueryEntities()


@pytest.mark.parametrize(
    "text",
    [
        "Which airlines support dynamic pricing?",
        "compare seat selection seat map seating for AA and American",
        "pets and animals and dog travel",
    ],
)
def test_match_results_are_unique_canonical_keys(text):
    for table in (AIRLINE_ALIASES, FEATURE_ALIASES, PROVIDER_ALIASES):
        found = match_aliases(text.lower(), table)
        assert len(found) == len(set(found))
        assert set(found) <= set(table)


def test_alias_tables_are_read_only():
    with pytest.raises(TypeError):
        AIRLINE_ALIASES["iberia"] = ("ib",)


def test_entities_are_frozen_and_lists_become_tuples():
    entities = QueryEntities(airlines=["delta"], features=["pet transportation"])

    assert entities.airlines == ("delta",)
    assert entities.features == ("pet transportation",)
    with pytest.raises(AttributeError):
        entities.airlines = ("united",)


# Intent classification


@pytest.mark.parametrize(
    "question, expected_type, expected_confidence",
    [
        ("Which airlines support dynamic pricing?", QueryType.FEATURE_AIRLINES, 0.9),
        ("What airlines have American-style pricing?", QueryType.FEATURE_AIRLINES, 0.9),
        ("Does AA have seat selection?", QueryType.AIRLINE_FEATURES, 0.85),
        ("Compare baggage options", QueryType.COMPARISON, 0.8),
        ("What features are in pilot status?", QueryType.STATUS_QUERY, 0.8),
        ("List Sabre airlines", QueryType.PROVIDER_QUERY, 0.8),
        ("does it work", QueryType.GENERAL, 0.3),
    ],
)
def test_classifies_phrasing(store, question, expected_type, expected_confidence):
    entities = QueryParserService(store).parse_query(question)

    assert entities.query_type == expected_type
    assert entities.confidence == expected_confidence


@pytest.mark.parametrize(
    "airlines, features, expected_type, expected_confidence",
    [
        (["american"], ["seat selection"], QueryType.AIRLINE_FEATURES, 0.7),
        ([], ["baggage options"], QueryType.FEATURE_AIRLINES, 0.7),
        (["delta", "united"], [], QueryType.COMPARISON, 0.6),
        (["delta"], [], QueryType.GENERAL, 0.3),
        ([], [], QueryType.GENERAL, 0.3),
    ],
)
def test_classifies_by_entity_counts(airlines, features, expected_type, expected_confidence):
    assert classify_query("tell me about it", airlines, features) == (
        expected_type,
        expected_confidence,
    )


def test_earlier_rule_wins():
    assert classify_query("does delta compare", ["delta"], []) == (
        QueryType.AIRLINE_FEATURES,
        0.85,
    )
    assert classify_query("which airlines compare", [], []) == (
        QueryType.FEATURE_AIRLINES,
        0.9,
    )


def test_does_without_airline_falls_through():
    assert classify_query("does it compare", [], []) == (QueryType.COMPARISON, 0.8)


def test_parse_query_keeps_extracted_entities(store):
    entities = QueryParserService(store).parse_query("Does Delta offer pet travel?")

    assert entities.airlines == ("delta",)
    assert entities.features == ("pet transportation",)
    assert entities.query_type == QueryType.AIRLINE_FEATURES


def test_parse_query_does_not_touch_the_store(store):
    QueryParserService(store).parse_query("Which airlines support dynamic pricing?")

    assert store.reads == []


# Context building


def test_airline_features_context(store):
    entities = QueryEntities(
        airlines=["american"],
        features=["seat selection"],
        query_type=QueryType.AIRLINE_FEATURES,
    )

    context = QueryParserService(store).build_context(entities)

    assert len(context) == 3
    row = context[0]
    assert row["airline_id"] == 1
    assert row["feature_id"] == 2
    assert row["value"] == "Yes"
    assert row["airline_name"] == "American Airlines"
    assert row["airline_codes"] == "AA"
    assert row["airline_provider"] == "Sabre"
    assert row["airline_status"] == "Production"
    assert row["feature_name"] == "Seat selection"
    assert row["feature_category"] == "Shopping"
    assert row["feature_description"] == "Ability to select specific seats during booking"
    assert [a["name"] for a in context[1]["airlines"]] == ["American Airlines"]
    assert [f["name"] for f in context[2]["features"]] == ["Seat selection"]


def test_airline_features_without_matching_feature_has_no_rows(store):
    entities = QueryEntities(
        airlines=["american"],
        features=["lounge access"],
        query_type=QueryType.AIRLINE_FEATURES,
    )

    context = QueryParserService(store).build_context(entities)

    assert implementation_rows(context) == []
    assert [a["name"] for a in marker(context, "airlines")] == ["American Airlines"]
    assert marker(context, "features") == []
    assert "implementations" not in store.reads


def test_feature_airlines_context(store):
    entities = QueryEntities(
        features=["dynamic pricing"], query_type=QueryType.FEATURE_AIRLINES
    )

    context = QueryParserService(store).build_context(entities)
    rows = implementation_rows(context)

    assert len(rows) == 5
    assert {r["feature_name"] for r in rows} == {"Dynamic pricing"}
    assert len(marker(context, "airlines")) == 5
    assert [f["name"] for f in marker(context, "features")] == ["Dynamic pricing"]


def without_reference_data(store, implementation_count):
    """Empty airline and feature tables; implementations that point nowhere"""
    store.airlines = []
    store.features = []
    store.implementations = [
        Implementation(id=i, airline_id=100 + i, feature_id=200 + i, value="Yes")
        for i in range(1, implementation_count + 1)
    ]
    return store


def test_feature_airlines_without_features_covers_every_feature(store):
    entities = QueryEntities(query_type=QueryType.FEATURE_AIRLINES)

    context = QueryParserService(store).build_context(entities)

    assert len(implementation_rows(context)) == 25
    assert len(marker(context, "features")) == 9


def test_feature_airlines_with_empty_feature_table_has_no_rows(store):
    without_reference_data(store, 3)
    entities = QueryEntities(query_type=QueryType.FEATURE_AIRLINES)

    context = QueryParserService(store).build_context(entities)

    assert context == [{"airlines": []}, {"features": []}]
    assert "implementations" not in store.reads


def test_comparison_without_entities_covers_every_feature(store):
    entities = QueryEntities(query_type=QueryType.COMPARISON)

    rows = implementation_rows(QueryParserService(store).build_context(entities))

    assert [r["id"] for r in rows] == list(range(1, 26))


def test_comparison_without_reference_data_is_sampled(store):
    without_reference_data(store, 20)
    entities = QueryEntities(query_type=QueryType.COMPARISON)

    rows = implementation_rows(QueryParserService(store).build_context(entities))

    assert [r["id"] for r in rows] == list(range(1, 16))
    assert rows[0]["airline_name"] == "Unknown Airline (ID: 101)"


def test_comparison_with_airlines_still_filters_by_features(store):
    entities = QueryEntities(airlines=["delta", "united"], query_type=QueryType.COMPARISON)

    rows = implementation_rows(QueryParserService(store).build_context(entities))

    assert len(rows) == 25


def test_comparison_by_airlines_when_no_features_exist(store):
    store.features = []
    entities = QueryEntities(airlines=["delta", "united"], query_type=QueryType.COMPARISON)

    rows = implementation_rows(QueryParserService(store).build_context(entities))

    assert len(rows) == 10
    assert {r["airline_name"] for r in rows} == {"Delta Air Lines", "United Airlines"}


def test_comparison_prefers_features(store):
    entities = QueryEntities(
        airlines=["delta"],
        features=["baggage options"],
        query_type=QueryType.COMPARISON,
    )

    rows = implementation_rows(QueryParserService(store).build_context(entities))

    assert len(rows) == 5
    assert {r["feature_name"] for r in rows} == {"Baggage options"}


@pytest.mark.parametrize(
    "statuses, expected_ids",
    [
        (["limited"], [9, 15]),
        (["pilot"], [16]),
        ([], []),
    ],
)
def test_status_query(store, statuses, expected_ids):
    entities = QueryEntities(statuses=statuses, query_type=QueryType.STATUS_QUERY)

    rows = implementation_rows(QueryParserService(store).build_context(entities))

    assert [r["id"] for r in rows] == expected_ids


@pytest.mark.parametrize(
    "providers, expected_airlines",
    [
        (["sabre"], {"American Airlines", "United Airlines"}),
        (["altea"], {"Lufthansa Group"}),
        (["accelya"], {"Delta Air Lines"}),
        ([], set()),
    ],
)
def test_provider_query(store, providers, expected_airlines):
    entities = QueryEntities(providers=providers, query_type=QueryType.PROVIDER_QUERY)

    rows = implementation_rows(QueryParserService(store).build_context(entities))

    assert {r["airline_name"] for r in rows} == expected_airlines
    assert len(rows) == 5 * len(expected_airlines)


def test_general_query_is_sampled(store):
    context = QueryParserService(store).build_context(QueryEntities())
    rows = implementation_rows(context)

    assert [r["id"] for r in rows] == list(range(1, 11))
    assert len(marker(context, "airlines")) == 5
    assert len(marker(context, "features")) == 9


def test_sample_sizes_are_configurable(store):
    without_reference_data(store, 20)
    service = QueryParserService(store, general_sample_size=3, comparison_sample_size=4)

    general = implementation_rows(service.build_context(QueryEntities()))
    comparison = implementation_rows(
        service.build_context(QueryEntities(query_type=QueryType.COMPARISON))
    )

    assert len(general) == 3
    assert len(comparison) == 4


def test_markers_follow_implementation_rows(store):
    context = QueryParserService(store).build_context(QueryEntities())

    assert "airlines" in context[-2]
    assert "features" in context[-1]
    assert all("airline_id" in item for item in context[:-2])


def test_airline_matched_by_code(store):
    entities = QueryEntities(
        airlines=["lx"],
        features=["dynamic pricing"],
        query_type=QueryType.AIRLINE_FEATURES,
    )

    context = QueryParserService(store).build_context(entities)

    assert [a["name"] for a in marker(context, "airlines")] == ["Lufthansa Group"]
    assert [r["value"] for r in implementation_rows(context)] == ["Yes"]


def test_feature_matched_when_key_contains_name(store):
    entities = QueryEntities(
        features=["online check-in service"], query_type=QueryType.FEATURE_AIRLINES
    )

    context = QueryParserService(store).build_context(entities)

    assert [f["name"] for f in marker(context, "features")] == ["Online check-in"]


def test_unknown_references_get_placeholders(store):
    store.implementations = [
        Implementation(id=99, airline_id=4242, feature_id=9999, value="Yes")
    ]

    rows = implementation_rows(QueryParserService(store).build_context(QueryEntities()))

    assert rows == [
        {
            "id": 99,
            "airline_id": 4242,
            "feature_id": 9999,
            "value": "Yes",
            "notes": None,
            "created_at": None,
            "updated_at": None,
            "airline_name": "Unknown Airline (ID: 4242)",
            "airline_codes": "Unknown",
            "airline_provider": "Unknown",
            "airline_status": "Unknown",
            "feature_name": "Unknown Feature (ID: 9999)",
            "feature_category": "Unknown",
            "feature_description": "No description",
        }
    ]


def test_missing_description_is_filled(store):
    feature = next(f for f in store.features if f.name == "Corporate payment")
    store.features = [
        f.model_copy(update={"description": None}) if f is feature else f
        for f in store.features
    ]
    store.implementations = [
        Implementation(id=1, airline_id=1, feature_id=feature.id, value="No")
    ]

    rows = implementation_rows(QueryParserService(store).build_context(QueryEntities()))

    assert rows[0]["feature_description"] == "No description"


def test_context_is_repeatable(store):
    service = QueryParserService(store)
    entities = service.parse_query("Compare baggage options across all airlines")

    assert service.build_context(entities) == service.build_context(entities)


# Fallback


def test_failed_implementation_read_falls_back(make_store, caplog):
    store = make_store(fail_on={"implementations"})
    entities = QueryEntities(query_type=QueryType.COMPARISON)

    with caplog.at_level(logging.ERROR):
        context = QueryParserService(store).build_context(entities)

    assert len(context) == 2
    assert [a["name"] for a in context[0]["airlines"]] == [
        "American Airlines",
        "British Airways",
        "Delta Air Lines",
        "Lufthansa Group",
        "United Airlines",
    ]
    assert [f["name"] for f in context[1]["features"]] == [
        "Group bookings",
        "Multi-passenger booking",
        "Pet transportation",
        "Unaccompanied minors",
        "Corporate payment",
    ]
    assert "fallback" in caplog.text


def test_fallback_reads_each_table_independently(make_store):
    store = make_store(fail_on={"airlines"})

    context = QueryParserService(store).build_context(QueryEntities())

    assert context[0] == {"airlines": []}
    assert len(context[1]["features"]) == 5


def test_fallback_when_every_read_fails(make_store):
    store = make_store(fail_on={"airlines", "features", "implementations"})

    context = QueryParserService(store).build_context(QueryEntities())

    assert context == [{"airlines": []}, {"features": []}]


def test_fallback_size_is_configurable(make_store):
    store = make_store(fail_on={"implementations"})

    context = QueryParserService(store, fallback_size=2).build_context(QueryEntities())

    assert len(context[0]["airlines"]) == 2
    assert len(context[1]["features"]) == 2
