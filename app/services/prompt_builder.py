from typing import Any, Dict, List

BASE_PROMPT = """You are an AI assistant specialized in NDC (New Distribution Capability) airline features and implementations.

Your role is to help users understand and query information about:
- Airlines and their NDC capabilities
- Features available through NDC
- Implementation status of features across different airlines
- Technical details about NDC providers and systems

The data below has been filtered to match the user's question. Each implementation record carries the airline and feature names next to their IDs.

RESPONSE STYLE:
- Be concise and direct, answer the specific question asked
- Lead with the answer, then add brief supporting details only if needed
- Keep simple answers to one or two sentences
- Give longer explanations only for complex questions or comparisons

When answering questions:
1. Use airline names rather than IDs whenever they are available
2. Be accurate and specific based on the provided data
3. If the data has no information about an airline or feature, say so clearly
4. For questions about features "not supported", focus on airlines with a "No" value

Filtered data for this question:"""

CLOSING_INSTRUCTION = "\n\nPlease answer the user's question based on this data."


def is_implementation(item: Dict[str, Any]) -> bool:
    return "airline_id" in item and "feature_id" in item


def _format_airlines(airlines: List[Dict[str, Any]]) -> str:
    lines = [
        f"- {a['name']} ({a['codes']}) - Provider: {a['provider']}, Status: {a['status']}"
        for a in airlines
    ]
    return "\n\nAIRLINES:\n" + "".join(line + "\n" for line in lines)


def _format_features(features: List[Dict[str, Any]]) -> str:
    lines = [
        f"- {f['name']} ({f['category']}): {f.get('description') or 'No description'}"
        for f in features
    ]
    return "\n\nFEATURES:\n" + "".join(line + "\n" for line in lines)


def _format_implementation(item: Dict[str, Any]) -> str:
    airline_name = item.get("airline_name") or f"Airline ID {item['airline_id']}"
    feature_name = item.get("feature_name") or f"Feature ID {item['feature_id']}"
    airline_codes = f" ({item['airline_codes']})" if item.get("airline_codes") else ""

    line = f"- {airline_name}{airline_codes} - {feature_name}: {item['value']}"
    if item.get("notes"):
        line += f" ({item['notes']})"
    return line + "\n"


def serialize_context(context: List[Dict[str, Any]]) -> str:
    """
    Render a context list into AIRLINES / FEATURES / IMPLEMENTATIONS sections.

    Items are told apart by shape: an `airlines` key, a `features` key, or
    both `airline_id` and `feature_id`. Anything else is skipped.
    """
    text = ""
    for index, item in enumerate(context):
        if "airlines" in item:
            text += _format_airlines(item["airlines"])
        elif "features" in item:
            text += _format_features(item["features"])
        elif is_implementation(item):
            if index == 0 or not is_implementation(context[index - 1]):
                text += "\n\nIMPLEMENTATIONS:\n"
            text += _format_implementation(item)
    return text


def build_system_prompt(context: List[Dict[str, Any]]) -> str:
    return BASE_PROMPT + serialize_context(context) + CLOSING_INSTRUCTION
