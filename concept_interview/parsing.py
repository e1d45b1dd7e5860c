"""
Parsing of structured model replies.

Models are asked to answer in JSON but often wrap the payload in a markdown
code fence or add a sentence around it. parse_structured_reply() strips that
wrapping and decodes the JSON; the parse_* helpers then check the shape each
gateway operation expects. Nothing here touches the network.
"""

import json
import re
from typing import Any

from .errors import MalformedResponse
from .schemas.conversation import AppConcept, Classification, KeyFeature, QuestionReply


_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)\n?\s*```", re.DOTALL)
_NEGATIONS = {"NOT", "NO", "ISN", "ISNT", "NEITHER", "NOR"}


def strip_code_fences(text: str) -> str:
    """Return the body of the first fenced block, or the trimmed text if there is none."""
    text = text.strip()
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    # An unterminated fence still shows up when the reply hits max_tokens
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
    return text.strip()


def _extract_json_span(text: str) -> str:
    """Cut the text down to the outermost JSON object or array."""
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return text
    start = min(starts)
    closer = "}" if text[start] == "{" else "]"
    end = text.rfind(closer)
    if end <= start:
        return text[start:]
    return text[start:end + 1]


def parse_structured_reply(text: str) -> Any:
    """
    Decode the JSON payload of a model reply.

    Raises:
        MalformedResponse: if the reply is empty or holds no valid JSON
    """
    if text is None or not text.strip():
        raise MalformedResponse("No content in AI response")

    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    candidate = _extract_json_span(cleaned)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"Reply is not valid JSON: {e}") from e


def _clean_labels(values: Any, field_name: str) -> list[str]:
    if not isinstance(values, list):
        raise MalformedResponse(f"'{field_name}' must be a list")
    labels = []
    for value in values:
        if not isinstance(value, str) or not value.strip():
            raise MalformedResponse(f"'{field_name}' must contain non-empty strings")
        labels.append(value.strip())
    return labels


def parse_question_reply(text: str, option_count: int = 5) -> QuestionReply:
    """Parse a {question, options} reply; options must number exactly option_count."""
    data = parse_structured_reply(text)
    if not isinstance(data, dict):
        raise MalformedResponse("Expected a JSON object with 'question' and 'options'")

    question = data.get("question")
    if not isinstance(question, str) or not question.strip():
        raise MalformedResponse("Reply is missing 'question'")

    options = _clean_labels(data.get("options"), "options")
    if len(options) != option_count:
        raise MalformedResponse(
            f"Expected {option_count} options, got {len(options)}"
        )

    return QuestionReply(question=question.strip(), options=options)


def parse_options_reply(text: str) -> list[str]:
    """Parse an {options} reply holding at least one option."""
    data = parse_structured_reply(text)
    if isinstance(data, list):
        data = {"options": data}
    if not isinstance(data, dict):
        raise MalformedResponse("Expected a JSON object with 'options'")

    options = _clean_labels(data.get("options"), "options")
    if not options:
        raise MalformedResponse("AI response does not contain valid options")
    return options


def parse_concepts_reply(
    text: str,
    concept_count: int = 3,
    feature_count: int = 3
) -> list[AppConcept]:
    """
    Parse the final concept synthesis reply.

    Accepts either {"concepts": [...]} or a bare list. Each concept needs a
    name, a description and exactly feature_count key features.
    """
    data = parse_structured_reply(text)
    if isinstance(data, dict):
        data = data.get("concepts", data.get("apps"))
    if not isinstance(data, list):
        raise MalformedResponse("Expected a list of app concepts")
    if len(data) != concept_count:
        raise MalformedResponse(f"Expected {concept_count} concepts, got {len(data)}")

    concepts = []
    for item in data:
        if not isinstance(item, dict):
            raise MalformedResponse("Each concept must be a JSON object")
        name = item.get("name")
        description = item.get("description")
        if not isinstance(name, str) or not name.strip():
            raise MalformedResponse("Concept is missing 'name'")
        if not isinstance(description, str) or not description.strip():
            raise MalformedResponse(f"Concept '{name}' is missing 'description'")

        raw_features = item.get("key_features", item.get("features"))
        if not isinstance(raw_features, list) or len(raw_features) != feature_count:
            raise MalformedResponse(
                f"Concept '{name}' must have exactly {feature_count} key features"
            )

        features = []
        for feature in raw_features:
            if isinstance(feature, dict):
                f_name = feature.get("name")
                f_desc = feature.get("description", "")
            else:
                f_name, f_desc = feature, ""
            if not isinstance(f_name, str) or not f_name.strip():
                raise MalformedResponse(f"Concept '{name}' has a feature without a name")
            if not isinstance(f_desc, str):
                raise MalformedResponse(f"Concept '{name}' has a bad feature description")
            features.append(KeyFeature(name=f_name.strip(), description=f_desc.strip()))

        concepts.append(AppConcept(
            name=name.strip(),
            description=description.strip(),
            key_features=features
        ))

    return concepts


def parse_classification(text: str) -> Classification:
    """
    Read a VALID / ABSTRACT / INVALID verdict from a reply.

    The reply must name exactly one verdict; a reply naming two, or negating
    the one it names ("not VALID"), is rejected as malformed.
    """
    if text is None or not text.strip():
        raise MalformedResponse("No content in classification reply")

    cleaned = strip_code_fences(text)
    if cleaned.startswith("{"):
        data = parse_structured_reply(cleaned)
        if isinstance(data, dict):
            cleaned = str(data.get("classification", ""))

    words = re.findall(r"[A-Za-z]+", cleaned.upper())
    verdicts = {word for word in words if word in Classification.__members__}
    if len(verdicts) != 1:
        raise MalformedResponse(f"Unrecognised classification: {text[:80]!r}")
    if _NEGATIONS.intersection(words):
        raise MalformedResponse(f"Negated classification: {text[:80]!r}")
    return Classification(verdicts.pop())
