"""Recovery of a ClassificationVerdict from raw model text.

The model is asked for schema-constrained JSON, but the reply can still carry
prose, markdown fences or a truncated tail. ``parse_verdict`` runs a small
pipeline (direct parse, then brace-slice fallback, then field validation) and
returns a tagged ``ParseOutcome`` instead of raising.
"""
import json
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ValidationError

from .exceptions import MAX_DETAIL_CHARS
from .schemas import ClassificationVerdict


class ParseFailure(str, Enum):
    EMPTY_OUTPUT = "empty_output"
    NO_JSON_OBJECT = "no_json_object"
    INVALID_JSON = "invalid_json"
    SCHEMA_VIOLATION = "schema_violation"


class ParseOutcome(BaseModel):
    verdict: Optional[ClassificationVerdict] = None
    failure: Optional[ParseFailure] = None
    reason: str = ""
    excerpt: str = ""

    @property
    def ok(self) -> bool:
        return self.verdict is not None


def excerpt(text: Optional[str], limit: int = MAX_DETAIL_CHARS) -> str:
    """Bound diagnostic text so error payloads never echo unbounded content."""
    return (text or "")[:limit]


def _failed(failure: ParseFailure, reason: str, text: Optional[str]) -> ParseOutcome:
    return ParseOutcome(failure=failure, reason=reason, excerpt=excerpt(text))


def _load_json(text: str) -> Tuple[Optional[Any], Optional[ParseFailure], str]:
    try:
        return json.loads(text), None, ""
    except json.JSONDecodeError:
        pass

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None, ParseFailure.NO_JSON_OBJECT, "no JSON object found in model output"

    try:
        return json.loads(text[start:end + 1]), None, ""
    except json.JSONDecodeError as e:
        return None, ParseFailure.INVALID_JSON, f"embedded JSON object did not parse: {e.msg}"


def _validation_reason(err: ValidationError) -> str:
    parts = []
    for item in err.errors():
        loc = ".".join(str(p) for p in item.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {item.get('msg')}")
    return "; ".join(parts)


def parse_verdict(text: Optional[str]) -> ParseOutcome:
    if text is None or not text.strip():
        return _failed(ParseFailure.EMPTY_OUTPUT, "model returned no text", text)

    data, failure, reason = _load_json(text.strip())
    if failure is not None:
        return _failed(failure, reason, text)

    if not isinstance(data, dict):
        return _failed(ParseFailure.SCHEMA_VIOLATION, "model output must be a JSON object", text)

    try:
        verdict = ClassificationVerdict.model_validate(data)
    except ValidationError as e:
        return _failed(ParseFailure.SCHEMA_VIOLATION, _validation_reason(e), text)

    return ParseOutcome(verdict=verdict)
