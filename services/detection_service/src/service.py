import base64
import binascii
import time
from typing import Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from opentelemetry import trace

from .config import Settings
from .exceptions import (
    BadRequest,
    DetectionError,
    ModelOutputInvalid,
    ProviderBusy,
    ProviderError,
    ServerMisconfigured,
)
from .logging import hash_preview, jlog
from .parsing import excerpt, parse_verdict
from .prompt import RESPONSE_SCHEMA, build_prompt
from .schemas import ClassificationVerdict, DetectRequest, NormalizedAudio

tracer = trace.get_tracer("detection.classify")

DATA_URL_MARKER = "base64,"
URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")
EXTRA_OUTPUT_TOKENS = 4096
BUSY_MARKERS = ("429", "quota", "rate limit", "resource_exhausted")

_CLIENT: Optional[genai.Client] = None

def _make_client(settings: Settings) -> genai.Client:
    global _CLIENT
    if _CLIENT is None:
        if not settings.gemini_api_key:
            raise ServerMisconfigured("GEMINI_API_KEY not set.")
        _CLIENT = genai.Client(
            api_key=settings.gemini_api_key,
            http_options=types.HttpOptions(timeout=int(settings.gemini_timeout_s * 1000)),
        )
    return _CLIENT

def strip_data_url(audio: str) -> str:
    idx = audio.find(DATA_URL_MARKER)
    if idx == -1:
        return audio
    return audio[idx + len(DATA_URL_MARKER):]

def decode_base64(data: str) -> bytes:
    """Decode standard or URL-safe base64, with or without padding or line wraps."""
    compact = "".join(data.split()).translate(URLSAFE_TO_STANDARD)
    compact += "=" * (-len(compact) % 4)
    return base64.b64decode(compact, validate=True)

def normalize_audio(req: DetectRequest, settings: Settings) -> NormalizedAudio:
    data = strip_data_url(req.audio).strip()
    if not data:
        raise BadRequest("'audio' is empty after removing the data-URL prefix.")
    try:
        raw = decode_base64(data)
    except (binascii.Error, ValueError) as e:
        raise BadRequest(f"'audio' is not valid base64: {e}") from e
    if not raw:
        raise BadRequest("'audio' decodes to an empty payload.")

    return NormalizedAudio(
        data=data,
        raw=raw,
        mime_type=req.mimeType or settings.default_mime_type,
        language=req.language or settings.default_language,
    )

def build_generation_config(settings: Settings) -> types.GenerateContentConfig:
    budget = settings.detection_thinking_budget
    return types.GenerateContentConfig(
        temperature=settings.detection_temperature,
        thinking_config=types.ThinkingConfig(thinking_budget=budget),
        max_output_tokens=budget + EXTRA_OUTPUT_TOKENS,
        response_mime_type="application/json",
        response_schema=RESPONSE_SCHEMA,
    )

def classify_provider_error(e: Exception) -> DetectionError:
    """
    Map a provider failure to ProviderBusy (retry shortly) or ProviderError.
    Structured code/status wins; substring markers cover clients that only
    surface a message.
    """
    if isinstance(e, genai_errors.APIError):
        status = (getattr(e, "status", None) or "").upper()
        if getattr(e, "code", None) == 429 or status == "RESOURCE_EXHAUSTED":
            return ProviderBusy(excerpt(str(e)))

    msg = str(e)
    lowered = msg.lower()
    if any(marker in lowered for marker in BUSY_MARKERS):
        return ProviderBusy(excerpt(msg))
    return ProviderError(excerpt(msg))

def classify_audio(
    req: DetectRequest,
    settings: Settings,
    correlation_id: Optional[str] = None,
) -> ClassificationVerdict:
    audio = normalize_audio(req, settings)
    model = settings.detection_model

    with tracer.start_as_current_span("VoiceClassification") as span:
        span.set_attribute("operation", "voice_classification")
        span.set_attribute("model_name", model)
        span.set_attribute("mime_type", audio.mime_type)
        span.set_attribute("language", audio.language)
        span.set_attribute("audio_preview", hash_preview(audio.data))
        span.set_attribute("correlation_id", correlation_id or "")

        client = _make_client(settings)
        contents = [
            types.Part.from_bytes(data=audio.raw, mime_type=audio.mime_type),
            build_prompt(audio.language),
        ]

        start = time.time()
        try:
            response = client.models.generate_content(
                model=model,
                contents=contents,
                config=build_generation_config(settings),
            )
        except Exception as e:
            err = classify_provider_error(e)
            span.set_attribute("provider_error", type(err).__name__)
            jlog(
                event="detect_model_error",
                severity="WARNING",
                correlation_id=correlation_id,
                model_name=model,
                latency_ms=int((time.time() - start) * 1000),
                error_class=type(err).__name__,
                error=excerpt(str(e)),
            )
            raise err from e
        elapsed = time.time() - start

        text = getattr(response, "text", None)
        usage = getattr(response, "usage_metadata", None)
        jlog(
            event="detect_model_response",
            correlation_id=correlation_id,
            model_name=model,
            latency_ms=int(elapsed * 1000),
            audio=hash_preview(audio.data),
            response_preview=hash_preview(text or ""),
            prompt_tokens=getattr(usage, "prompt_token_count", None),
            completion_tokens=getattr(usage, "candidates_token_count", None),
            total_tokens=getattr(usage, "total_token_count", None),
        )

        outcome = parse_verdict(text)
        verdict = outcome.verdict
        if verdict is None:
            failure = outcome.failure.value if outcome.failure else "unknown"
            span.set_attribute("parse_failure", failure)
            jlog(
                event="detect_output_invalid",
                severity="WARNING",
                correlation_id=correlation_id,
                failure=failure,
                reason=outcome.reason,
            )
            raise ModelOutputInvalid(f"{outcome.reason}. Raw output: {outcome.excerpt}")

        span.set_attribute("classification", verdict.classification)
        jlog(
            event="detect_ok",
            correlation_id=correlation_id,
            classification=verdict.classification,
            confidence=verdict.confidence,
        )
        return verdict
