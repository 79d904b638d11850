import json
from typing import Optional

from fastapi import Request
from pydantic import ValidationError

from .config import Settings
from .exceptions import BadRequest, ServerMisconfigured, Unauthorized
from .schemas import DetectRequest

EXPECTED_BODY = '{"audio": "<base64 or data URL>", "mimeType": "audio/mp3", "language": "English"}'
MISSING_AUDIO = f"Missing 'audio' field in request body (Base64 required). Expected JSON body: {EXPECTED_BODY}"


def check_configuration(settings: Settings) -> None:
    missing = settings.missing_secrets()
    if missing:
        raise ServerMisconfigured(f"{', '.join(missing)} not set.")


def authenticate(api_key: Optional[str], settings: Settings) -> None:
    if not api_key or api_key != settings.submission_api_key:
        raise Unauthorized("Invalid or missing 'x-api-key' header.")


def parse_payload(raw: bytes) -> DetectRequest:
    if not raw or not raw.strip():
        raise BadRequest(MISSING_AUDIO)
    try:
        body = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BadRequest(f"Request body must be JSON. Expected JSON body: {EXPECTED_BODY}")

    if not isinstance(body, dict) or not body.get("audio"):
        raise BadRequest(MISSING_AUDIO)

    try:
        return DetectRequest.model_validate(body)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise BadRequest(f"Invalid field(s) {', '.join(fields)}. Expected JSON body: {EXPECTED_BODY}") from e


async def admit(request: Request, api_key: Optional[str], settings: Settings) -> DetectRequest:
    """
    Reject cheaply before the provider is ever called:
      misconfigured secrets -> 500, bad credential -> 401, bad body -> 400.
    The body is only read once the caller is authenticated.
    """
    check_configuration(settings)
    authenticate(api_key, settings)
    return parse_payload(await request.body())
