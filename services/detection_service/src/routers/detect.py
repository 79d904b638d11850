from typing import Optional

from anyio import to_thread
from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse

from ..config import Settings, get_settings
from ..exceptions import DetectionError, ProviderError, RequestRejected, RetryableError
from ..gate import admit
from ..logging import jlog
from ..schemas import ClassificationVerdict, ErrorResponse
from ..service import classify_audio

router = APIRouter()

DETECT_PATH = "/detect"

def error_response(err: DetectionError) -> JSONResponse:
    return JSONResponse(status_code=err.status_code, content=err.body())

@router.post(
    DETECT_PATH,
    response_model=ClassificationVerdict,
    summary="Classify an audio clip as AI_GENERATED or HUMAN",
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def detect(
    request: Request,
    x_api_key: Optional[str] = Header(default=None),
    x_correlation_id: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
):
    try:
        payload = await admit(request, x_api_key, settings)
    except RequestRejected as e:
        jlog(event="detect_rejected", status=e.status_code, error=e.error, correlation_id=x_correlation_id)
        return error_response(e)

    try:
        # Offload the blocking provider call to a worker thread
        return await to_thread.run_sync(classify_audio, payload, settings, x_correlation_id)
    except DetectionError as e:
        jlog(
            event="detect_failed",
            retryable=isinstance(e, RetryableError),
            status=e.status_code,
            error=str(e),
            correlation_id=x_correlation_id,
        )
        return error_response(e)
    except Exception as e:
        jlog(event="detect_failed_unexpected", severity="ERROR", error=str(e), correlation_id=x_correlation_id)
        return error_response(ProviderError(str(e)))
