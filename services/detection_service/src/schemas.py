from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictStr

Classification = Literal["AI_GENERATED", "HUMAN"]

class DetectRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    audio: StrictStr = Field(..., min_length=1, description="Base64 audio, optionally prefixed with a data-URL header")
    mimeType: Optional[StrictStr] = Field(default=None, description="Declared MIME type of the audio")
    language: Optional[StrictStr] = Field(default=None, description="Spoken language of the clip")

class NormalizedAudio(BaseModel):
    data: str = Field(..., description="Base64 payload with any data-URL prefix removed")
    raw: bytes = Field(..., description="Decoded audio bytes sent inline to the model")
    mime_type: str
    language: str

class ClassificationVerdict(BaseModel):
    model_config = ConfigDict(extra="ignore")

    classification: Classification
    confidence: float = Field(..., ge=0.0, le=1.0, strict=True)
    explanation: StrictStr

class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None
    details: Optional[str] = None
