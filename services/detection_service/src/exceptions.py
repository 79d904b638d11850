MAX_DETAIL_CHARS = 500


class DetectionError(Exception):
    status_code = 500
    error = "Internal Server Error"

    def body(self) -> dict:
        return {"error": self.error, "details": str(self)[:MAX_DETAIL_CHARS]}


class RequestRejected(DetectionError):
    """Raised by the request gate before any provider call is made."""

    def body(self) -> dict:
        return {"error": self.error, "message": str(self)}


class MethodNotAllowed(RequestRejected):
    status_code = 405
    error = "Method Not Allowed. Use POST."

    def body(self) -> dict:
        return {"error": self.error}


class ServerMisconfigured(RequestRejected):
    """Operator fault: a required secret is not configured."""
    status_code = 500
    error = "Server misconfigured"


class Unauthorized(RequestRejected):
    status_code = 401
    error = "Unauthorized"


class BadRequest(RequestRejected):
    status_code = 400
    error = "Bad Request"


class RetryableError(DetectionError):
    """Temporary: provider quota exhaustion or rate limiting."""
    pass


class PermanentError(DetectionError):
    """Won't improve with retry: provider failure or unusable model output."""
    pass


class ProviderBusy(RetryableError):
    status_code = 429
    error = "Service busy. Please try again in a few seconds."


class ModelOutputInvalid(PermanentError):
    error = "Invalid model output"


class ProviderError(PermanentError):
    error = "Internal Server Error"
