"""Error taxonomy shared by the clients, the sample loader and the pipeline."""
from src.constants import (
    MSG_ERR_EMPTY,
    MSG_ERR_REMOTE,
    MSG_ERR_SAMPLE,
    MSG_ERR_STATUS,
    MSG_ERR_TRANSPORT,
    MSG_ERR_UNEXPECTED,
)


class CaptionerError(Exception):
    """Base for every error the analysis flow reports to the user."""


class ValidationError(CaptionerError):
    """A required input is missing. Raised before any network call."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class AuthOrTransportError(CaptionerError):
    """Non-success HTTP status, or no response at all (status_code is None)."""

    def __init__(self, service: str, status_code: int | None, body: str) -> None:
        match status_code:
            case None:
                message = MSG_ERR_TRANSPORT % (service, body)
            case code:
                message = MSG_ERR_STATUS % (service, code, body)
        super().__init__(message)
        self.service = service
        self.status_code = status_code
        self.body = body


class RemoteError(CaptionerError):
    """The service answered with an explicit error field."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(MSG_ERR_REMOTE % (service, message))
        self.service = service
        self.remote_message = message


class UnexpectedResponseError(CaptionerError):

    def __init__(self, service: str) -> None:
        super().__init__(MSG_ERR_UNEXPECTED % service)
        self.service = service


class EmptyResponseError(CaptionerError):

    def __init__(self, service: str) -> None:
        super().__init__(MSG_ERR_EMPTY % service)
        self.service = service


class SampleLoadError(CaptionerError):

    def __init__(self, path: str, status_code: int | None = None, reason: str = "") -> None:
        super().__init__(MSG_ERR_SAMPLE % (path, status_code or reason or "no response"))
        self.path = path
        self.status_code = status_code
