from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    MISSING_CONFIGURATION = "MISSING_CONFIGURATION"
    VALIDATION = "BAD_USER_INPUT"
    UPSTREAM_HTTP = "UPSTREAM_ERROR"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    UNEXPECTED_FORMAT = "BAD_UPSTREAM_FORMAT"


class ChatProxyError(Exception):
    """Base error; `extensions` is picked up by graphql-core when the
    exception is raised from a resolver."""

    code = "SERVER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.timestamp = datetime.now(timezone.utc).isoformat()

    @property
    def extensions(self) -> Dict[str, Any]:
        return {"code": self.code, "timestamp": self.timestamp}


class ValidationError(ChatProxyError):
    code = ErrorKind.VALIDATION.value


class MissingConfiguration(ChatProxyError):
    code = ErrorKind.MISSING_CONFIGURATION.value


class UpstreamError(ChatProxyError):
    code = ErrorKind.UPSTREAM_HTTP.value


class UpstreamHTTPError(UpstreamError):
    def __init__(self, status_code: int, body: str, message: Optional[str] = None):
        super().__init__(message or f"Upstream responded with an error ({status_code}): {body}")
        self.status_code = status_code
        self.body = body

    @property
    def extensions(self) -> Dict[str, Any]:
        return {**super().extensions, "statusCode": self.status_code}


class InsufficientBalance(UpstreamHTTPError):
    code = ErrorKind.INSUFFICIENT_BALANCE.value

    def __init__(self, status_code: int, body: str):
        super().__init__(
            status_code,
            body,
            message="API account balance is insufficient, please top up and try again",
        )


class UnexpectedUpstreamFormat(ChatProxyError):
    code = ErrorKind.UNEXPECTED_FORMAT.value
