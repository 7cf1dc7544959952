from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    CONFIGURATION = "CONFIGURATION"
    INPUT = "INPUT"
    TRANSPORT = "TRANSPORT"
    PROVIDER = "PROVIDER"
    PARSE = "PARSE"


class ServiceError(Exception):
    kind: Optional[ErrorKind] = None


class ConfigurationError(ServiceError):
    kind = ErrorKind.CONFIGURATION


class InputError(ServiceError):
    kind = ErrorKind.INPUT


class TransportError(ServiceError):
    kind = ErrorKind.TRANSPORT

    def __init__(self, status_code: Optional[int], detail: str = ""):
        if status_code is None:
            message = f"Request to the model failed: {detail or 'no response'}"
        else:
            message = f"HTTP error: {status_code}"
            if detail:
                message = f"{message} ({detail})"
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class RateLimitedError(TransportError):
    def __init__(self, detail: str = "Model quota exhausted. Try again shortly."):
        super().__init__(429, detail)


class ProviderError(ServiceError):
    kind = ErrorKind.PROVIDER

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(f"API error: {message}")
        self.message = message
        self.status_code = status_code


class ParseError(ServiceError):
    kind = ErrorKind.PARSE

    def __init__(self, message: str = "Could not parse API response"):
        super().__init__(message)
