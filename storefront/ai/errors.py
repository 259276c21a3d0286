"""Typed failures of the LLM adapter layer and their user-facing messages."""

from enum import Enum
from typing import Optional

import httpx
import openai


class ErrorKind(str, Enum):
    """Why a call to the model host failed."""

    CONFIGURATION = "configuration"
    INVALID_API_KEY = "invalid_api_key"
    MODEL_UNAVAILABLE = "model_unavailable"
    NETWORK = "network"
    RATE_LIMITED = "rate_limited"
    UNKNOWN = "unknown"

    @property
    def user_message(self) -> str:
        return USER_MESSAGES[self]

    @property
    def restartable(self) -> bool:
        """Whether a fresh conversation handle might get past this failure."""
        return self in (ErrorKind.NETWORK, ErrorKind.RATE_LIMITED, ErrorKind.UNKNOWN)


USER_MESSAGES = {
    ErrorKind.CONFIGURATION: (
        "The AI assistant is not configured. Please set the OpenAI API key in the environment settings."
    ),
    ErrorKind.INVALID_API_KEY: (
        "Invalid API Key. Please verify your OpenAI API key in the environment settings."
    ),
    ErrorKind.MODEL_UNAVAILABLE: (
        "The AI model is currently unavailable or the API key does not have access to it."
    ),
    ErrorKind.NETWORK: "Network error: Unable to connect to the AI service.",
    ErrorKind.RATE_LIMITED: "The AI service is busy right now. Please try again in a moment.",
    ErrorKind.UNKNOWN: "Sorry, I had trouble processing that. Please try again.",
}


class AssistantError(Exception):
    """A failed model call, classified."""

    def __init__(self, kind: ErrorKind, detail: Optional[str] = None):
        self.kind = kind
        self.detail = detail or kind.value
        super().__init__(self.detail)

    @property
    def user_message(self) -> str:
        return self.kind.user_message


def classify_error(exc: BaseException) -> ErrorKind:
    """Map an exception raised while talking to the model host to an error kind."""
    if isinstance(exc, AssistantError):
        return exc.kind
    if isinstance(exc, openai.AuthenticationError):
        return ErrorKind.INVALID_API_KEY
    if isinstance(exc, (openai.NotFoundError, openai.PermissionDeniedError)):
        return ErrorKind.MODEL_UNAVAILABLE
    if isinstance(exc, openai.RateLimitError):
        return ErrorKind.RATE_LIMITED
    # APITimeoutError is a subclass of APIConnectionError
    if isinstance(exc, (openai.APIConnectionError, httpx.TransportError)):
        return ErrorKind.NETWORK
    return ErrorKind.UNKNOWN
