"""LLM service for OpenAI chat and web-search grounded generation."""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from storefront import metrics
from storefront.ai.errors import AssistantError, ErrorKind, classify_error
from storefront.config import settings

logger = logging.getLogger(__name__)


@dataclass
class GroundingChunk:
    """A web source the model cited while answering."""

    uri: str
    title: Optional[str] = None


@dataclass
class GroundedResponse:
    """Generated text plus the citations gathered by the search tool."""

    text: str
    chunks: List[GroundingChunk] = field(default_factory=list)


def extract_grounding_chunks(response: Any) -> List[GroundingChunk]:
    """
    Collect ``url_citation`` annotations from a Responses API result.

    Citations are returned in order of appearance across the output
    messages; duplicates are kept so positions stay meaningful.
    """
    chunks = []
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for part in getattr(item, "content", None) or []:
            for annotation in getattr(part, "annotations", None) or []:
                if getattr(annotation, "type", None) != "url_citation":
                    continue
                url = getattr(annotation, "url", None)
                if url:
                    chunks.append(GroundingChunk(uri=url, title=getattr(annotation, "title", None)))
    return chunks


class LLMService:
    """
    Service for LLM interactions with OpenAI.

    Features:
    - Chat completions for the sales assistant
    - Grounded generation with the web search tool for lead discovery
    - Missing-key detection before any network call
    - Error classification into :class:`ErrorKind`
    - Call statistics
    """

    def __init__(self):
        self._client: Optional[AsyncOpenAI] = None
        self._call_count: int = 0
        self._error_count: int = 0

    async def _get_client(self) -> AsyncOpenAI:
        """Get or create OpenAI client."""
        if self._client is None:
            if not settings.openai_api_key:
                raise AssistantError(ErrorKind.CONFIGURATION, "OpenAI API key not configured")
            self._client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.llm_timeout_seconds,
            )
        return self._client

    def _failed(self, operation: str, exc: Exception) -> AssistantError:
        kind = classify_error(exc)
        self._error_count += 1
        metrics.record_llm_error(operation, kind.value)
        logger.error(f"LLM {operation} call failed ({kind.value}): {exc}")
        if isinstance(exc, AssistantError):
            return exc
        return AssistantError(kind, str(exc))

    async def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        model: Optional[str] = None,
    ) -> str:
        """
        Send a full conversation and return the assistant's reply text.

        Args:
            messages: OpenAI-style messages, system prompt first
            temperature: Temperature (defaults to settings.llm_temperature)
            model: Model name (defaults to settings.llm_model)

        Returns:
            Reply text (empty string if the model returned no content)

        Raises:
            AssistantError: Classified failure
        """
        model = model or settings.llm_model
        temperature = temperature if temperature is not None else settings.llm_temperature

        started = time.monotonic()
        try:
            client = await self._get_client()
            response = await client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=settings.llm_max_tokens,
            )
        except Exception as e:
            raise self._failed("chat", e) from e
        finally:
            metrics.llm_call_duration_seconds.labels(operation="chat").observe(
                time.monotonic() - started
            )

        self._call_count += 1
        result = response.choices[0].message.content
        return result or ""

    async def grounded_search(self, prompt: str, model: Optional[str] = None) -> GroundedResponse:
        """
        Generate text with the web search tool enabled.

        Args:
            prompt: Full instruction prompt
            model: Model name (defaults to settings.lead_model)

        Returns:
            GroundedResponse with the output text and cited sources

        Raises:
            AssistantError: Classified failure
        """
        model = model or settings.lead_model

        started = time.monotonic()
        try:
            client = await self._get_client()
            response = await client.responses.create(
                model=model,
                input=prompt,
                tools=[{
                    "type": settings.lead_search_tool,
                    "search_context_size": settings.lead_search_context_size,
                }],
            )
        except Exception as e:
            raise self._failed("grounded_search", e) from e
        finally:
            metrics.llm_call_duration_seconds.labels(operation="grounded_search").observe(
                time.monotonic() - started
            )

        self._call_count += 1
        chunks = extract_grounding_chunks(response)
        logger.debug(f"Grounded search returned {len(chunks)} citation(s)")
        return GroundedResponse(text=response.output_text or "", chunks=chunks)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get LLM service statistics.

        Returns:
            Dictionary with call and error counts and the configured models
        """
        return {
            "call_count": self._call_count,
            "error_count": self._error_count,
            "chat_model": settings.llm_model,
            "lead_model": settings.lead_model,
            "configured": bool(settings.openai_api_key),
        }

    async def close(self):
        """Close connections."""
        if self._client:
            await self._client.close()
            self._client = None


# Global LLM service instance
llm_service = LLMService()
