"""Tests for the LLM service and error classification."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from storefront.ai.errors import AssistantError, ErrorKind, classify_error
from storefront.ai.llm_service import LLMService, extract_grounding_chunks
from storefront.config import settings

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _status_error(cls, status_code: int):
    return cls("upstream error", response=httpx.Response(status_code, request=REQUEST), body=None)


class TestClassifyError:
    """Mapping of client exceptions to error kinds."""

    def test_invalid_key(self):
        assert classify_error(_status_error(openai.AuthenticationError, 401)) is ErrorKind.INVALID_API_KEY

    def test_model_unavailable(self):
        assert classify_error(_status_error(openai.NotFoundError, 404)) is ErrorKind.MODEL_UNAVAILABLE
        assert classify_error(_status_error(openai.PermissionDeniedError, 403)) is ErrorKind.MODEL_UNAVAILABLE

    def test_rate_limited(self):
        assert classify_error(_status_error(openai.RateLimitError, 429)) is ErrorKind.RATE_LIMITED

    def test_network(self):
        assert classify_error(openai.APIConnectionError(request=REQUEST)) is ErrorKind.NETWORK
        assert classify_error(openai.APITimeoutError(request=REQUEST)) is ErrorKind.NETWORK
        assert classify_error(httpx.ConnectError("refused")) is ErrorKind.NETWORK

    def test_unknown(self):
        assert classify_error(RuntimeError("boom")) is ErrorKind.UNKNOWN
        assert classify_error(_status_error(openai.InternalServerError, 500)) is ErrorKind.UNKNOWN

    def test_assistant_error_keeps_kind(self):
        assert classify_error(AssistantError(ErrorKind.CONFIGURATION)) is ErrorKind.CONFIGURATION

    def test_only_transient_kinds_are_restartable(self):
        restartable = {kind for kind in ErrorKind if kind.restartable}
        assert restartable == {ErrorKind.NETWORK, ErrorKind.RATE_LIMITED, ErrorKind.UNKNOWN}

    def test_every_kind_has_a_message(self):
        assert ErrorKind.INVALID_API_KEY.user_message.startswith("Invalid API Key")
        assert ErrorKind.NETWORK.user_message == "Network error: Unable to connect to the AI service."
        assert all(kind.user_message for kind in ErrorKind)


class TestLLMService:
    """Tests for LLMService against a mocked OpenAI client."""

    def setup_method(self):
        self.service = LLMService()

    def _mock_client(self):
        client = MagicMock()
        client.chat.completions.create = AsyncMock()
        client.responses.create = AsyncMock()
        self.service._client = client
        return client

    @pytest.mark.asyncio
    async def test_missing_key_is_configuration_error(self, monkeypatch):
        monkeypatch.setattr(settings, "openai_api_key", "")

        with pytest.raises(AssistantError) as exc_info:
            await self.service.chat([{"role": "user", "content": "hi"}])

        assert exc_info.value.kind is ErrorKind.CONFIGURATION
        assert self.service.get_stats()["error_count"] == 1

    @pytest.mark.asyncio
    async def test_chat_returns_reply_text(self):
        client = self._mock_client()
        client.chat.completions.create.return_value = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="Olá!"))]
        )

        reply = await self.service.chat([{"role": "user", "content": "hi"}], temperature=0.1)

        assert reply == "Olá!"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["temperature"] == 0.1
        assert kwargs["model"] == settings.llm_model
        assert self.service.get_stats()["call_count"] == 1

    @pytest.mark.asyncio
    async def test_chat_empty_content(self):
        client = self._mock_client()
        client.chat.completions.create.return_value = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=None))]
        )

        assert await self.service.chat([]) == ""

    @pytest.mark.asyncio
    async def test_chat_failure_is_classified(self):
        client = self._mock_client()
        client.chat.completions.create.side_effect = _status_error(openai.AuthenticationError, 401)

        with pytest.raises(AssistantError) as exc_info:
            await self.service.chat([])

        assert exc_info.value.kind is ErrorKind.INVALID_API_KEY

    @pytest.mark.asyncio
    async def test_grounded_search_collects_citations(self):
        client = self._mock_client()
        client.responses.create.return_value = SimpleNamespace(
            output_text='[{"title": "lead"}]',
            output=[
                SimpleNamespace(
                    type="message",
                    content=[
                        SimpleNamespace(
                            annotations=[
                                SimpleNamespace(type="url_citation", url="https://a.example", title="A"),
                            ]
                        )
                    ],
                )
            ],
        )

        response = await self.service.grounded_search("find leads")

        assert response.text == '[{"title": "lead"}]'
        assert [c.uri for c in response.chunks] == ["https://a.example"]
        tools = client.responses.create.call_args.kwargs["tools"]
        assert tools[0]["type"] == settings.lead_search_tool

    @pytest.mark.asyncio
    async def test_grounded_search_network_failure(self):
        client = self._mock_client()
        client.responses.create.side_effect = openai.APIConnectionError(request=REQUEST)

        with pytest.raises(AssistantError) as exc_info:
            await self.service.grounded_search("find leads")

        assert exc_info.value.kind is ErrorKind.NETWORK

    @pytest.mark.asyncio
    async def test_close_releases_client(self):
        client = self._mock_client()
        client.close = AsyncMock()

        await self.service.close()

        client.close.assert_awaited_once()
        assert self.service._client is None


def test_extract_grounding_chunks_keeps_order_and_duplicates():
    response = SimpleNamespace(
        output=[
            SimpleNamespace(type="web_search_call"),
            SimpleNamespace(
                type="message",
                content=[
                    SimpleNamespace(
                        annotations=[
                            SimpleNamespace(type="url_citation", url="https://a.example", title="A"),
                            SimpleNamespace(type="file_citation", url=None),
                            SimpleNamespace(type="url_citation", url="https://b.example", title=None),
                            SimpleNamespace(type="url_citation", url="https://a.example", title="A"),
                        ]
                    ),
                    SimpleNamespace(annotations=None),
                ],
            ),
        ]
    )

    chunks = extract_grounding_chunks(response)

    assert [c.uri for c in chunks] == ["https://a.example", "https://b.example", "https://a.example"]
    assert chunks[0].title == "A"


def test_extract_grounding_chunks_without_output():
    assert extract_grounding_chunks(SimpleNamespace()) == []
