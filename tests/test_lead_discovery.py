"""Tests for lead discovery and citation backfill."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from storefront.ai.errors import AssistantError, ErrorKind
from storefront.ai.lead_discovery import (
    Lead,
    LeadDiscoveryEngine,
    backfill_source_urls,
    normalize_lead_payload,
)
from storefront.ai.llm_service import GroundedResponse, GroundingChunk


def _engine(text: str, chunks=None) -> LeadDiscoveryEngine:
    llm = MagicMock()
    llm.grounded_search = AsyncMock(return_value=GroundedResponse(text=text, chunks=chunks or []))
    return LeadDiscoveryEngine(llm=llm)


LEADS = [
    {
        "title": "Restaurant chain refreshing staff phones",
        "snippet": "Looking for 20 Android devices",
        "intentScore": 85,
        "fitScore": 70,
        "outreachMessage": "Hi! We can supply 20 Galaxy S24 units.",
        "platform": "LinkedIn",
        "sourceUrl": "",
        "email": "",
    },
    {
        "title": "Startup needs MacBook chargers",
        "snippet": "Office of 15 people",
        "intentScore": 60,
        "fitScore": 90,
        "outreachMessage": "Hello, we stock 25W USB-C chargers.",
        "platform": "Reddit",
        "contactName": "Rui",
    },
]


def test_lead_accepts_camel_case_and_clamps_scores():
    lead = Lead.model_validate({"title": "x", "intentScore": 140, "fitScore": "n/a", "email": ""})

    assert lead.intent_score == 100
    assert lead.fit_score == 0
    assert lead.email is None


def test_normalize_payload_shapes():
    assert normalize_lead_payload([{"a": 1}, "junk"]) == [{"a": 1}]
    assert normalize_lead_payload({"leads": [{"a": 1}]}) == [{"a": 1}]
    assert normalize_lead_payload({"title": "single"}) == [{"title": "single"}]
    assert normalize_lead_payload(None) == []


def test_backfill_is_positional():
    records = [{"sourceUrl": ""}, {"sourceUrl": "https://kept.example"}, {}]
    chunks = [GroundingChunk(uri="https://one.example"), GroundingChunk(uri="https://two.example")]

    backfill_source_urls(records, chunks)

    assert records[0]["sourceUrl"] == "https://one.example"
    assert records[1]["sourceUrl"] == "https://kept.example"
    assert "sourceUrl" not in records[2]


@pytest.mark.asyncio
async def test_discover_backfills_missing_source_urls():
    engine = _engine(
        f"Found these:\n```json\n{json.dumps(LEADS)}\n```",
        chunks=[GroundingChunk(uri="https://a.example"), GroundingChunk(uri="https://b.example")],
    )

    leads = await engine.discover("companies buying phones", language="en")

    assert [lead.source_url for lead in leads] == ["https://a.example", "https://b.example"]
    assert leads[0].intent_score == 85
    assert leads[1].contact_name == "Rui"


@pytest.mark.asyncio
async def test_discover_accepts_object_payload():
    engine = _engine(json.dumps({"leads": LEADS[:1]}))

    leads = await engine.discover("phones", language="pt")

    assert len(leads) == 1
    assert leads[0].platform == "LinkedIn"


@pytest.mark.asyncio
async def test_discover_passes_language_into_prompt():
    engine = _engine("[]")

    await engine.discover("phones", language="pt")

    prompt = engine.llm.grounded_search.call_args.args[0]
    assert "Portuguese" in prompt
    assert "phones" in prompt


@pytest.mark.asyncio
async def test_unparseable_reply_yields_no_leads():
    engine = _engine("I could not find anything useful today.")
    assert await engine.discover("phones") == []


@pytest.mark.asyncio
async def test_malformed_records_are_skipped():
    engine = _engine(json.dumps([{"title": {"nested": True}}, LEADS[1]]))

    leads = await engine.discover("chargers")

    assert [lead.title for lead in leads] == ["Startup needs MacBook chargers"]


@pytest.mark.asyncio
async def test_transport_failure_propagates():
    llm = MagicMock()
    llm.grounded_search = AsyncMock(side_effect=AssistantError(ErrorKind.NETWORK))
    engine = LeadDiscoveryEngine(llm=llm)

    with pytest.raises(AssistantError) as exc_info:
        await engine.discover("phones")

    assert exc_info.value.kind is ErrorKind.NETWORK


@pytest.mark.asyncio
@pytest.mark.parametrize("query,language", [("  ", "en"), ("phones", "fr")])
async def test_invalid_input_rejected(query, language):
    engine = _engine("[]")

    with pytest.raises(ValueError):
        await engine.discover(query, language=language)

    engine.llm.grounded_search.assert_not_called()
