"""Lead discovery: web-search grounded prospect hunting through the LLM."""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from storefront import metrics
from storefront.ai.llm_service import GroundingChunk, LLMService, llm_service
from storefront.ai.prompts import LANGUAGE_NAMES, lead_discovery_prompt
from storefront.ai.structured_output import extract_json_payload

logger = logging.getLogger(__name__)


class Lead(BaseModel):
    """A sales prospect found on the web. Field names follow the model's camelCase JSON."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    title: str = ""
    snippet: str = ""
    intent_score: float = Field(0, alias="intentScore")
    fit_score: float = Field(0, alias="fitScore")
    outreach_message: str = Field("", alias="outreachMessage")
    platform: str = ""
    source_url: str = Field("", alias="sourceUrl")
    email: Optional[str] = None
    phone: Optional[str] = None
    contact_name: Optional[str] = Field(None, alias="contactName")

    @field_validator("intent_score", "fit_score", mode="before")
    @classmethod
    def clamp_score(cls, v: Any) -> float:
        try:
            score = float(v)
        except (TypeError, ValueError):
            return 0.0
        if score != score:  # NaN
            return 0.0
        return max(0.0, min(100.0, score))

    @field_validator("title", "snippet", "outreach_message", "platform", "source_url", mode="before")
    @classmethod
    def text_or_empty(cls, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, (str, int, float)):
            return str(v)
        raise ValueError("expected text")

    @field_validator("id", "email", "phone", "contact_name", mode="before")
    @classmethod
    def optional_text(cls, v: Any) -> Optional[str]:
        if v is None or v == "":
            return None
        return str(v)


def normalize_lead_payload(payload: Any) -> List[Dict[str, Any]]:
    """
    Accept both shapes the model produces: a bare array of leads, or an object.

    An object is read as ``{"leads": [...]}`` (or ``"results"``) when it has
    such a list, otherwise as a single lead.
    """
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)]
    if isinstance(payload, dict):
        for key in ("leads", "results"):
            if isinstance(payload.get(key), list):
                return [item for item in payload[key] if isinstance(item, dict)]
        return [payload]
    return []


def backfill_source_urls(records: List[Dict[str, Any]], chunks: List[GroundingChunk]) -> None:
    """
    Fill missing ``sourceUrl`` values from the citation at the same position.

    Lead i takes citation i. Nothing guarantees the i-th citation belongs
    to the i-th lead; this mirrors how the results are returned.
    """
    for idx, record in enumerate(records):
        if not record.get("sourceUrl") and idx < len(chunks) and chunks[idx].uri:
            record["sourceUrl"] = chunks[idx].uri


class LeadDiscoveryEngine:
    """Runs one discovery query per call; results are not stored."""

    def __init__(self, llm: Optional[LLMService] = None):
        self.llm = llm or llm_service

    async def discover(self, query: str, language: str = "en") -> List[Lead]:
        """
        Search the web for leads matching a free-text query.

        Args:
            query: What kind of prospects to look for
            language: Outreach message language, "pt" or "en"

        Returns:
            Parsed leads; empty when the reply holds no usable JSON

        Raises:
            ValueError: If the query is blank or the language unsupported
            AssistantError: If the model call itself fails
        """
        query = (query or "").strip()
        if not query:
            raise ValueError("Query is required")
        if language not in LANGUAGE_NAMES:
            raise ValueError(f"Unsupported language '{language}'")

        try:
            response = await self.llm.grounded_search(lead_discovery_prompt(query, language))
        except Exception:
            metrics.record_lead_search("error")
            raise

        payload = extract_json_payload(response.text)
        records = normalize_lead_payload(payload)
        if payload is None:
            logger.warning(f"Lead discovery for '{query}' returned no parseable JSON")

        backfill_source_urls(records, response.chunks)

        leads = []
        for record in records:
            try:
                leads.append(Lead.model_validate(record))
            except ValidationError as e:
                logger.debug(f"Skipping malformed lead record: {e}")

        metrics.record_lead_search("success", len(leads))
        logger.info(
            f"Lead discovery '{query}' ({language}): {len(leads)} lead(s), {len(response.chunks)} citation(s)"
        )
        return leads


# Global engine instance
lead_discovery_engine = LeadDiscoveryEngine()
