"""Lead discovery routes."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from storefront.ai.errors import AssistantError, ErrorKind
from storefront.ai.lead_discovery import Lead, LeadDiscoveryEngine
from storefront.api.deps import get_lead_engine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/leads", tags=["leads"])


class DiscoverRequest(BaseModel):
    query: str
    language: str = "pt"


class DiscoverResponse(BaseModel):
    query: str
    language: str
    leads: List[Lead]


@router.post("/discover", response_model=DiscoverResponse)
async def discover_leads(request: DiscoverRequest, engine: LeadDiscoveryEngine = Depends(get_lead_engine)):
    """
    Search the web for prospects matching the query.

    An unparseable model reply gives an empty list. A failed model call is
    an error: 503 when the service is not configured, 502 otherwise.
    """
    try:
        leads = await engine.discover(request.query, request.language)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AssistantError as e:
        status_code = 503 if e.kind == ErrorKind.CONFIGURATION else 502
        raise HTTPException(
            status_code=status_code,
            detail={"error_kind": e.kind.value, "message": e.user_message},
        )

    return DiscoverResponse(query=request.query, language=request.language, leads=leads)
