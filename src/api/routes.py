from __future__ import annotations

import json
import logging

from fastapi import APIRouter, HTTPException, Request, Response, status

from gluestick.engine import ScrapeOrchestrator
from gluestick.request import BadRequestError, decode_request, validate_request

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/scrape")
async def scrape(request: Request) -> Response:
    body = await request.body()
    try:
        scrape_request = decode_request(body)
        validate_request(scrape_request)
    except BadRequestError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    outcome = await ScrapeOrchestrator().run(scrape_request)
    if not outcome.success:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=outcome.error)

    try:
        payload = json.dumps(outcome.results, indent=4)
    except (TypeError, ValueError) as exc:
        logger.error("serialize_failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    return Response(payload, media_type="application/json")
