"""
Memesense HTTP endpoints.

- POST /analyze-wallet: wallet analysis
- POST /analyze-market: market query types and AI analysis
- POST /ai-chat: chat completion with live market context
- POST /twitter-api: tweet search and timelines
- GET|POST /check-api-keys: which API keys are configured
"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Type

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from ..config import MemesenseConfig
from ..core.errors import MemesenseError, ValidationError
from .dependencies import ServiceContainer, get_container
from .schemas import AnalyzeMarketRequest, AnalyzeWalletRequest, ChatRequest, TwitterRequest

logger = logging.getLogger(__name__)

router = APIRouter()


async def parse_body(request: Request, schema: Type[BaseModel]) -> BaseModel:
    """
    Decode a JSON object body into a schema.

    Raises:
        ValidationError: If the body is not a JSON object or does not fit the schema
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Invalid JSON body")

    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")

    try:
        return schema.model_validate(body)
    except SchemaError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise ValidationError(f"Invalid request fields: {fields}")


async def guarded(endpoint: str, handler: Callable[[], Awaitable[Dict[str, Any]]]):
    """
    Run a handler, turning unexpected exceptions into 500 {error}.

    MemesenseError subclasses propagate to the app's exception handlers.
    """
    try:
        return await handler()
    except MemesenseError:
        raise
    except Exception as e:
        logger.error(f"Unhandled error in {endpoint}: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": str(e) or f"An error occurred processing the {endpoint} request"},
        )


@router.post("/analyze-wallet")
async def analyze_wallet(request: Request, container: ServiceContainer = Depends(get_container)):
    async def handler():
        body = await parse_body(request, AnalyzeWalletRequest)
        analysis = await container.wallet_analyzer.analyze(body.walletAddress)
        return analysis.to_dict()

    return await guarded("analyze-wallet", handler)


@router.post("/analyze-market")
async def analyze_market(request: Request, container: ServiceContainer = Depends(get_container)):
    async def handler():
        body = await parse_body(request, AnalyzeMarketRequest)
        return await container.market.analyze(
            timeframe=body.timeframe,
            token_ticker=body.tokenTicker,
            query_type=body.queryType,
        )

    return await guarded("analyze-market", handler)


@router.post("/ai-chat")
async def ai_chat(request: Request, container: ServiceContainer = Depends(get_container)):
    async def handler():
        body = await parse_body(request, ChatRequest)
        return await container.chat.handle(body.model_dump())

    return await guarded("ai-chat", handler)


@router.post("/twitter-api")
async def twitter_api(request: Request, container: ServiceContainer = Depends(get_container)):
    async def handler():
        try:
            body = await parse_body(request, TwitterRequest)
        except ValidationError as e:
            # The dashboard renders the feed even for bad requests
            logger.warning(f"Bad twitter-api request, serving generated tweets: {e}")
            return {
                "tweets": container.social.fallback(10),
                "error": str(e),
                "usingFallbackData": True,
            }
        return await container.social.handle(
            body.action,
            query=body.query,
            count=body.count if body.count is not None else 10,
            max_id=body.maxId,
            usernames=body.usernames,
        )

    return await guarded("twitter-api", handler)


@router.api_route("/check-api-keys", methods=["GET", "POST"])
async def check_api_keys():
    return await guarded("check-api-keys", _check_api_keys)


async def _check_api_keys() -> Dict[str, Any]:
    return MemesenseConfig.check_api_keys()
