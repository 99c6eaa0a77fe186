"""
Request bodies.

Fields are loosely typed on purpose: the handlers own the error messages
for missing or malformed values, and unknown fields are ignored.
"""

from typing import Any, List, Optional

from pydantic import BaseModel


class AnalyzeWalletRequest(BaseModel):
    walletAddress: Optional[Any] = None


class AnalyzeMarketRequest(BaseModel):
    timeframe: Optional[str] = None
    tokenTicker: Optional[str] = None
    queryType: Optional[str] = None


class ChatRequest(BaseModel):
    messages: Optional[Any] = None
    type: Optional[str] = None
    action: Optional[str] = None
    count: Optional[int] = 10


class TwitterRequest(BaseModel):
    action: Optional[str] = None
    query: Optional[str] = None
    count: Optional[int] = 10
    maxId: Optional[str] = None
    usernames: Optional[List[str]] = None
