"""
Memesense Core Module

Provides wallet analysis, market analysis, social feed and AI chat services
on top of the Solscan, Birdeye, CoinGecko, Twitter and OpenAI clients.
"""

from .analyzer import WalletAnalyzer
from .birdeye_client import BirdeyeClient
from .cache import ResponseCache
from .chat import ChatService
from .coingecko_client import CoinGeckoClient
from .errors import (
    AllProvidersFailed,
    ConfigurationError,
    MemesenseError,
    UpstreamUnavailable,
    ValidationError,
)
from .market import MarketAnalyzer
from .models import DataFidelity, WalletAnalysis
from .openai_client import OpenAIClient
from .providers import Provider, try_in_order
from .social import SocialFeed
from .solscan_client import SolscanClient
from .twitter_client import BearerAuth, OAuth1Auth, TwitterClient
from .validator import validate_wallet_address
