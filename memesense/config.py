"""
Memesense Configuration Module

Centralized configuration management for the Memesense service.
Loads from environment variables with sensible defaults.
"""

import os
from typing import Any, Dict, List, Optional, Tuple


# Keys reported by GET /check-api-keys, in display order.
API_KEY_DESCRIPTIONS: List[Tuple[str, str]] = [
    ("OPENAI_API_KEY", "OpenAI API Key"),
    ("TWITTER_CONSUMER_KEY", "Twitter API Key"),
    ("TWITTER_CONSUMER_SECRET", "Twitter API Secret"),
    ("TWITTER_ACCESS_TOKEN", "Twitter Access Token"),
    ("TWITTER_ACCESS_TOKEN_SECRET", "Twitter Access Token Secret"),
    ("BIRDEYE_API_KEY", "Birdeye API Key"),
    ("SOLSCAN_API_KEY", "Solscan API Key"),
    ("TWITTER_BEARER_TOKEN", "Twitter Bearer Token"),
    ("SUPABASE_URL", "Supabase URL"),
    ("SUPABASE_ANON_KEY", "Supabase Anon Key"),
]


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class MemesenseConfig:
    """Centralized Memesense configuration."""

    # ========================================================================
    # API Keys
    # ========================================================================

    @staticmethod
    def get_openai_api_key() -> Optional[str]:
        """Get OpenAI API key from environment."""
        return os.getenv("OPENAI_API_KEY")

    @staticmethod
    def get_birdeye_api_key() -> Optional[str]:
        """Get Birdeye API key from environment."""
        return os.getenv("BIRDEYE_API_KEY")

    @staticmethod
    def get_solscan_api_key() -> Optional[str]:
        """Get Solscan API key from environment."""
        return os.getenv("SOLSCAN_API_KEY")

    @staticmethod
    def get_coingecko_api_key() -> Optional[str]:
        """Get CoinGecko API key from environment (optional, public API otherwise)."""
        return os.getenv("COINGECKO_API_KEY")

    @staticmethod
    def get_twitter_bearer_token() -> Optional[str]:
        return os.getenv("TWITTER_BEARER_TOKEN")

    @staticmethod
    def get_twitter_oauth_credentials() -> Optional[Dict[str, str]]:
        """
        Get OAuth1 user-context credentials.

        Returns:
            Dict with the four credentials, or None when any is missing
        """
        creds = {
            "consumer_key": os.getenv("TWITTER_CONSUMER_KEY"),
            "consumer_secret": os.getenv("TWITTER_CONSUMER_SECRET"),
            "access_token": os.getenv("TWITTER_ACCESS_TOKEN"),
            "access_token_secret": os.getenv("TWITTER_ACCESS_TOKEN_SECRET"),
        }
        if not all(creds.values()):
            return None
        return creds

    # ========================================================================
    # Upstream Configuration
    # ========================================================================

    @staticmethod
    def get_solscan_primary_url() -> str:
        """Get Solscan primary host."""
        return os.getenv("SOLSCAN_PRIMARY_URL", "https://api.solscan.io").rstrip("/")

    @staticmethod
    def get_solscan_secondary_url() -> str:
        """Get Solscan secondary (fallback) host."""
        return os.getenv("SOLSCAN_SECONDARY_URL", "https://public-api.solscan.io").rstrip("/")

    @staticmethod
    def get_http_timeout() -> float:
        """Get per-request upstream timeout in seconds."""
        return float(os.getenv("MEMESENSE_HTTP_TIMEOUT_SECONDS", "10"))

    @staticmethod
    def get_tx_history_limit() -> int:
        """Get number of transactions requested per wallet."""
        return int(os.getenv("MEMESENSE_TX_HISTORY_LIMIT", "50"))

    # ========================================================================
    # Cache Configuration
    # ========================================================================

    @staticmethod
    def get_cache_ttl() -> int:
        """Get response cache TTL in seconds."""
        return int(os.getenv("MEMESENSE_CACHE_TTL_SECONDS", "300"))

    @staticmethod
    def get_redis_enabled() -> bool:
        """Get whether Redis caching is enabled."""
        return _env_bool("REDIS_ENABLED")

    @staticmethod
    def get_redis_url() -> str:
        """Get Redis connection URL."""
        return os.getenv("REDIS_URL", "redis://localhost:6379")

    # ========================================================================
    # OpenAI Models
    # ========================================================================

    @staticmethod
    def get_chat_model() -> str:
        return os.getenv("MEMESENSE_CHAT_MODEL", "gpt-4o")

    @staticmethod
    def get_analysis_model() -> str:
        return os.getenv("MEMESENSE_ANALYSIS_MODEL", "gpt-4o-mini")

    # ========================================================================
    # Server & Telemetry
    # ========================================================================

    @staticmethod
    def get_host() -> str:
        return os.getenv("MEMESENSE_HOST", "0.0.0.0")

    @staticmethod
    def get_port() -> int:
        return int(os.getenv("MEMESENSE_PORT", "8000"))

    @staticmethod
    def get_log_level() -> str:
        return os.getenv("MEMESENSE_LOG_LEVEL", "INFO").upper()

    @staticmethod
    def get_metrics_enabled() -> bool:
        """Get whether the Prometheus exporter is started."""
        return _env_bool("MEMESENSE_METRICS_ENABLED")

    @staticmethod
    def get_metrics_port() -> int:
        return int(os.getenv("MEMESENSE_METRICS_PORT", "9108"))

    # ========================================================================
    # Configuration Validation
    # ========================================================================

    @staticmethod
    def check_api_keys() -> Dict[str, Any]:
        """
        Report which API keys are configured.

        Only key descriptions are returned; values never leave this method.

        Returns:
            Dict with missingKeys, configuredKeys and allConfigured
        """
        missing = []
        configured = []
        for env_name, description in API_KEY_DESCRIPTIONS:
            if os.getenv(env_name):
                configured.append(description)
            else:
                missing.append(description)
        return {
            "missingKeys": missing,
            "configuredKeys": configured,
            "allConfigured": not missing,
        }

    @staticmethod
    def validate_config() -> Tuple[bool, List[str]]:
        """
        Validate the current configuration.

        Returns:
            Tuple of (is_valid, list_of_warnings)
        """
        warnings = []
        is_valid = True

        if not MemesenseConfig.get_openai_api_key():
            warnings.append("OPENAI_API_KEY is not set. ai-chat will fail and market analysis will use canned text.")

        if not MemesenseConfig.get_birdeye_api_key():
            warnings.append("BIRDEYE_API_KEY is not set. Market movers and launch metrics will use generated data.")

        if not MemesenseConfig.get_solscan_api_key():
            warnings.append("SOLSCAN_API_KEY is not set. Wallet analysis will likely fall back to synthesized data.")

        if not MemesenseConfig.get_twitter_bearer_token() and not MemesenseConfig.get_twitter_oauth_credentials():
            warnings.append("No Twitter credentials set. Social feed will use generated tweets.")

        try:
            if MemesenseConfig.get_cache_ttl() <= 0:
                warnings.append("MEMESENSE_CACHE_TTL_SECONDS must be positive")
                is_valid = False
        except ValueError:
            warnings.append("MEMESENSE_CACHE_TTL_SECONDS is not an integer")
            is_valid = False

        try:
            if MemesenseConfig.get_http_timeout() <= 0:
                warnings.append("MEMESENSE_HTTP_TIMEOUT_SECONDS must be positive")
                is_valid = False
        except ValueError:
            warnings.append("MEMESENSE_HTTP_TIMEOUT_SECONDS is not a number")
            is_valid = False

        return is_valid, warnings

    @staticmethod
    def print_config_summary():
        """Print a summary of current configuration."""
        print("=" * 70)
        print("Memesense Configuration Summary")
        print("=" * 70)
        for env_name, description in API_KEY_DESCRIPTIONS:
            print(f"{description}: {'Set' if os.getenv(env_name) else 'Not set'}")
        print(f"Solscan Hosts: {MemesenseConfig.get_solscan_primary_url()} -> {MemesenseConfig.get_solscan_secondary_url()}")
        print(f"HTTP Timeout: {os.getenv('MEMESENSE_HTTP_TIMEOUT_SECONDS', '10')}s")
        print(f"Cache TTL: {os.getenv('MEMESENSE_CACHE_TTL_SECONDS', '300')}s")
        print(f"Redis Enabled: {MemesenseConfig.get_redis_enabled()}")
        print(f"Chat Model: {MemesenseConfig.get_chat_model()}")
        print(f"Analysis Model: {MemesenseConfig.get_analysis_model()}")
        print(f"Metrics Enabled: {MemesenseConfig.get_metrics_enabled()}")
        print("=" * 70)

        is_valid, warnings = MemesenseConfig.validate_config()
        if warnings:
            print("\nConfiguration Warnings:")
            for warning in warnings:
                print(f"  ⚠️  {warning}")
        else:
            print("\n✓ Configuration looks good!")
