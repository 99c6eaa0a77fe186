"""
Wallet Analyzer - aggregation behind POST /analyze-wallet

Pipeline: validate the address, fetch account info, transactions and token
holdings from Solscan (sequentially, each with host fallback), derive
metrics, enrich holdings with prices, classify the wallet and assemble one
WalletAnalysis.

A failed resource never aborts the analysis. The analyzer continues with
empty data, the deriver synthesizes placeholder values, and every section
is tagged with its DataFidelity.
"""

import logging
from datetime import datetime, timezone
from random import Random
from typing import Any, Dict, List, Optional

from .archetypes import classify, risk_metrics_for, trading_behavior_for
from .errors import AllProvidersFailed
from .models import (
    LAMPORTS_PER_SOL,
    DataFidelity,
    RawTransaction,
    RecentTransaction,
    TokenHolding,
    TransactionType,
    WalletAnalysis,
)
from .service_metrics import get_metrics
from .solscan_client import SolscanClient
from .validator import validate_wallet_address
from .wallet_metrics import address_sum, derive

logger = logging.getLogger(__name__)


RECENT_TX_PREVIEW = 10

# Approximate USD prices for well-known tokens
TOKEN_PRICES: Dict[str, float] = {
    "SOL": 150.0,
    "WSOL": 150.0,
    "USDC": 1.0,
    "USDT": 1.0,
    "BONK": 0.00002,
    "WIF": 2.0,
    "JUP": 0.8,
    "POPCAT": 0.6,
    "RAY": 2.5,
    "JTO": 2.2,
    "PYTH": 0.3,
    "BOME": 0.006,
}

PLACEHOLDER_PORTFOLIO = [
    ("SOL", "Solana"),
    ("USDC", "USD Coin"),
    ("BONK", "Bonk"),
    ("WIF", "dogwifhat"),
    ("JUP", "Jupiter"),
    ("POPCAT", "Popcat"),
]


class WalletAnalyzer:
    """
    Builds WalletAnalysis responses.

    Usage:
        analyzer = WalletAnalyzer(SolscanClient())
        analysis = await analyzer.analyze("So11111111111111111111111111111111111111112")
        payload = analysis.to_dict()
    """

    def __init__(self, solscan: SolscanClient, rng: Optional[Random] = None):
        """
        Initialize the analyzer.

        Args:
            solscan: Upstream fetcher for wallet resources
            rng: Random source for simulated P/L and estimated prices
        """
        self.solscan = solscan
        self.rng = rng or Random()

    async def analyze(self, wallet_address: Any, now: Optional[datetime] = None) -> WalletAnalysis:
        """
        Analyze a wallet.

        Args:
            wallet_address: Raw address from the request
            now: Reference time (current UTC time when not given)

        Raises:
            ValidationError: If the address is missing or malformed
        """
        address = validate_wallet_address(wallet_address)
        now = now or datetime.now(timezone.utc)

        # Sequential on purpose: one resource at a time, each with host fallback
        account = await self._fetch_or_none(self.solscan.get_account, address, "account")
        transactions = await self._fetch_or_none(self.solscan.get_transactions, address, "transactions") or []
        raw_tokens = await self._fetch_or_none(self.solscan.get_tokens, address, "tokens")

        derived = derive(address, transactions, self.rng, now)
        seed = address_sum(address)

        if raw_tokens is not None:
            holdings = self._enrich_holdings(raw_tokens)
            holdings_fidelity = DataFidelity.REAL
        else:
            holdings = self._placeholder_holdings(seed)
            holdings_fidelity = DataFidelity.SYNTHESIZED

        if derived.fidelity == DataFidelity.REAL:
            preview = derived.transactions[:RECENT_TX_PREVIEW]
        else:
            preview = derived.transactions
        recent = [self._normalize_transaction(tx, address) for tx in preview]

        if derived.fidelity == DataFidelity.SYNTHESIZED:
            # Placeholder path: totals must match the preview
            derived.metrics.total_tx_count = len(recent)

        risk = risk_metrics_for(seed, holdings)
        behavior = trading_behavior_for(seed, derived.metrics)
        profile = classify(address, derived.metrics, risk)

        volume_fidelity = (
            DataFidelity.SYNTHESIZED if derived.metrics.volume_estimated else DataFidelity.REAL
        )
        overview_fidelity = DataFidelity.REAL if account is not None else DataFidelity.SYNTHESIZED
        overview = account if account is not None else self._placeholder_overview(address, seed)

        analysis = WalletAnalysis(
            wallet_address=address,
            wallet_overview=overview,
            token_holdings=holdings,
            recent_transactions=recent,
            daily_trade_stats=derived.daily_stats,
            metrics=derived.metrics,
            risk_metrics=risk,
            trading_behavior=behavior,
            profile=profile,
            data_fidelity={
                "walletOverview": overview_fidelity,
                "tokenHoldings": holdings_fidelity,
                "transactions": derived.fidelity,
                "metrics": derived.fidelity,
                "volume": volume_fidelity,
                "profitLoss": DataFidelity.SYNTHESIZED,
                "profile": DataFidelity.SYNTHESIZED,
            },
            analyzed_at=now,
        )

        if analysis.source == "fallback":
            logger.info(f"Serving synthesized wallet analysis for {address}")
            get_metrics().record_fallback("analyze-wallet")

        return analysis

    async def _fetch_or_none(self, fetch, address: str, resource: str):
        try:
            return await fetch(address)
        except AllProvidersFailed as e:
            logger.warning(f"Solscan {resource} unavailable for {address}: {e}")
            return None

    def _price_for(self, symbol: str):
        """Return (price_usd, price_source)."""
        price = TOKEN_PRICES.get(symbol.upper())
        if price is not None:
            return price, "table"
        return round(self.rng.uniform(0.0001, 1.0), 6), "estimated"

    def _enrich_holdings(self, raw_tokens: List[Dict[str, Any]]) -> List[TokenHolding]:
        """Attach USD values to Solscan token balances."""
        holdings = []
        for token in raw_tokens:
            if not isinstance(token, dict):
                continue
            amount = token.get("tokenAmount", token.get("amount", 0))
            if isinstance(amount, dict):
                amount = amount.get("uiAmount", 0)
            try:
                amount = float(amount or 0)
            except (TypeError, ValueError):
                amount = 0.0

            symbol = token.get("tokenSymbol") or token.get("symbol") or "UNKNOWN"
            name = token.get("tokenName") or token.get("name") or symbol
            price, source = self._price_for(symbol)
            holdings.append(TokenHolding(
                symbol=symbol,
                name=name,
                amount=amount,
                usd_value=amount * price,
                price_source=source,
            ))
        return holdings

    def _placeholder_holdings(self, seed: int) -> List[TokenHolding]:
        """Deterministic 2-4 token portfolio for when holdings are unavailable."""
        count = 2 + seed % 3
        holdings = []
        for i in range(count):
            symbol, name = PLACEHOLDER_PORTFOLIO[(seed + i) % len(PLACEHOLDER_PORTFOLIO)]
            amount = round(1 + ((seed * (i + 3)) % 5000) / 10, 2)
            if symbol == "BONK":
                amount *= 100_000
            price = TOKEN_PRICES[symbol]
            holdings.append(TokenHolding(
                symbol=symbol,
                name=name,
                amount=amount,
                usd_value=amount * price,
                price_source="table",
            ))
        return holdings

    @staticmethod
    def _placeholder_overview(address: str, seed: int) -> Dict[str, Any]:
        lamports = (seed + 1) * 10_000_000
        return {
            "account": address,
            "lamports": lamports,
            "solBalance": lamports / LAMPORTS_PER_SOL,
            "type": "system_account",
            "synthesized": True,
        }

    @staticmethod
    def _normalize_transaction(tx: RawTransaction, address: str) -> RecentTransaction:
        if tx.is_receiver(address):
            tx_type = TransactionType.RECEIVE
        elif tx.is_sender(address):
            tx_type = TransactionType.SEND
        else:
            tx_type = TransactionType.OTHER

        transfer = tx.token_transfers[0] if tx.token_transfers else None
        if tx.block_time is not None:
            timestamp = datetime.fromtimestamp(tx.block_time, tz=timezone.utc).isoformat()
        else:
            timestamp = None

        return RecentTransaction(
            type=tx_type,
            token=(transfer.token_symbol if transfer and transfer.token_symbol else "SOL"),
            amount=transfer.token_amount if transfer else 0.0,
            timestamp=timestamp,
            status=tx.status,
            fee=f"{tx.fee_sol:.6f} SOL",
        )
