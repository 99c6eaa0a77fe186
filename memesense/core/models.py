"""
Data models for Memesense wallet and market analysis.

Every entity here is request-scoped: built from upstream responses (or
synthesized when an upstream is unavailable), serialized to camelCase JSON
with ``to_dict()`` and discarded once the response is sent.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


LAMPORTS_PER_SOL = 1_000_000_000


class DataFidelity(Enum):
    """Whether a response section is backed by upstream data or synthesized."""
    REAL = "real"
    SYNTHESIZED = "synthesized"


class TransactionType(Enum):
    """Direction of a transaction relative to the analyzed wallet."""
    RECEIVE = "Receive"
    SEND = "Send"
    OTHER = "Transaction"


def _to_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _to_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


@dataclass
class TokenTransfer:
    """A single token movement inside a transaction."""
    sender: Optional[str]
    receiver: Optional[str]
    token_symbol: Optional[str] = None
    token_address: Optional[str] = None
    token_amount: float = 0.0

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "TokenTransfer":
        """Build from a Solscan transfer record (legacy or v2 field names)."""
        amount = data.get("tokenAmount", data.get("amount", 0))
        if isinstance(amount, dict):
            amount = amount.get("uiAmount", amount.get("amount", 0))
        return cls(
            sender=data.get("sender") or data.get("source_owner") or data.get("from_address"),
            receiver=data.get("receiver") or data.get("destination_owner") or data.get("to_address"),
            token_symbol=data.get("tokenSymbol") or data.get("symbol"),
            token_address=data.get("tokenAddress") or data.get("token_address") or data.get("mint"),
            token_amount=_to_float(amount),
        )


@dataclass
class RawTransaction:
    """Upstream transaction record, consumed by the metrics deriver."""
    signature: str
    block_time: Optional[int]
    fee: int = 0
    status: str = "Success"
    token_transfers: List[TokenTransfer] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "RawTransaction":
        """Unparseable block times become None and unparseable fees 0."""
        block_time = data.get("blockTime", data.get("block_time"))
        transfers = data.get("tokenTransfers") or data.get("token_transfers") or []
        if not isinstance(transfers, list):
            transfers = []
        return cls(
            signature=str(data.get("txHash") or data.get("signature") or data.get("tx_hash") or ""),
            block_time=_to_int(block_time),
            fee=_to_int(data.get("fee", 0), default=0),
            status=str(data.get("status") or "Success"),
            token_transfers=[
                TokenTransfer.from_api(t) for t in transfers if isinstance(t, dict)
            ],
        )

    @property
    def fee_sol(self) -> float:
        return self.fee / LAMPORTS_PER_SOL

    def is_receiver(self, address: str) -> bool:
        return any(t.receiver == address for t in self.token_transfers)

    def is_sender(self, address: str) -> bool:
        return any(t.sender == address for t in self.token_transfers)


@dataclass
class TokenHolding:
    """Token balance enriched with an estimated USD value."""
    symbol: str
    name: str
    amount: float
    usd_value: float
    price_source: str = "table"  # "table" (known symbol) or "estimated" (random)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "amount": self.amount,
            "usdValue": f"{self.usd_value:.2f}",
            "priceSource": self.price_source,
        }


@dataclass
class Metrics:
    """Aggregate trading statistics for a wallet."""
    total_tx_count: int
    buy_count: int
    sell_count: int
    average_hold_time_days: float
    win_rate: int  # percent, capped at 95
    volume_sol: float
    volume_estimated: bool = False  # floor used instead of a real fee sum

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalTxCount": self.total_tx_count,
            "buyCount": self.buy_count,
            "sellCount": self.sell_count,
            "averageHoldTime": f"{self.average_hold_time_days:.1f} days",
            "winRate": f"{self.win_rate}%",
            "volume": f"{self.volume_sol:.2f} SOL",
        }


@dataclass
class DailyTradeStat:
    """Per-UTC-day activity summary."""
    date: str
    trades: int
    volume: float
    profit_loss: float  # simulated
    tokens: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "trades": self.trades,
            "volume": round(self.volume, 2),
            "profitLoss": round(self.profit_loss, 4),
            "tokens": self.tokens,
        }


@dataclass
class RiskMetrics:
    """Heuristic portfolio risk summary."""
    risk_score: int
    diversification_level: str
    largest_position: str
    volatility_exposure: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "riskScore": self.risk_score,
            "diversificationLevel": self.diversification_level,
            "largestPosition": self.largest_position,
            "volatilityExposure": self.volatility_exposure,
        }


@dataclass
class TradingBehavior:
    """Heuristic trading habits summary."""
    buy_frequency: str
    avg_transaction_size: str
    preferred_token_types: str
    time_of_day_pattern: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "buyFrequency": self.buy_frequency,
            "avgTransactionSize": self.avg_transaction_size,
            "preferredTokenTypes": self.preferred_token_types,
            "timeOfDayPattern": self.time_of_day_pattern,
        }


@dataclass(frozen=True)
class TraderArchetype:
    """Hand-authored trader personality template."""
    personality: str
    trading_style: str
    emoji: str
    description: str
    traits: tuple
    strengths: tuple
    weaknesses: tuple
    copy_trading_rating: str


@dataclass
class CopyTradingSafety:
    score: int
    rating: str  # Safe, Medium or Risky
    reasons: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "rating": self.rating, "reasons": list(self.reasons)}


@dataclass
class WalletProfile:
    """Classifier output: archetype copy plus wallet-specific tips and safety."""
    archetype: TraderArchetype
    tips: List[str]
    copy_trading_safety: CopyTradingSafety
    is_new_wallet: bool
    stats: Dict[str, str]

    @property
    def trading_style(self) -> str:
        return self.archetype.trading_style

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tradingStyle": self.archetype.trading_style,
            "personality": self.archetype.personality,
            "emoji": self.archetype.emoji,
            "description": self.archetype.description,
            "traits": list(self.archetype.traits),
            "strengths": list(self.archetype.strengths),
            "weaknesses": list(self.archetype.weaknesses),
            "tips": list(self.tips),
            "copyTradingSafety": self.copy_trading_safety.to_dict(),
            "isNewWallet": self.is_new_wallet,
            "stats": dict(self.stats),
        }


@dataclass
class RecentTransaction:
    """Normalized transaction preview row."""
    type: TransactionType
    token: str
    amount: float
    timestamp: Optional[str]
    status: str
    fee: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "token": self.token,
            "amount": self.amount,
            "timestamp": self.timestamp,
            "status": self.status,
            "fee": self.fee,
        }


@dataclass
class WalletAnalysis:
    """Aggregate root returned by POST /analyze-wallet."""
    wallet_address: str
    wallet_overview: Dict[str, Any]
    token_holdings: List[TokenHolding]
    recent_transactions: List[RecentTransaction]
    daily_trade_stats: List[DailyTradeStat]
    metrics: Metrics
    risk_metrics: RiskMetrics
    trading_behavior: TradingBehavior
    profile: WalletProfile
    data_fidelity: Dict[str, DataFidelity]
    analyzed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def source(self) -> str:
        if self.data_fidelity.get("transactions") == DataFidelity.REAL:
            return "live"
        return "fallback"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "walletAddress": self.wallet_address,
            "walletOverview": self.wallet_overview,
            "tokenHoldings": [h.to_dict() for h in self.token_holdings],
            "recentTransactions": [t.to_dict() for t in self.recent_transactions],
            "dailyTradeStats": [d.to_dict() for d in self.daily_trade_stats],
            "metrics": self.metrics.to_dict(),
            "riskMetrics": self.risk_metrics.to_dict(),
            "tradingBehavior": self.trading_behavior.to_dict(),
            "profile": self.profile.to_dict(),
            "source": self.source,
            "dataFidelity": {k: v.value for k, v in self.data_fidelity.items()},
            "analyzedAt": self.analyzed_at.isoformat(),
        }


@dataclass
class Tweet:
    id: str
    text: str
    created_at: str
    username: Optional[str] = None
    likes: int = 0
    retweets: int = 0
    url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "created_at": self.created_at,
            "username": self.username,
            "likes": self.likes,
            "retweets": self.retweets,
            "url": self.url,
        }
