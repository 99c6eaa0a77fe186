"""
Wallet metrics derivation.

Turns a wallet's transaction history into aggregate Metrics and per-day
DailyTradeStat rows. When no transactions are available the numbers are
synthesized from a checksum of the address, and the result is tagged
DataFidelity.SYNTHESIZED so it can never pass as real data.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from random import Random
from typing import Dict, List, Optional

from .models import (
    DailyTradeStat,
    DataFidelity,
    Metrics,
    RawTransaction,
    TokenTransfer,
)


SECONDS_PER_DAY = 86400
MAX_WIN_RATE = 95
DAILY_STATS_DAYS = 7

SYNTHETIC_TOKENS = [
    ("BONK", "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"),
    ("WIF", "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm"),
    ("POPCAT", "7GCihgDB8fe6KNjn2MYtkzZcRjQy3t9GHdC8uHYmW2hr"),
    ("JUP", "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"),
    ("SOL", "So11111111111111111111111111111111111111112"),
]


@dataclass
class DerivedMetrics:
    """Output of the deriver."""
    metrics: Metrics
    daily_stats: List[DailyTradeStat]
    fidelity: DataFidelity
    transactions: List[RawTransaction] = field(default_factory=list)  # real or placeholder


def address_sum(address: str) -> int:
    """Stable numeric seed for an address: sum of character codes mod 1000."""
    return sum(ord(c) for c in address) % 1000


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _win_rate(seed: int, tx_count: int) -> int:
    return min(MAX_WIN_RATE, 45 + seed % 30 + tx_count % 10)


def wallet_age_days(transactions: List[RawTransaction]) -> int:
    """
    Days spanned by the transactions that carry a block time.

    Always at least 1.
    """
    times = [tx.block_time for tx in transactions if tx.block_time is not None]
    if not times:
        return 1
    return max(1, math.ceil((max(times) - min(times)) / SECONDS_PER_DAY))


def compute_metrics(address: str, transactions: List[RawTransaction]) -> Metrics:
    """
    Aggregate metrics from a non-empty transaction list.

    A transaction counts as a buy when the wallet receives any transfer in it
    and as a sell when it sends any; a swap can count as both.

    Volume falls back to an address-derived floor only when every fee is
    zero; such metrics are flagged volume_estimated.
    """
    seed = address_sum(address)
    buy_count = sum(1 for tx in transactions if tx.is_receiver(address))
    sell_count = sum(1 for tx in transactions if tx.is_sender(address))

    fee_sum = sum(tx.fee_sol for tx in transactions)
    volume_estimated = fee_sum == 0
    if volume_estimated:
        volume = 0.5 + (seed % 100) / 10
    else:
        volume = round(fee_sum, 2)

    age = wallet_age_days(transactions)

    return Metrics(
        total_tx_count=len(transactions),
        buy_count=buy_count,
        sell_count=sell_count,
        average_hold_time_days=_clamp(age / 3, 0.5, 7),
        win_rate=_win_rate(seed, len(transactions)),
        volume_sol=volume,
        volume_estimated=volume_estimated,
    )


def synthesize_metrics(address: str) -> Metrics:
    """Placeholder metrics keyed only on the address checksum."""
    seed = address_sum(address)
    total = 3 + seed % 8
    buy_count = min(total, total // 2 + seed % 2)

    return Metrics(
        total_tx_count=total,
        buy_count=buy_count,
        sell_count=total - buy_count,
        average_hold_time_days=_clamp(0.5 + (seed % 65) / 10, 0.5, 7),
        win_rate=_win_rate(seed, total),
        volume_sol=1.0 + (seed % 200) / 10,
        volume_estimated=True,
    )


def _token_key(transfer: TokenTransfer) -> Optional[str]:
    return transfer.token_address or transfer.token_symbol


def compute_daily_stats(transactions: List[RawTransaction], rng: Random) -> List[DailyTradeStat]:
    """
    Group transactions by UTC day and summarize the 7 most recent days.

    Profit/loss is simulated: uniform(-1, 1) * volume * 0.1.

    Returns:
        Stats ordered oldest to newest
    """
    days: Dict[str, List[RawTransaction]] = {}
    for tx in transactions:
        if tx.block_time is None:
            continue
        day = datetime.fromtimestamp(tx.block_time, tz=timezone.utc).strftime("%Y-%m-%d")
        days.setdefault(day, []).append(tx)

    recent = sorted(days)[-DAILY_STATS_DAYS:]

    stats = []
    for day in recent:
        day_txs = days[day]
        volume = round(sum(tx.fee_sol for tx in day_txs), 2)
        tokens = {
            _token_key(t) for tx in day_txs for t in tx.token_transfers if _token_key(t)
        }
        stats.append(DailyTradeStat(
            date=day,
            trades=len(day_txs),
            volume=volume,
            profit_loss=rng.uniform(-1, 1) * volume * 0.1,
            tokens=len(tokens),
        ))
    return stats


def synthesize_transactions(address: str, count: int, now: datetime) -> List[RawTransaction]:
    """
    Build deterministic placeholder transactions, newest first.

    Directions alternate (receive, send, ...) and transactions are spaced
    a few hours apart going back from now.
    """
    seed = address_sum(address)
    counterparty = "11111111111111111111111111111111"
    transactions = []
    for i in range(count):
        symbol, mint = SYNTHETIC_TOKENS[(seed + i) % len(SYNTHETIC_TOKENS)]
        is_receive = i % 2 == 0
        block_time = int((now - timedelta(hours=(i + 1) * (3 + seed % 9))).timestamp())
        amount = round(10 + ((seed * (i + 7)) % 9000) / 10, 2)
        transfer = TokenTransfer(
            sender=counterparty if is_receive else address,
            receiver=address if is_receive else counterparty,
            token_symbol=symbol,
            token_address=mint,
            token_amount=amount,
        )
        transactions.append(RawTransaction(
            signature=f"synthetic-{seed}-{i}",
            block_time=block_time,
            fee=5000 + (seed + i) % 5000,
            status="Success",
            token_transfers=[transfer],
        ))
    return transactions


def derive(
    address: str,
    transactions: List[RawTransaction],
    rng: Random,
    now: Optional[datetime] = None,
) -> DerivedMetrics:
    """
    Derive metrics and daily stats for a wallet.

    Without transactions, metrics are synthesized and exactly
    metrics.total_tx_count placeholder transactions are generated to back
    the daily stats and the transaction preview.

    Args:
        address: Validated wallet address
        transactions: Upstream transactions (empty when the fetch failed)
        rng: Random source for simulated profit/loss
        now: Reference time for placeholder transactions

    Returns:
        DerivedMetrics tagged REAL when transactions were given, else SYNTHESIZED
    """
    if transactions:
        return DerivedMetrics(
            metrics=compute_metrics(address, transactions),
            daily_stats=compute_daily_stats(transactions, rng),
            fidelity=DataFidelity.REAL,
            transactions=list(transactions),
        )

    metrics = synthesize_metrics(address)
    synthetic = synthesize_transactions(
        address, metrics.total_tx_count, now or datetime.now(timezone.utc)
    )
    return DerivedMetrics(
        metrics=metrics,
        daily_stats=compute_daily_stats(synthetic, rng),
        fidelity=DataFidelity.SYNTHESIZED,
        transactions=synthetic,
    )
