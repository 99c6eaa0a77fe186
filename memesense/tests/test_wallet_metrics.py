"""Tests for wallet metrics derivation."""

from datetime import datetime, timezone
from random import Random

import pytest

from memesense.core.models import DataFidelity, RawTransaction, TokenTransfer
from memesense.core.wallet_metrics import (
    address_sum,
    compute_daily_stats,
    compute_metrics,
    derive,
    synthesize_metrics,
    synthesize_transactions,
    wallet_age_days,
)


WALLET = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
OTHER = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
DAY = 86400
NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


def make_tx(block_time, sender=OTHER, receiver=WALLET, fee=5000, mint="mintA", symbol="BONK"):
    return RawTransaction(
        signature=f"sig-{block_time}-{sender[:3]}",
        block_time=block_time,
        fee=fee,
        token_transfers=[TokenTransfer(
            sender=sender, receiver=receiver, token_symbol=symbol, token_address=mint, token_amount=1.0,
        )],
    )


def test_address_sum_is_char_code_sum_mod_1000():
    assert address_sum("A") == 65
    assert address_sum("") == 0
    assert address_sum(WALLET) == sum(ord(c) for c in WALLET) % 1000


class TestComputeMetrics:

    def test_buy_and_sell_counts(self):
        base = 1_715_000_000
        txs = [
            make_tx(base),
            make_tx(base + 60),
            make_tx(base + 120, sender=WALLET, receiver=OTHER),
        ]

        metrics = compute_metrics(WALLET, txs)

        assert metrics.total_tx_count == 3
        assert metrics.buy_count == 2
        assert metrics.sell_count == 1

    def test_volume_is_fee_sum_in_sol(self):
        txs = [make_tx(1_715_000_000 + i, fee=500_000_000) for i in range(3)]
        assert compute_metrics(WALLET, txs).volume_sol == 1.5

    def test_zero_volume_gets_address_floor(self):
        txs = [make_tx(1_715_000_000, fee=0)]
        expected = 0.5 + (address_sum(WALLET) % 100) / 10

        metrics = compute_metrics(WALLET, txs)

        assert metrics.volume_sol == pytest.approx(expected)
        assert metrics.volume_estimated is True

    def test_sub_cent_fees_are_not_replaced_by_floor(self):
        txs = [make_tx(1_715_000_000 + i, fee=5000) for i in range(50)]

        metrics = compute_metrics(WALLET, txs)

        assert metrics.volume_sol == 0.0
        assert metrics.volume_estimated is False
        assert metrics.to_dict()["volume"] == "0.00 SOL"

    def test_real_volume_not_estimated(self):
        txs = [make_tx(1_715_000_000, fee=500_000_000)]
        assert compute_metrics(WALLET, txs).volume_estimated is False

    def test_win_rate_capped_at_95(self):
        txs = [make_tx(1_715_000_000 + i) for i in range(9)]
        metrics = compute_metrics(WALLET, txs)
        assert metrics.win_rate == min(95, 45 + address_sum(WALLET) % 30 + 9)
        assert metrics.win_rate <= 95

    def test_hold_time_clamped(self):
        one_day = [make_tx(1_715_000_000)]
        long_history = [make_tx(1_715_000_000), make_tx(1_715_000_000 + 60 * DAY)]

        assert compute_metrics(WALLET, one_day).average_hold_time_days == 0.5
        assert compute_metrics(WALLET, long_history).average_hold_time_days == 7


def test_wallet_age_days():
    assert wallet_age_days([]) == 1
    assert wallet_age_days([make_tx(None)]) == 1
    assert wallet_age_days([make_tx(0), make_tx(int(2.5 * DAY))]) == 3


@pytest.mark.parametrize("address", [
    WALLET,
    OTHER,
    "So11111111111111111111111111111111111111112",
    "11111111111111111111111111111111",
])
def test_synthesized_metrics_bounds(address):
    metrics = synthesize_metrics(address)

    assert 3 <= metrics.total_tx_count <= 10
    assert metrics.buy_count + metrics.sell_count == metrics.total_tx_count
    assert metrics.win_rate <= 95
    assert 0.5 <= metrics.average_hold_time_days <= 7


def test_synthesized_metrics_are_deterministic():
    assert synthesize_metrics(WALLET) == synthesize_metrics(WALLET)


class TestDailyStats:

    def test_keeps_seven_most_recent_days_oldest_first(self):
        base = 1_715_000_000
        txs = [make_tx(base + i * DAY) for i in range(10)]

        stats = compute_daily_stats(txs, Random(1))

        assert len(stats) == 7
        dates = [s.date for s in stats]
        assert dates == sorted(dates)
        newest = datetime.fromtimestamp(base + 9 * DAY, tz=timezone.utc).strftime("%Y-%m-%d")
        assert dates[-1] == newest

    def test_counts_trades_and_distinct_tokens(self):
        base = 1_715_040_000
        txs = [
            make_tx(base, mint="mintA"),
            make_tx(base + 10, mint="mintA"),
            make_tx(base + 20, mint="mintB"),
        ]

        stats = compute_daily_stats(txs, Random(1))

        assert len(stats) == 1
        assert stats[0].trades == 3
        assert stats[0].tokens == 2

    def test_profit_loss_bounded_by_volume(self):
        txs = [make_tx(1_715_000_000, fee=1_000_000_000)]
        stat = compute_daily_stats(txs, Random(3))[0]
        assert abs(stat.profit_loss) <= stat.volume * 0.1

    def test_transactions_without_block_time_are_skipped(self):
        assert compute_daily_stats([make_tx(None)], Random(1)) == []


def test_synthesized_transactions_alternate_direction():
    txs = synthesize_transactions(WALLET, 4, NOW)

    assert len(txs) == 4
    assert txs[0].is_receiver(WALLET)
    assert txs[1].is_sender(WALLET)
    times = [tx.block_time for tx in txs]
    assert times == sorted(times, reverse=True)
    assert all(t < NOW.timestamp() for t in times)


class TestDerive:

    def test_real_path(self):
        txs = [make_tx(1_715_000_000 + i) for i in range(4)]

        derived = derive(WALLET, txs, Random(1), NOW)

        assert derived.fidelity == DataFidelity.REAL
        assert derived.metrics.total_tx_count == 4
        assert derived.transactions == txs

    def test_synthesized_path_backs_total_with_transactions(self):
        derived = derive(WALLET, [], Random(1), NOW)

        assert derived.fidelity == DataFidelity.SYNTHESIZED
        assert len(derived.transactions) == derived.metrics.total_tx_count
        assert derived.metrics.volume_estimated is True
        assert derived.daily_stats
