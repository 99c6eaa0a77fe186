"""Tests for trader archetype classification."""

import pytest

from memesense.core.archetypes import (
    ARCHETYPES,
    NEW_WALLET_PENALTY,
    TIPS,
    archetype_for,
    classify,
    copy_trading_safety,
    risk_metrics_for,
    select_tips,
    trading_behavior_for,
)
from memesense.core.models import Metrics, RiskMetrics, TokenHolding
from memesense.core.wallet_metrics import address_sum


def make_metrics(total=20, volume=4.0):
    return Metrics(
        total_tx_count=total,
        buy_count=total // 2,
        sell_count=total - total // 2,
        average_hold_time_days=2.0,
        win_rate=60,
        volume_sol=volume,
    )


def test_eight_distinct_archetypes():
    assert len(ARCHETYPES) == 8
    assert len({a.trading_style for a in ARCHETYPES}) == 8
    assert ARCHETYPES[0].personality == "The Strategist"
    assert ARCHETYPES[-1].personality == "The Swing Trader"


def test_archetype_for_is_pure():
    for seed in range(50):
        assert archetype_for(seed) is archetype_for(seed)
        assert archetype_for(seed) is ARCHETYPES[seed % 8]


@pytest.mark.parametrize("seed", range(0, 1000, 37))
def test_three_distinct_tips(seed):
    tips = select_tips(seed)
    assert len(tips) == 3
    assert len(set(tips)) == 3
    assert all(tip in TIPS for tip in tips)


class TestCopyTradingSafety:

    @pytest.mark.parametrize("seed", range(0, 1000, 13))
    def test_score_in_range(self, seed):
        for tx_count in (0, 9, 10, 500):
            safety = copy_trading_safety(seed, tx_count)
            assert 0 <= safety.score <= 100
            assert safety.rating in ("Safe", "Medium", "Risky")

    def test_new_wallet_penalty(self):
        seed = 123
        established = copy_trading_safety(seed, 25)
        new = copy_trading_safety(seed, 5)

        assert new.score == max(0, established.score - NEW_WALLET_PENALTY)
        assert any("New or low-activity wallet" in r for r in new.reasons)
        assert not any("New or low-activity wallet" in r for r in established.reasons)

    def test_rating_thresholds(self):
        for seed in range(200):
            safety = copy_trading_safety(seed, 50)
            if safety.score >= 70:
                assert safety.rating == "Safe"
            elif safety.score >= 40:
                assert safety.rating == "Medium"
            else:
                assert safety.rating == "Risky"

    def test_reasons_end_with_archetype_note(self):
        safety = copy_trading_safety(5, 50)
        assert safety.reasons[0].startswith(f"Score {safety.score}/100")
        assert safety.reasons[-1] == archetype_for(5).copy_trading_rating


class TestRiskMetrics:

    def test_largest_position_share(self):
        holdings = [
            TokenHolding("SOL", "Solana", 1, 150.0),
            TokenHolding("BONK", "Bonk", 2_500_000, 50.0),
        ]

        risk = risk_metrics_for(10, holdings)

        assert risk.largest_position == "SOL (75%)"
        assert risk.diversification_level == "Low"
        assert risk.risk_score == 30

    def test_no_holdings(self):
        risk = risk_metrics_for(10, [])
        assert risk.largest_position == "None"

    def test_volatility_follows_risk_score(self):
        assert risk_metrics_for(50, []).volatility_exposure == "High"    # score 70
        assert risk_metrics_for(25, []).volatility_exposure == "Medium"  # score 45
        assert risk_metrics_for(5, []).volatility_exposure == "Low"      # score 25

    def test_diversification_by_holding_count(self):
        holdings = [TokenHolding(f"T{i}", f"Token {i}", 1, 1.0) for i in range(8)]
        assert risk_metrics_for(0, holdings).diversification_level == "High"
        assert risk_metrics_for(0, holdings[:4]).diversification_level == "Medium"


def test_trading_behavior_average_size():
    behavior = trading_behavior_for(3, make_metrics(total=8, volume=4.0))
    assert behavior.avg_transaction_size == "0.50 SOL"


class TestClassify:

    def test_profile_uses_address_seed(self, sample_wallet_address):
        risk = RiskMetrics(50, "Low", "None", "High")
        profile = classify(sample_wallet_address, make_metrics(total=20), risk)

        seed = address_sum(sample_wallet_address)
        assert profile.archetype is archetype_for(seed)
        assert profile.tips == select_tips(seed)
        assert profile.is_new_wallet is False
        assert profile.stats["riskUsage"] == "Aggressive"
        assert profile.stats["winRate"] == "60%"

    def test_metrics_do_not_change_archetype(self, sample_wallet_address):
        risk = RiskMetrics(30, "Low", "None", "Low")
        few = classify(sample_wallet_address, make_metrics(total=3), risk)
        many = classify(sample_wallet_address, make_metrics(total=300), risk)

        assert few.trading_style == many.trading_style
        assert few.is_new_wallet is True
        assert many.is_new_wallet is False

    def test_profile_json_shape(self, sample_wallet_address):
        risk = RiskMetrics(30, "Low", "None", "Low")
        data = classify(sample_wallet_address, make_metrics(), risk).to_dict()

        for key in ("tradingStyle", "personality", "emoji", "description", "traits",
                    "strengths", "weaknesses", "tips", "copyTradingSafety", "isNewWallet", "stats"):
            assert key in data
        assert data["stats"]["riskUsage"] == "Conservative"
