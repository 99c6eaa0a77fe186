"""
Trader archetype classification.

The archetype, tips and copy-trading safety score are placeholder content
keyed on the address checksum, not on observed behavior: the same address
always gets the same profile. Derived metrics only feed the new-wallet flag
and the stats block.
"""

from typing import Dict, List

from .models import (
    CopyTradingSafety,
    Metrics,
    RiskMetrics,
    TokenHolding,
    TraderArchetype,
    TradingBehavior,
    WalletProfile,
)
from .wallet_metrics import address_sum


NEW_WALLET_TX_THRESHOLD = 10
NEW_WALLET_PENALTY = 30


ARCHETYPES: List[TraderArchetype] = [
    TraderArchetype(
        personality="The Strategist",
        trading_style="Strategic Opportunist",
        emoji="🧠",
        description="Calculated, research-driven, and methodical in approach. Values fundamentals even in memecoins.",
        traits=("Patient", "Analytical", "Risk-aware"),
        strengths=(
            "Makes informed decisions based on deep research and timing",
            "Rarely FOMO buys",
            "Strong risk management",
        ),
        weaknesses=(
            "Sometimes misses explosive opportunities due to over-analysis",
            "Too conservative on position sizing",
        ),
        copy_trading_rating="High - Consistent returns with methodical approach make them reliable for copy trading.",
    ),
    TraderArchetype(
        personality="The Sniper",
        trading_style="Precision Hunter",
        emoji="🎯",
        description="Quick and decisive. Targets specific opportunities and executes with precision.",
        traits=("Fast", "Decisive", "Focused"),
        strengths=(
            "Excellent at capitalizing on short-term opportunities",
            "Times market momentum well",
        ),
        weaknesses=(
            "Can be too trigger-happy, buying without sufficient research",
            "Gains depend on execution speed",
        ),
        copy_trading_rating="Medium - Good for quick gains, but requires active monitoring due to rapid trades.",
    ),
    TraderArchetype(
        personality="The Diamond Hand",
        trading_style="Hoarding Collector",
        emoji="💎",
        description="The ultimate HODLer. Strong conviction in assets, unfazed by volatility and temporary dips.",
        traits=("Patient", "Conviction", "Long-term"),
        strengths=(
            "Able to weather market storms",
            "Benefits from long-term growth trends",
        ),
        weaknesses=(
            "May miss profit-taking opportunities",
            "Sometimes holds declining assets too long",
        ),
        copy_trading_rating="Medium-High - Stable long-term gains, but requires patience during downturns.",
    ),
    TraderArchetype(
        personality="The Degen",
        trading_style="High-Risk Momentum Chaser",
        emoji="🔥",
        description="Lives for the thrill. Embraces high risk for potential astronomical returns.",
        traits=("Risk-taker", "Momentum-chaser", "Community-focused"),
        strengths=(
            "Not afraid to take big positions on early projects",
            "Catches viral runs early",
        ),
        weaknesses=(
            "Often overleveraged",
            "Prone to emotional decisions during volatility",
        ),
        copy_trading_rating="Low - High risk with extreme volatility makes copy trading unpredictable.",
    ),
    TraderArchetype(
        personality="The Oracle",
        trading_style="Early Trend Spotter",
        emoji="🔮",
        description="Visionary who spots trends before they become mainstream. Thinks long-term.",
        traits=("Visionary", "Trendsetter", "Patient"),
        strengths=(
            "Sees the bigger picture",
            "Invests early in future winners",
        ),
        weaknesses=(
            "Sometimes too early to market",
            "Opportunity cost while waiting for narratives to play out",
        ),
        copy_trading_rating="High - Excellent at identifying early trends, but returns may take time to materialize.",
    ),
    TraderArchetype(
        personality="The Newcomer",
        trading_style="Exploratory Learner",
        emoji="🔎",
        description="Fresh to the scene with fresh perspective. Still learning the ropes of crypto trading.",
        traits=("Curious", "Adaptable", "Learning"),
        strengths=(
            "Open to new strategies",
            "No emotional baggage from past trades",
            "Eager to learn",
        ),
        weaknesses=(
            "Limited trading history",
            "Still developing risk management skills",
            "Uncertain position sizing",
        ),
        copy_trading_rating="Low - Insufficient track record to evaluate consistency or strategy effectiveness.",
    ),
    TraderArchetype(
        personality="The Observer",
        trading_style="Cautious Researcher",
        emoji="👀",
        description="Cautious and thoughtful. Takes time to research and understand before committing.",
        traits=("Methodical", "Cautious", "Detail-oriented"),
        strengths=(
            "Careful approach to investments",
            "Thorough research",
            "Avoids impulsive decisions",
        ),
        weaknesses=(
            "May miss opportunities due to hesitation",
            "Limited exposure to market patterns",
        ),
        copy_trading_rating="Medium - Safe approach with moderate returns, but may miss some opportunities.",
    ),
    TraderArchetype(
        personality="The Swing Trader",
        trading_style="Wave Rider",
        emoji="🌊",
        description="Rides market waves with precision. Capitalizes on medium-term market movements.",
        traits=("Technical", "Responsive", "Balanced"),
        strengths=(
            "Excellent at identifying entry and exit points",
            "Balances risk and reward effectively",
        ),
        weaknesses=(
            "Requires active market monitoring",
            "May struggle in choppy market conditions",
        ),
        copy_trading_rating="High - Good balance of risk and reward with consistent trading patterns.",
    ),
]


TIPS: List[str] = [
    "Consider slightly increasing position size on high-conviction plays",
    "Set more aggressive take-profit targets for part of your position",
    "Implement trailing stops to maximize gains on trending tokens",
    "Take partial profits at 2x to recover your initial investment",
    "Check liquidity and holder distribution before entering new launches",
    "Avoid chasing green candles; wait for a pullback to enter",
    "Keep a trading journal to spot patterns in your wins and losses",
    "Limit any single memecoin to a small share of your portfolio",
    "Revoke token approvals you no longer use",
    "Set a daily loss limit and stop trading once it is hit",
    "Follow on-chain activity of tokens you hold, not only social sentiment",
    "Rotate some profits into SOL or stablecoins during euphoric phases",
]


RISK_USAGE = {
    "Low": "Conservative",
    "Medium": "Moderate",
    "High": "Aggressive",
}

BUY_FREQUENCIES = ["Several times a day", "Daily", "A few times a week", "Weekly", "Occasional"]
PREFERRED_TOKEN_TYPES = [
    "Memecoins", "New launches", "Blue-chip Solana tokens", "DeFi tokens", "Mixed",
]
TIME_OF_DAY_PATTERNS = [
    "Early morning (UTC)", "US market hours", "Asian session", "Late night (UTC)", "No clear pattern",
]


def archetype_for(seed: int) -> TraderArchetype:
    """Pick the archetype for a seed. Pure: same seed, same archetype."""
    return ARCHETYPES[seed % len(ARCHETYPES)]


def select_tips(seed: int) -> List[str]:
    """Three distinct tips at offsets 0, 3 and 7 from the seed."""
    count = len(TIPS)
    return [TIPS[(seed + offset) % count] for offset in (0, 3, 7)]


def _safety_rating(score: int) -> str:
    if score >= 70:
        return "Safe"
    if score >= 40:
        return "Medium"
    return "Risky"


def copy_trading_safety(seed: int, total_tx_count: int) -> CopyTradingSafety:
    """
    Copy-trading safety score in [0, 100].

    Wallets with fewer than 10 transactions are treated as new and lose
    30 points.
    """
    score = 35 + (seed * 37 + 11) % 61
    reasons = []

    if total_tx_count < NEW_WALLET_TX_THRESHOLD:
        score -= NEW_WALLET_PENALTY
        reasons.append(
            f"New or low-activity wallet ({total_tx_count} transactions): "
            f"-{NEW_WALLET_PENALTY} points"
        )

    score = max(0, min(100, score))
    rating = _safety_rating(score)
    reasons.insert(0, f"Score {score}/100 rated {rating}")
    reasons.append(archetype_for(seed).copy_trading_rating)

    return CopyTradingSafety(score=score, rating=rating, reasons=reasons)


def _diversification_level(holding_count: int) -> str:
    if holding_count >= 8:
        return "High"
    if holding_count >= 4:
        return "Medium"
    return "Low"


def risk_metrics_for(seed: int, holdings: List[TokenHolding]) -> RiskMetrics:
    """Heuristic risk summary from the seed and the enriched holdings."""
    risk_score = 20 + seed % 70

    total_value = sum(h.usd_value for h in holdings)
    if holdings and total_value > 0:
        largest = max(holdings, key=lambda h: h.usd_value)
        share = largest.usd_value / total_value * 100
        largest_position = f"{largest.symbol} ({share:.0f}%)"
    else:
        largest_position = "None"

    if risk_score >= 60:
        volatility = "High"
    elif risk_score >= 40:
        volatility = "Medium"
    else:
        volatility = "Low"

    return RiskMetrics(
        risk_score=risk_score,
        diversification_level=_diversification_level(len(holdings)),
        largest_position=largest_position,
        volatility_exposure=volatility,
    )


def trading_behavior_for(seed: int, metrics: Metrics) -> TradingBehavior:
    avg_size = metrics.volume_sol / metrics.total_tx_count if metrics.total_tx_count else 0.0
    return TradingBehavior(
        buy_frequency=BUY_FREQUENCIES[seed % len(BUY_FREQUENCIES)],
        avg_transaction_size=f"{avg_size:.2f} SOL",
        preferred_token_types=PREFERRED_TOKEN_TYPES[(seed // 7) % len(PREFERRED_TOKEN_TYPES)],
        time_of_day_pattern=TIME_OF_DAY_PATTERNS[(seed // 11) % len(TIME_OF_DAY_PATTERNS)],
    )


def classify(address: str, metrics: Metrics, risk: RiskMetrics) -> WalletProfile:
    """
    Build the wallet profile.

    Args:
        address: Validated wallet address
        metrics: Derived (real or synthesized) metrics
        risk: Risk summary, used for the riskUsage stat

    Returns:
        WalletProfile with archetype copy, tips and copy-trading safety
    """
    seed = address_sum(address)
    metrics_dict = metrics.to_dict()
    stats: Dict[str, str] = {
        "averageHoldTime": metrics_dict["averageHoldTime"],
        "winRate": metrics_dict["winRate"],
        "tradingVolume": metrics_dict["volume"],
        "riskUsage": RISK_USAGE.get(risk.volatility_exposure, "Moderate"),
    }

    return WalletProfile(
        archetype=archetype_for(seed),
        tips=select_tips(seed),
        copy_trading_safety=copy_trading_safety(seed, metrics.total_tx_count),
        is_new_wallet=metrics.total_tx_count < NEW_WALLET_TX_THRESHOLD,
        stats=stats,
    )
