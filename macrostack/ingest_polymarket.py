"""Rate-decision probability adapter.

Tiers, evaluated in order and never blended:

 1. **Polymarket** – open contracts tagged ``fed-interest-rate`` from the
    Gamma API.  A contract whose question mentions a cut (or a hike) sets
    that side's probability from its traded price; hold is the remainder.
 2. **T-bill trend** – 30 days of the 13-week T-bill yield (``^IRX``).
    Falling yields read as cut expectations, rising yields as hike
    expectations.  The band constants are heuristic, not calibrated.
 3. **Static default** – 25 / 65 / 10.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ._http import fetch_for, safe_json
from .common_types import ProbabilitySet
from .config import Config
from .error_taxonomy import PayloadError
from .fallback import SectionResult, Strategy, run_chain
from .ingest_yahoo import YahooChartClient
from .normalize import round_half_up, to_float

logger = logging.getLogger(__name__)

POLYMARKET_MARKETS_URL = "https://gamma-api.polymarket.com/markets"
POLYMARKET_SOURCE = "Polymarket"
TREND_SOURCE = "Treasury Futures (estimativa)"
DEFAULT_SOURCE = "estimativa (default)"

TREND_SYMBOL = "^IRX"
TREND_RANGE = "30d"

CUT_KEYWORDS: tuple[str, ...] = ("cut", "lower", "decrease")
HIKE_KEYWORDS: tuple[str, ...] = ("raise", "hike", "increase")

# Trend (percentage points over the window) beyond which the market is
# considered to be pricing a move.
_TREND_THRESHOLD = 0.1


def contract_price(market: dict[str, Any]) -> float | None:
    """Traded probability of the first outcome, or ``None`` if unusable.

    Gamma serialises ``outcomePrices`` as a JSON string
    (``'["0.12", "0.88"]'``); a plain list is accepted too.
    """
    prices = market.get("outcomePrices")
    if isinstance(prices, str):
        try:
            prices = json.loads(prices)
        except (json.JSONDecodeError, ValueError):
            prices = None
    price = None
    if isinstance(prices, list) and prices:
        price = to_float(prices[0])
    if not price:
        price = to_float(market.get("lastTradePrice"))
    if price is None or not (0 < price < 1):
        return None
    return price


def _direction(question: str) -> str | None:
    q = question.lower()
    if any(k in q for k in CUT_KEYWORDS):
        return "cut"
    if any(k in q for k in HIKE_KEYWORDS):
        return "hike"
    return None


def probabilities_from_markets(markets: Any) -> ProbabilitySet | None:
    """Scan contracts for cut/hike questions; ``None`` when none is usable.

    A later usable contract of the same direction overrides an earlier one.
    """
    if not isinstance(markets, list):
        raise PayloadError(
            f"Polymarket returned {type(markets).__name__} instead of list", source="polymarket",
        )
    cut = hike = 0
    for market in markets:
        if not isinstance(market, dict):
            continue
        direction = _direction(str(market.get("question") or market.get("title") or ""))
        if direction is None:
            continue
        price = contract_price(market)
        if price is None:
            continue
        if direction == "cut":
            cut = round_half_up(price * 100)
        else:
            hike = round_half_up(price * 100)
    if cut <= 0 and hike <= 0:
        return None
    return ProbabilitySet(cut=cut, hold=max(0, 100 - cut - hike), hike=hike, source=POLYMARKET_SOURCE)


def probabilities_from_trend(trend: float) -> ProbabilitySet:
    """Map a yield trend (last close minus first close) to probabilities."""
    if trend < -_TREND_THRESHOLD:
        cut = min(60, round_half_up(30 + abs(trend) * 20))
        hike = 5
    elif trend > _TREND_THRESHOLD:
        hike = min(30, round_half_up(5 + trend * 15))
        cut = 15
    else:
        return ProbabilitySet(cut=30, hold=60, hike=10, source=TREND_SOURCE)
    return ProbabilitySet(cut=cut, hold=100 - cut - hike, hike=hike, source=TREND_SOURCE)


def default_probabilities() -> ProbabilitySet:
    return ProbabilitySet(cut=25, hold=65, hike=10, source=DEFAULT_SOURCE)


class ProbabilityAdapter:
    """Probability section: Polymarket, then T-bill trend, then default."""

    section = "probabilities"

    def __init__(self, cfg: Config, client: httpx.Client) -> None:
        self.cfg = cfg
        self.client = client
        self.chart = YahooChartClient(cfg, client)

    def fetch_polymarket(self) -> ProbabilitySet | None:
        r = fetch_for(
            self.cfg,
            self.client,
            POLYMARKET_MARKETS_URL,
            params={"closed": "false", "tag": "fed-interest-rate", "limit": 10},
        )
        probs = probabilities_from_markets(safe_json(r, "polymarket"))
        if probs is not None:
            logger.info(
                "Polymarket odds: cut=%d%% hold=%d%% hike=%d%%", probs.cut, probs.hold, probs.hike,
            )
        return probs

    def fetch_trend(self) -> ProbabilitySet | None:
        closes = self.chart.fetch_closes(TREND_SYMBOL, TREND_RANGE)
        trend = closes[-1] - closes[0]
        probs = probabilities_from_trend(trend)
        logger.info(
            "T-bill trend %+.3f → cut=%d%% hold=%d%% hike=%d%%",
            trend, probs.cut, probs.hold, probs.hike,
        )
        return probs

    def fetch(self) -> SectionResult[ProbabilitySet]:
        return run_chain(
            self.section,
            [
                Strategy("polymarket", self.fetch_polymarket),
                Strategy("t-bill trend", self.fetch_trend),
                Strategy("static default", default_probabilities),
            ],
        )
