"""Yahoo Finance chart adapter (cross-asset market indicators).

Queries ``/v8/finance/chart/{symbol}`` one symbol at a time with a
fixed pause in between to stay under Yahoo's rate limit.  A symbol that
fails is left out of the list; it never aborts the others.

``fetch_closes`` is shared with the probability adapter, which reads the
13-week T-bill yield trend from the same endpoint.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Literal
from urllib.parse import quote

import httpx

from ._http import _sanitize_exc, fetch_for, safe_json
from .common_types import MarketIndicator, MarketSection
from .config import Config
from .error_taxonomy import PayloadError
from .fallback import SOFT_FAILURES, SectionResult
from .normalize import fmt_fixed, round2, to_float

logger = logging.getLogger(__name__)

YAHOO_CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart/{symbol}"
YAHOO_SOURCE = "Yahoo Finance"

ValueFormat = Literal["plain", "usd", "percent3"]


@dataclass(frozen=True, slots=True)
class SymbolSpec:
    symbol: str
    name: str
    desc: str
    icon: str
    icon_class: str
    value_format: ValueFormat = "plain"


MARKET_SYMBOLS: tuple[SymbolSpec, ...] = (
    SymbolSpec("^GSPC", "S&P 500", "Índice americano", "sp500", "fas fa-chart-line"),
    SymbolSpec("DX-Y.NYB", "DXY", "Índice do Dólar", "dxy", "fas fa-dollar-sign"),
    SymbolSpec("^VIX", "VIX", "Índice de Volatilidade", "vix", "fas fa-bolt"),
    SymbolSpec("GC=F", "Ouro", "XAU/USD", "gold", "fas fa-coins", "usd"),
    SymbolSpec("CL=F", "Petróleo WTI", "Crude Oil", "oil", "fas fa-oil-can", "usd"),
    SymbolSpec("^TNX", "Treasury 10Y", "Yield 10 Anos", "treasury", "fas fa-percentage", "percent3"),
)


def format_value(price: float, value_format: ValueFormat) -> str:
    if value_format == "usd":
        return "$" + fmt_fixed(price, 2)
    if value_format == "percent3":
        return fmt_fixed(price, 3) + "%"
    return fmt_fixed(price, 2)


def parse_closes(payload: Any, symbol: str) -> list[float]:
    """Non-null daily closes from a chart payload, oldest first."""
    try:
        result = payload["chart"]["result"][0]
        raw = result["indicators"]["quote"][0]["close"]
    except (KeyError, IndexError, TypeError):
        raise PayloadError(f"Yahoo chart for {symbol} has no close series", source="yahoo") from None
    if not isinstance(raw, list):
        raise PayloadError(f"Yahoo chart for {symbol} has no close series", source="yahoo")
    closes = [c for c in (to_float(v) for v in raw) if c is not None]
    if not closes:
        raise PayloadError(f"Yahoo chart for {symbol} has no valid closes", source="yahoo")
    return closes


def build_indicator(spec: SymbolSpec, closes: list[float]) -> MarketIndicator:
    """Indicator from closes (oldest first); a single close means 0 % change."""
    current = closes[-1]
    prev = closes[-2] if len(closes) >= 2 else current
    change = (current - prev) / prev * 100 if prev else 0.0
    return MarketIndicator(
        name=spec.name,
        desc=spec.desc,
        icon=spec.icon,
        icon_class=spec.icon_class,
        value=format_value(current, spec.value_format),
        raw_value=current,
        change=round2(change),
        prev_close=prev,
    )


class YahooChartClient:
    """Thin wrapper over the chart endpoint."""

    def __init__(self, cfg: Config, client: httpx.Client) -> None:
        self.cfg = cfg
        self.client = client

    def fetch_closes(self, symbol: str, range_: str = "5d") -> list[float]:
        """GET daily closes for *symbol* over *range_* (e.g. ``5d``, ``30d``)."""
        url = YAHOO_CHART_URL.format(symbol=quote(symbol, safe=""))
        r = fetch_for(self.cfg, self.client, url, params={"interval": "1d", "range": range_})
        return parse_closes(safe_json(r, "yahoo"), symbol)


class MarketIndicatorAdapter:
    """Market section: one sequential chart request per symbol."""

    section = "marketIndicators"

    def __init__(
        self,
        cfg: Config,
        client: httpx.Client,
        symbols: tuple[SymbolSpec, ...] = MARKET_SYMBOLS,
    ) -> None:
        self.cfg = cfg
        self.chart = YahooChartClient(cfg, client)
        self.symbols = symbols

    def fetch_indicators(self) -> list[MarketIndicator]:
        indicators: list[MarketIndicator] = []
        for idx, spec in enumerate(self.symbols):
            if idx > 0 and self.cfg.market_request_delay_s > 0:
                time.sleep(self.cfg.market_request_delay_s)
            try:
                closes = self.chart.fetch_closes(spec.symbol, "5d")
            except SOFT_FAILURES as exc:
                logger.warning("%s (%s) omitted: %s", spec.name, spec.symbol, _sanitize_exc(exc))
                continue
            ind = build_indicator(spec, closes)
            logger.info("%s: %s (%+.2f%%)", ind.name, ind.value, ind.change)
            indicators.append(ind)
        return indicators

    def fetch(self) -> SectionResult[MarketSection]:
        indicators = self.fetch_indicators()
        section = MarketSection(tuple(indicators), YAHOO_SOURCE)
        if not indicators:
            return SectionResult.degraded(section, "no symbol returned data")
        return SectionResult.success(section)
