"""Lookup tables and value helpers shared by the adapters.

Keyword matching (title translation, market-moving allow-list, country
labels) is expressed as ordered ``(pattern, label)`` tables evaluated by
:func:`first_match`, so every rule is data and can be tested alone.
Display labels are Portuguese: the dashboard is pt-BR.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from .common_types import Sentiment

# ── Lookup tables ───────────────────────────────────────────────

# Most specific patterns first – "core cpi" must win over "cpi".
TITLE_TRANSLATIONS: tuple[tuple[str, str], ...] = (
    ("nonfarm payrolls", "Non-Farm Payrolls"),
    ("nonfarm", "Non-Farm Payrolls"),
    ("core cpi", "Core CPI"),
    ("cpi", "CPI (Inflação)"),
    ("ppi", "PPI (Preços Produtor)"),
    ("gdp", "PIB"),
    ("fomc", "Decisão FOMC"),
    ("interest rate", "Taxa de Juros"),
    ("retail sales", "Vendas no Varejo"),
    ("unemployment", "Taxa de Desemprego"),
    ("ism manufacturing", "ISM Manufatura"),
    ("ism services", "ISM Serviços"),
    ("consumer confidence", "Confiança do Consumidor"),
    ("jobless", "Pedidos Seguro Desemprego"),
    ("pce", "PCE (Inflação Fed)"),
    ("housing", "Dados Imobiliários"),
    ("trade balance", "Balança Comercial"),
)

# Release types kept even when the provider rates them low impact.
MARKET_MOVING_KEYWORDS: tuple[str, ...] = (
    "nonfarm", "payroll", "cpi", "ppi", "gdp", "fomc", "interest rate",
    "unemployment", "retail sales", "ism", "consumer confidence",
    "housing", "jobless", "core cpi", "ecb", "fed chair", "pce",
    "manufacturing", "services", "trade balance", "treasury",
)

# Provider country code/name aliases → canonical code.
COUNTRY_ALIASES: dict[str, str] = {
    "US": "US",
    "USA": "US",
    "UNITED STATES": "US",
    "EU": "EU",
    "EMU": "EU",
    "EUROZONE": "EU",
    "EURO AREA": "EU",
    "UK": "GB",
    "GB": "GB",
    "UNITED KINGDOM": "GB",
    "GREAT BRITAIN": "GB",
}

COUNTRY_LABELS: tuple[tuple[str, str], ...] = (
    ("EU", "🇪🇺 Europa"),
    ("GB", "🇬🇧 Reino Unido"),
    ("US", "🇺🇸 EUA"),
)
DEFAULT_COUNTRY_LABEL = "🇺🇸 EUA"

MONTHS_PT: tuple[str, ...] = (
    "JAN", "FEV", "MAR", "ABR", "MAI", "JUN",
    "JUL", "AGO", "SET", "OUT", "NOV", "DEZ",
)

IMPACT_LEVELS: frozenset[str] = frozenset({"high", "medium", "low"})


def as_text(value: Any) -> str:
    """Provider field as a string; ``None`` becomes ``""``.

    Feeds occasionally send numbers where text is expected (country
    ``840``, impact ``3``); those are matched as their string form.
    """
    return "" if value is None else str(value)


def first_match(text: Any, table: Iterable[tuple[str, str]], default: str) -> str:
    """Return the label of the first pattern contained in *text* (case-insensitive)."""
    haystack = as_text(text).lower()
    for pattern, label in table:
        if pattern.lower() in haystack:
            return label
    return default


def translate_title(raw_title: Any) -> str:
    fallback = as_text(raw_title).strip() or "Evento Econômico"
    return first_match(raw_title, TITLE_TRANSLATIONS, fallback)


def is_market_moving(event_name: Any) -> bool:
    name = as_text(event_name).lower()
    return any(k in name for k in MARKET_MOVING_KEYWORDS)


def canonical_country(raw: Any) -> str:
    """Map a provider country field to ``US``/``EU``/``GB`` (or its upper-cased self)."""
    key = as_text(raw).strip().upper()
    return COUNTRY_ALIASES.get(key, key)


def country_label(raw: Any) -> str:
    code = canonical_country(raw)
    for pattern, label in COUNTRY_LABELS:
        if code == pattern:
            return label
    return DEFAULT_COUNTRY_LABEL


def normalize_impact(raw: Any) -> str:
    impact = as_text(raw).strip().lower() or "medium"
    return impact if impact in IMPACT_LEVELS else "medium"


# ── Numbers ─────────────────────────────────────────────────────


def to_float(value: Any) -> float | None:
    """Parse numeric-like values; ``None`` for missing, non-numeric or NaN."""
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(f) or math.isinf(f) else f


def round_half_up(x: float) -> int:
    """Round to the nearest integer with halves rounded up (2.5 → 3, -2.5 → -2)."""
    return math.floor(x + 0.5)


def fmt_fixed(x: float, places: int) -> str:
    """Fixed-decimal label with half-up rounding (``fmt_fixed(4.125, 2) == "4.13"``).

    Goes through the shortest repr of *x* so that values like 4.125 are
    rounded as written rather than by their binary expansion.
    """
    try:
        d = Decimal(repr(float(x)))
    except InvalidOperation:
        return str(x)
    quant = Decimal(1).scaleb(-places)
    return str(d.quantize(quant, rounding=ROUND_HALF_UP))


def round2(x: float) -> float:
    return float(fmt_fixed(x, 2))


def actual_sentiment(actual: Any, estimate: Any, previous: Any) -> Sentiment:
    """Tag a released value against consensus (or the prior print when no consensus).

    Non-numeric values cannot be ranked and are ``neutral``.
    """
    a = to_float(actual)
    ref = to_float(estimate)
    if ref is None:
        ref = to_float(previous)
    if ref is None:
        ref = 0.0
    if a is None:
        return "neutral"
    if a > ref:
        return "positive"
    if a < ref:
        return "negative"
    return "neutral"
