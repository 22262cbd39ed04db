"""
etfplan/pipeline.py
-------------------
Glue between the settings store, the price source and the planner core.

Storage and network access live here and only here.  Any collaborator
failure propagates as a :class:`~etfplan.errors.PlannerError` before the
core is called, so :class:`PortfolioEngine` only ever sees a complete,
valid price list.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

from etfplan.config import CENTS_PER_UNIT
from etfplan.errors import LookupAmbiguousError, LookupNotFoundError
from etfplan.models import EtfInfo, EtfSetting, Investment, Settings
from etfplan.portfolio_engine import PortfolioEngine

if TYPE_CHECKING:
    from etfplan.price_source import YahooPriceSource
    from etfplan.settings_store import SettingsStore

logger = logging.getLogger(__name__)


def get_settings(store: "SettingsStore") -> Settings:
    return store.load_settings()


def persist_settings(store: "SettingsStore", settings: Settings) -> None:
    """Replace the stored budget and every stored asset with *settings*."""
    store.replace_settings(settings)


def fetch_prices(settings: Settings, source: "YahooPriceSource") -> List[float]:
    """Current price of every asset in *settings*, scaled to cents."""
    prices = source.get_prices([etf.id for etf in settings.etf_settings])
    return [p * CENTS_PER_UNIT for p in prices]


def suggest_investments(
    store: "SettingsStore",
    source: "YahooPriceSource",
) -> List[Investment]:
    """Load settings, price every asset and plan the next purchases."""
    settings = get_settings(store)
    if not settings.etf_settings:
        logger.info("No assets tracked; nothing to plan.")
        return []

    prices = fetch_prices(settings, source)
    logger.info(
        "Planning budget %d across %d assets", settings.budget, len(prices)
    )
    return PortfolioEngine.next_investments(settings, prices)


def search_etf_info(source: "YahooPriceSource", isin: str) -> EtfInfo:
    """
    Resolve *isin* to exactly one listing.

    Raises
    ------
    LookupNotFoundError
        The search returned nothing.
    LookupAmbiguousError
        The search returned more than one listing.
    """
    hits = source.search_by_isin(isin)
    if not hits:
        raise LookupNotFoundError("No listing found for ISIN", isin)
    if len(hits) > 1:
        tickers = ", ".join(h.ticker for h in hits)
        raise LookupAmbiguousError(f"Several listings found ({tickers})", isin)
    return hits[0]


def register_etf(
    store: "SettingsStore",
    source: "YahooPriceSource",
    isin: str,
    proportion: float,
    cumulative: int = 0,
) -> EtfSetting:
    """Look *isin* up and store it (keyed by ticker) with the given weight."""
    info = search_etf_info(source, isin)
    etf = EtfSetting(
        id=info.ticker,
        isin=info.isin,
        name=info.name,
        ideal_proportion=proportion,
        cumulative=cumulative,
    )
    store.upsert_asset(etf)
    return etf
