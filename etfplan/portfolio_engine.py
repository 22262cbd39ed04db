"""
etfplan/portfolio_engine.py
---------------------------
Pure transformation engine: settings + live prices → buy orders.

Design contract:
  - No price lookups
  - No settings store dependency
  - Fully deterministic and stateless (all methods are @staticmethod)
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import pandas as pd

from etfplan.knapsack_engine import KnapsackEngine
from etfplan.models import Investment, Settings
from etfplan.target_engine import TargetEngine

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = ["id", "name", "quantity", "price", "amount"]


class PortfolioEngine:
    """
    Turn the current portfolio into the next round of whole-unit purchases.

    Pipeline::

        TargetEngine.calc_etf_items     → EtfItem per asset
        KnapsackEngine.solve_etf_problem → buy quantity per asset
        PortfolioEngine._attach_orders   → Investment per asset

    The returned list has exactly one :class:`Investment` per asset in
    *settings*, in the same order, including zero-quantity ones.
    """

    # ------------------------------------------------------------------ #
    #  Public entry point
    # ------------------------------------------------------------------ #

    @staticmethod
    def next_investments(settings: Settings, prices: Sequence[float]) -> List[Investment]:
        """
        Compute the next investments for *settings*.

        Parameters
        ----------
        settings:
            Budget and tracked assets.  Budget and holdings are integers in
            the smallest monetary unit.
        prices:
            Current price per asset, positionally aligned with
            ``settings.etf_settings`` and already scaled to that unit.
            Every price must be > 0.

        Returns
        -------
        List[Investment]
        """
        assert all(p > 0 for p in prices), f"All prices must be positive (got {list(prices)})."

        items = TargetEngine.calc_etf_items(settings, prices)
        solution = KnapsackEngine.solve_etf_problem(settings.budget, items)

        investments = PortfolioEngine._attach_orders(settings, solution)
        logger.debug(
            "Planned %d units for %d of budget %d",
            sum(i.quantity for i in investments),
            PortfolioEngine.total_amount_spent(investments),
            settings.budget,
        )
        return investments

    # ------------------------------------------------------------------ #
    #  Summary queries
    # ------------------------------------------------------------------ #

    @staticmethod
    def total_amount_spent(
        investments: Sequence[Investment],
        prices: Optional[Sequence[float]] = None,
    ) -> float:
        """
        Sum of ``quantity * price`` over *investments*.

        *prices*, when given, are used instead of each investment's own
        (integer-truncated) price, e.g. to price the plan at the exact
        quotes it was computed from.
        """
        if prices is None:
            prices = [i.price for i in investments]
        return float(sum(i.quantity * p for i, p in zip(investments, prices)))

    @staticmethod
    def left_over_budget(
        budget: int,
        investments: Sequence[Investment],
        prices: Optional[Sequence[float]] = None,
    ) -> int:
        """Budget left after executing *investments*."""
        return budget - int(PortfolioEngine.total_amount_spent(investments, prices))

    @staticmethod
    def summary_frame(investments: Sequence[Investment]) -> pd.DataFrame:
        """
        Tabulate *investments* with one row per asset, in input order.

        Columns: ``id``, ``name``, ``quantity``, ``price``, ``amount``.
        """
        frame = pd.DataFrame(
            [(i.etf_id, i.name, i.quantity, i.price) for i in investments],
            columns=SUMMARY_COLUMNS[:-1],
        )
        frame["amount"] = frame["quantity"] * frame["price"]
        return frame[SUMMARY_COLUMNS]

    # ------------------------------------------------------------------ #
    #  Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _attach_orders(settings: Settings, solution) -> List[Investment]:
        """Zip solver output back onto the asset identities."""
        assert len(solution) == len(settings.etf_settings)
        output = []
        for (item, quantity), etf in zip(solution, settings.etf_settings):
            output.append(Investment(
                etf_id=etf.id,
                name=etf.name,
                quantity=quantity,
                price=item.price,
            ))
        return output
