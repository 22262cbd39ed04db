"""
etfplan/target_engine.py
------------------------
Portfolio state → per-asset target holdings.

Design contract:
  - No price lookups, no storage access
  - No knapsack logic (see knapsack_engine.py)
  - Fully deterministic and stateless (all methods are @staticmethod)
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from etfplan.models import EtfItem, Settings

logger = logging.getLogger(__name__)


class TargetEngine:
    """
    Decide where each asset *should* end up after this round's budget is
    spent.

    The budget is not split by raw target weight.  Instead every asset is
    compared with its ideal share of the post-purchase portfolio and only
    assets *below* that share pull money towards them, proportionally to
    how far below they are::

        T       = sum(amounts) + budget
        ideal_i = w_i / sum(w) * T
        d_i     = max(ideal_i - amount_i, 0)
        t_i     = amount_i + budget * d_i / sum(d)

    Assets already above their ideal share keep their current amount as
    target, so the planner never buys more of an overweight position.
    """

    # ------------------------------------------------------------------ #
    #  Public entry points
    # ------------------------------------------------------------------ #

    @staticmethod
    def calc_targets(
        ideal_proportions: Sequence[float],
        amounts: Sequence[float],
        budget: float,
    ) -> List[float]:
        """
        Return the target amount for every asset.

        Parameters
        ----------
        ideal_proportions:
            Target weights.  They do not need to sum to one; zero or
            negative weights mean "no preference".
        amounts:
            Current holdings, positionally aligned with *ideal_proportions*.
        budget:
            Cash to deploy this round (>= 0).

        Returns
        -------
        List[float]
            ``amounts[i]`` plus this asset's share of *budget*.  The shares
            always add up to *budget*.
        """
        assert len(ideal_proportions) == len(amounts), (
            f"Got {len(ideal_proportions)} proportions for {len(amounts)} amounts."
        )
        if not amounts:
            return []

        # No usable weights at all → even split
        if sum(ideal_proportions) <= 0.0:
            return TargetEngine._even_split(amounts, budget)

        proportions = TargetEngine._normalize(ideal_proportions)

        total_amount = sum(amounts) + budget
        ideal_amounts = [p * total_amount for p in proportions]

        direction = [max(ideal - real, 0.0) for ideal, real in zip(ideal_amounts, amounts)]

        # Only reachable with a zero budget and a portfolio sitting exactly
        # on its ideal proportions.
        if sum(direction) <= 0.0:
            return TargetEngine._even_split(amounts, budget)

        direction = TargetEngine._normalize(direction)
        return [budget * d + a for d, a in zip(direction, amounts)]

    @staticmethod
    def calc_etf_items(settings: Settings, prices: Sequence[float]) -> List[EtfItem]:
        """
        Build one :class:`EtfItem` per asset in *settings*.

        *prices* must already be expressed in the integer monetary unit
        used for holdings (e.g. cents) and are truncated to ``int``, as are
        the computed targets.
        """
        etfs = settings.etf_settings
        assert len(etfs) == len(prices), (
            f"Got {len(prices)} prices for {len(etfs)} assets."
        )

        targets = TargetEngine.calc_targets(
            [etf.ideal_proportion for etf in etfs],
            [float(etf.cumulative) for etf in etfs],
            float(settings.budget),
        )
        logger.debug("Targets for budget %d: %s", settings.budget, targets)

        return [
            EtfItem(cumulative=etf.cumulative, target=int(target), price=int(price))
            for etf, target, price in zip(etfs, targets, prices)
        ]

    # ------------------------------------------------------------------ #
    #  Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _normalize(values: Sequence[float]) -> List[float]:
        """Scale *values* so they sum to 1.0.  Caller guarantees sum > 0."""
        total = sum(values)
        return [v / total for v in values]

    @staticmethod
    def _even_split(amounts: Sequence[float], budget: float) -> List[float]:
        share = budget / len(amounts)
        return [a + share for a in amounts]
