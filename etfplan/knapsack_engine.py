"""
etfplan/knapsack_engine.py
--------------------------
Whole-unit purchase optimiser: target holdings + prices → buy quantities.

Design contract:
  - Inputs are integers in the smallest monetary unit (cents)
  - No target derivation (see target_engine.py)
  - Fully deterministic and stateless (all methods are @staticmethod)

Model
-----
Buying the k-th unit of an asset moves its holding from
``cumulative + price*(k-1)`` to ``cumulative + price*k``.  The *value* of
that step is the reduction in squared distance to the asset's target::

    value_k = (target - h_{k-1})**2 - (target - h_k)**2

Each step costs ``price``.  Choosing the set of steps with the highest
total value under the budget is a 0/1 knapsack, solved with the classic
single-row DP.  Because value_k strictly decreases in k, an optimal set
never takes unit k+1 of an asset without unit k, so step counts map back to
buy quantities directly.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

import numpy as np

from etfplan.models import EtfItem, KnapSackItem
from etfplan.selection_path import EMPTY, SelectionPath

logger = logging.getLogger(__name__)


class KnapsackEngine:
    """
    Solve the "which units to buy" problem for a list of :class:`EtfItem`.

    Entry point::

        solution = KnapsackEngine.solve_etf_problem(budget, etfs)
        # → [(EtfItem, quantity), ...] in input order
    """

    # ------------------------------------------------------------------ #
    #  Candidate generation
    # ------------------------------------------------------------------ #

    @staticmethod
    def generate_weights_and_values(
        budget: int,
        etfs: Sequence[EtfItem],
    ) -> List[KnapSackItem]:
        """
        Expand every asset into its sequence of "buy one more unit" steps.

        Generation for an asset stops at the first step that does not
        reduce the squared error (it would overshoot the target) or when
        the step count alone would exceed *budget*.
        """
        items: List[KnapSackItem] = []

        for etf_index, etf in enumerate(etfs):
            assert etf.price > 0, f"Non-positive price {etf.price} for asset #{etf_index}."

            buy_quantity = 1
            last_error = (etf.target - etf.cumulative) ** 2
            while etf.price * buy_quantity <= budget:
                amount = etf.cumulative + etf.price * buy_quantity
                error = (etf.target - amount) ** 2
                value = last_error - error
                if value <= 0:
                    break

                items.append(KnapSackItem(value=value, weight=etf.price, etf_index=etf_index))

                last_error = error
                buy_quantity += 1

        return items

    # ------------------------------------------------------------------ #
    #  0/1 knapsack
    # ------------------------------------------------------------------ #

    @staticmethod
    def knap_sack(
        max_weight: int,
        weights: Sequence[int],
        values: Sequence[int],
    ) -> Tuple[int, List[int]]:
        """
        Maximise total value subject to total weight <= *max_weight*.

        Parameters
        ----------
        max_weight:
            Capacity (>= 0).
        weights, values:
            Positionally aligned item weights (> 0) and values.

        Returns
        -------
        Tuple[int, List[int]]
            The optimal value and the selected item indices in increasing
            order.  ``(0, [])`` when nothing fits.

        Notes
        -----
        ``dp[w]`` holds the best value with weight <= w over the items seen
        so far and ``cells[w]`` the :class:`SelectionPath` node that
        produced it.  Item *i* updates every ``w >= weight`` where
        ``dp[w - weight] + value`` is *strictly* better, reading the row as
        it was before item *i*.  That is the reverse in-place scan done as
        one vectorised step; on ties the earlier items' selection is kept.
        """
        assert len(weights) == len(values), (
            f"Got {len(weights)} weights for {len(values)} values."
        )
        if max_weight <= 0 or not weights:
            return 0, []

        dp = np.zeros(max_weight + 1, dtype=np.int64)
        cells = np.full(max_weight + 1, EMPTY, dtype=np.int64)
        arena = SelectionPath()

        for index, (weight, value) in enumerate(zip(weights, values)):
            assert weight > 0, f"Item #{index} has non-positive weight {weight}."
            if weight > max_weight:
                continue

            # candidate[j] is the value at capacity j + weight if item is taken
            candidate = dp[: max_weight + 1 - weight] + value
            improved = np.flatnonzero(candidate > dp[weight:])
            if improved.size == 0:
                continue

            capacities = improved + weight
            cells[capacities] = arena.push_many(index, cells[improved])
            dp[capacities] = candidate[improved]

        indices = arena.to_list(int(cells[max_weight]))
        assert all(a < b for a, b in zip(indices, indices[1:])), indices

        logger.debug(
            "Knapsack: %d items, capacity %d, %d path nodes, optimum %d with %d picks",
            len(weights), max_weight, len(arena), int(dp[max_weight]), len(indices),
        )
        return int(dp[max_weight]), indices

    # ------------------------------------------------------------------ #
    #  Full problem
    # ------------------------------------------------------------------ #

    @staticmethod
    def solve_etf_problem(
        budget: int,
        etfs: Sequence[EtfItem],
    ) -> List[Tuple[EtfItem, int]]:
        """Return ``(etf, buy_quantity)`` for every asset, in input order."""
        items = KnapsackEngine.generate_weights_and_values(budget, etfs)
        weights = [item.weight for item in items]
        values = [item.value for item in items]

        buy_quantities = [0] * len(etfs)
        _, item_indices = KnapsackEngine.knap_sack(budget, weights, values)
        for item_index in item_indices:
            buy_quantities[items[item_index].etf_index] += 1

        return list(zip(etfs, buy_quantities))

    @staticmethod
    def calc_total_price(etfs: Sequence[EtfItem], buy_quantities: Sequence[int]) -> int:
        """Total cost of buying *buy_quantities* of *etfs*."""
        return sum(etf.price * quantity for etf, quantity in zip(etfs, buy_quantities))

    @staticmethod
    def calc_total_error(etfs: Sequence[EtfItem], buy_quantities: Sequence[int]) -> int:
        """Sum of squared distances to target after buying *buy_quantities*."""
        return sum(
            (etf.target - (etf.cumulative + etf.price * quantity)) ** 2
            for etf, quantity in zip(etfs, buy_quantities)
        )
