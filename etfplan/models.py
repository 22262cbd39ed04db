"""
etfplan/models.py
-----------------
Plain value types passed between the planner stages.

All monetary fields are integers in the smallest monetary unit (cents)
unless noted otherwise.  Every instance is created fresh per planning call
and never mutated afterwards.
"""

from dataclasses import dataclass, field
from typing import List

EtfId = str


@dataclass(frozen=True)
class EtfSetting:
    """One tracked asset as persisted in the settings store."""
    id: EtfId
    isin: str
    name: str
    ideal_proportion: float     # target weight; <= 0 means "no preference"
    cumulative: int             # amount currently held


@dataclass(frozen=True)
class Settings:
    """Budget plus the ordered list of tracked assets."""
    budget: int
    etf_settings: List[EtfSetting] = field(default_factory=list)


@dataclass(frozen=True)
class EtfItem:
    """Per-asset input to the knapsack stage."""
    cumulative: int
    target: int
    price: int


@dataclass(frozen=True)
class KnapSackItem:
    """One candidate "buy one more unit of asset *etf_index*" step."""
    value: int
    weight: int
    etf_index: int


@dataclass(frozen=True)
class Investment:
    """A concrete buy order produced by the planner."""
    etf_id: EtfId
    name: str
    quantity: int
    price: int


@dataclass(frozen=True)
class EtfInfo:
    """A single ISIN search hit from the price source."""
    ticker: str
    name: str
    isin: str
