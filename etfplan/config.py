"""
etfplan/config.py
-----------------
Shared configuration constants.

This file owns tunable parameters for the collaborators around the planner
core (settings store, price lookups, logging).  The core engines take all of
their inputs as arguments and read nothing from here except the price scale.
"""

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Monetary unit
# ---------------------------------------------------------------------------
# Holdings and budget are stored as integers in the smallest monetary unit.
# Quoted prices arrive in the major unit (e.g. euros) and are multiplied by
# this factor before they reach the planner.

CENTS_PER_UNIT: int = 100

# ---------------------------------------------------------------------------
# Settings store
# ---------------------------------------------------------------------------
# Resolved relative to the repository root so the CLI works regardless of
# which directory it is launched from.  ETFPLAN_STORE overrides it.

DEFAULT_STORE_PATH: Path = Path(
    os.environ.get(
        "ETFPLAN_STORE",
        Path(__file__).parent.parent / "etfplan_settings.json",
    )
)

# ---------------------------------------------------------------------------
# Price source
# ---------------------------------------------------------------------------
# The latest close of a one-day history window is taken as the current price.

PRICE_HISTORY_PERIOD: str = "1d"

# Upper bound on concurrent price lookups.
PRICE_FETCH_WORKERS: int = 8

ISIN_SEARCH_MAX_RESULTS: int = 8

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_FORMAT: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"
