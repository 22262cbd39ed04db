"""
etfplan/settings_store.py
-------------------------
Persistent budget + tracked-asset store.

Design
------
* One JSON file, by default ``config.DEFAULT_STORE_PATH``::

      {
        "budget": 50000,
        "etfs": [
          {"id": "IWDA.L", "isin": "IE00B4L5Y983", "name": "...",
           "proportion": 0.7, "cumulative": 120000},
          ...
        ]
      }

* Asset order in the file is the order the planner sees; upserting an
  existing id keeps its position.
* A missing file behaves as an empty store with a budget of 0.
* Every write goes through a temp file + rename so a crash mid-write never
  leaves a corrupt store on disk.
* ``OSError`` and unparseable content surface as
  :class:`~etfplan.errors.StorageUnavailableError`.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from etfplan.config import DEFAULT_STORE_PATH
from etfplan.errors import LookupNotFoundError, StorageUnavailableError
from etfplan.models import EtfSetting, Settings

logger = logging.getLogger(__name__)


def _to_record(etf: EtfSetting) -> dict:
    return {
        "id":         etf.id,
        "isin":       etf.isin,
        "name":       etf.name,
        "proportion": float(etf.ideal_proportion),
        "cumulative": int(etf.cumulative),
    }


def _from_record(record: dict) -> EtfSetting:
    return EtfSetting(
        id=str(record["id"]),
        isin=str(record.get("isin", "")),
        name=str(record.get("name", "")),
        ideal_proportion=float(record.get("proportion", 0.0)),
        cumulative=int(record.get("cumulative", 0)),
    )


class SettingsStore:
    """
    Settings store keyed by asset id.

    Usage::

        store = SettingsStore()                 # default path
        store.set_budget(500_00)
        store.upsert_asset(EtfSetting("IWDA.L", "IE00B4L5Y983", "World", 0.7, 0))
        settings = store.load_settings()
    """

    def __init__(self, path: str | Path = DEFAULT_STORE_PATH):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------ #
    # Budget
    # ------------------------------------------------------------------ #

    def get_budget(self) -> int:
        try:
            return int(self._load()["budget"])
        except (TypeError, ValueError) as exc:
            raise StorageUnavailableError(
                f"Malformed budget: {exc}", str(self._path)
            ) from exc

    def set_budget(self, budget: int) -> None:
        payload = self._load()
        payload["budget"] = int(budget)
        self._save(payload)

    # ------------------------------------------------------------------ #
    # Assets
    # ------------------------------------------------------------------ #

    def list_assets(self) -> List[EtfSetting]:
        """Return every stored asset in stored order."""
        try:
            return [_from_record(r) for r in self._load()["etfs"]]
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageUnavailableError(
                f"Malformed asset record: {exc}", str(self._path)
            ) from exc

    def get_asset(self, etf_id: str) -> Optional[EtfSetting]:
        for etf in self.list_assets():
            if etf.id == etf_id:
                return etf
        return None

    def upsert_asset(self, etf: EtfSetting) -> None:
        """Insert *etf*, or replace the stored asset with the same id in place."""
        payload = self._load()
        records = payload["etfs"]
        for i, record in enumerate(records):
            if record.get("id") == etf.id:
                records[i] = _to_record(etf)
                break
        else:
            records.append(_to_record(etf))
        self._save(payload)

    def remove_asset(self, etf_id: str) -> None:
        """Delete the asset with *etf_id*.  Unknown ids are ignored."""
        payload = self._load()
        payload["etfs"] = [r for r in payload["etfs"] if r.get("id") != etf_id]
        self._save(payload)

    def update_proportion(self, etf_id: str, proportion: float) -> None:
        self._update_field(etf_id, "proportion", float(proportion))

    def update_cumulative(self, etf_id: str, amount: int) -> None:
        self._update_field(etf_id, "cumulative", int(amount))

    # ------------------------------------------------------------------ #
    # Whole-settings helpers
    # ------------------------------------------------------------------ #

    def load_settings(self) -> Settings:
        return Settings(budget=self.get_budget(), etf_settings=self.list_assets())

    def replace_settings(self, settings: Settings) -> None:
        """Overwrite the budget and the full asset list with *settings*."""
        self._save({
            "budget": int(settings.budget),
            "etfs":   [_to_record(etf) for etf in settings.etf_settings],
        })

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _update_field(self, etf_id: str, key: str, value) -> None:
        payload = self._load()
        for record in payload["etfs"]:
            if record.get("id") == etf_id:
                record[key] = value
                self._save(payload)
                return
        raise LookupNotFoundError("No stored asset with this id", etf_id)

    def _load(self) -> dict:
        """Read the store; a missing file is an empty store."""
        if not self._path.exists():
            return {"budget": 0, "etfs": []}

        try:
            with open(self._path, encoding="utf-8") as fh:
                payload = json.load(fh)
        except (json.JSONDecodeError, OSError) as exc:
            logger.error("Could not read settings store %s: %s", self._path, exc)
            raise StorageUnavailableError(
                f"Could not read settings store: {exc}", str(self._path)
            ) from exc

        if not isinstance(payload, dict) or not isinstance(payload.get("etfs", []), list):
            raise StorageUnavailableError("Settings store has an unexpected layout", str(self._path))

        payload.setdefault("budget", 0)
        payload.setdefault("etfs", [])
        return payload

    def _save(self, payload: dict) -> None:
        """Atomically write the store file (temp → rename)."""
        tmp = self._path.with_suffix(".tmp")

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2, allow_nan=False)
            os.replace(tmp, self._path)   # atomic on POSIX and Windows
        except (OSError, ValueError) as exc:
            logger.error("Could not write settings store %s: %s", self._path, exc)
            if tmp.exists():
                tmp.unlink(missing_ok=True)
            raise StorageUnavailableError(
                f"Could not write settings store: {exc}", str(self._path)
            ) from exc
