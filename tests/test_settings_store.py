"""
tests/test_settings_store.py
----------------------------
Unit tests for SettingsStore.

Coverage:
  - Missing file behaves as an empty store
  - Budget round trip
  - upsert keeps position / appends new ids
  - remove, update_proportion, update_cumulative
  - replace_settings / load_settings
  - Corrupt file and unwritable path → StorageUnavailableError
  - Atomic write leaves no temp file behind
"""

import json
import tempfile
import unittest
from pathlib import Path

from etfplan.enums import ErrorKind
from etfplan.errors import LookupNotFoundError, StorageUnavailableError
from etfplan.models import EtfSetting, Settings
from etfplan.settings_store import SettingsStore


def _etf(etf_id: str, proportion: float = 0.5, cumulative: int = 0) -> EtfSetting:
    return EtfSetting(etf_id, f"ISIN-{etf_id}", f"{etf_id} ETF", proportion, cumulative)


class _StoreTestCase(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "settings.json"
        self.store = SettingsStore(self.path)

    def tearDown(self):
        self._tmp.cleanup()


# ---------------------------------------------------------------------------
# Budget
# ---------------------------------------------------------------------------

class TestBudget(_StoreTestCase):

    def test_missing_file_is_zero_budget(self):
        self.assertEqual(self.store.get_budget(), 0)
        self.assertFalse(self.path.exists())

    def test_set_then_get(self):
        self.store.set_budget(500_00)
        self.assertEqual(self.store.get_budget(), 500_00)
        self.store.set_budget(50)
        self.assertEqual(self.store.get_budget(), 50)

    def test_set_budget_keeps_assets(self):
        self.store.upsert_asset(_etf("A"))
        self.store.set_budget(10)
        self.assertEqual([e.id for e in self.store.list_assets()], ["A"])


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------

class TestAssets(_StoreTestCase):

    def test_missing_file_has_no_assets(self):
        self.assertEqual(self.store.list_assets(), [])
        self.assertIsNone(self.store.get_asset("A"))

    def test_upsert_appends_in_order(self):
        for etf_id in ("C", "A", "B"):
            self.store.upsert_asset(_etf(etf_id))
        self.assertEqual([e.id for e in self.store.list_assets()], ["C", "A", "B"])

    def test_upsert_replaces_in_place(self):
        self.store.upsert_asset(_etf("A", 0.9, 100))
        self.store.upsert_asset(_etf("B"))
        self.store.upsert_asset(_etf("A", 0.1, 10))
        assets = self.store.list_assets()
        self.assertEqual([e.id for e in assets], ["A", "B"])
        self.assertEqual(assets[0], _etf("A", 0.1, 10))

    def test_get_asset(self):
        self.store.upsert_asset(_etf("A", 0.7, 123))
        self.assertEqual(self.store.get_asset("A"), _etf("A", 0.7, 123))
        self.assertIsNone(self.store.get_asset("random id"))

    def test_remove_asset(self):
        self.store.upsert_asset(_etf("A"))
        self.store.upsert_asset(_etf("B"))
        self.store.remove_asset("A")
        self.assertEqual([e.id for e in self.store.list_assets()], ["B"])

    def test_remove_unknown_is_noop(self):
        self.store.upsert_asset(_etf("A"))
        self.store.remove_asset("Z")
        self.assertEqual([e.id for e in self.store.list_assets()], ["A"])

    def test_update_fields(self):
        self.store.upsert_asset(_etf("AGGG.L", 0.9, 100))
        self.store.update_proportion("AGGG.L", 0.7)
        self.store.update_cumulative("AGGG.L", 123)
        etf = self.store.get_asset("AGGG.L")
        self.assertEqual(etf.ideal_proportion, 0.7)
        self.assertEqual(etf.cumulative, 123)

    def test_update_unknown_raises_not_found(self):
        with self.assertRaises(LookupNotFoundError) as ctx:
            self.store.update_cumulative("nope", 1)
        self.assertEqual(ctx.exception.kind, ErrorKind.LOOKUP_NOT_FOUND)
        self.assertEqual(ctx.exception.subject, "nope")


# ---------------------------------------------------------------------------
# Whole settings
# ---------------------------------------------------------------------------

class TestWholeSettings(_StoreTestCase):

    def test_replace_then_load(self):
        self.store.upsert_asset(_etf("OLD"))
        settings = Settings(42, [_etf("A", 0.25, 5), _etf("B", 0.75, 7)])
        self.store.replace_settings(settings)
        self.assertEqual(self.store.load_settings(), settings)

    def test_file_layout(self):
        self.store.replace_settings(Settings(9, [_etf("A", 0.5, 3)]))
        payload = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual(payload["budget"], 9)
        self.assertEqual(payload["etfs"], [{
            "id": "A", "isin": "ISIN-A", "name": "A ETF",
            "proportion": 0.5, "cumulative": 3,
        }])

    def test_no_temp_file_left_behind(self):
        self.store.set_budget(1)
        self.assertFalse(self.path.with_suffix(".tmp").exists())


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestFailures(_StoreTestCase):

    def test_corrupt_json(self):
        self.path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(StorageUnavailableError) as ctx:
            self.store.get_budget()
        self.assertEqual(ctx.exception.kind, ErrorKind.STORAGE_UNAVAILABLE)

    def test_unexpected_layout(self):
        self.path.write_text("[1, 2, 3]", encoding="utf-8")
        with self.assertRaises(StorageUnavailableError):
            self.store.list_assets()

    def test_malformed_record(self):
        self.path.write_text(json.dumps({"budget": 1, "etfs": [{"name": "no id"}]}), encoding="utf-8")
        with self.assertRaises(StorageUnavailableError):
            self.store.list_assets()

    def test_malformed_budget(self):
        self.path.write_text(json.dumps({"budget": "lots", "etfs": []}), encoding="utf-8")
        with self.assertRaises(StorageUnavailableError):
            self.store.get_budget()

    def test_unwritable_location(self):
        blocker = Path(self._tmp.name) / "file"
        blocker.write_text("", encoding="utf-8")
        store = SettingsStore(blocker / "settings.json")   # parent is a file
        with self.assertRaises(StorageUnavailableError):
            store.set_budget(1)


if __name__ == "__main__":
    unittest.main()
