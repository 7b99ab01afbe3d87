"""End-to-end tests for scripts/export_csv.py against a SQLite file store."""

import importlib.util
from pathlib import Path

import pytest

from pallet_config import get_active_settings
from pallet_kernel.db.engine import reset_engine
from pallet_kernel.domain.values import LocationKind
from pallet_services import PalletTracker

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "export_csv.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("export_csv_script", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "tracker.yaml"
    path.write_text(f"database_url: sqlite:///{tmp_path / 'tracker.db'}\n", encoding="utf-8")
    yield path
    reset_engine()


@pytest.fixture
def seeded(config_file, deterministic_clock):
    tracker = PalletTracker.from_settings(get_active_settings(config_file), clock=deterministic_clock)
    shop = tracker.locations.add(LocationKind.SHOP, "Shop A")
    tracker.scans.move_via_scan("PAL-1", "EUR/EPAL", 5, shop.ref)
    return shop


class TestExportScript:
    def test_stock_export_to_file(self, config_file, seeded, tmp_path):
        out = tmp_path / "stock.csv"
        assert _load_script().main(["stock", "--config", str(config_file), "--output", str(out)]) == 0
        lines = out.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "kind,id,name,palletType,qty"
        assert f"SHOP,{seeded.id},Shop A,EUR/EPAL,5" in lines

    def test_movements_to_stdout(self, config_file, seeded, capsys):
        assert _load_script().main(["movements", "--config", str(config_file), "--type", "eur/epal"]) == 0
        out = capsys.readouterr().out.splitlines()
        assert len(out) == 2
        assert out[1].endswith(f"SHOP,{seeded.id},Shop A,")

    def test_lost_export(self, config_file, seeded, capsys):
        assert _load_script().main(["lost", "--config", str(config_file), "--min-days", "0"]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "code,type,lastLocKind,lastLocId,lastLocName,lastSeen,daysSinceSeen"
        assert out[1].startswith("PAL-1,EUR/EPAL,SHOP,")

    def test_missing_config(self, tmp_path, capsys):
        code = _load_script().main(["stock", "--config", str(tmp_path / "nope.yaml")])
        assert code == 2
        assert "ERROR" in capsys.readouterr().err

    def test_unknown_kind_is_usage_error(self):
        with pytest.raises(SystemExit):
            _load_script().main(["pallets"])

    def test_unknown_log_level_is_usage_error(self, config_file):
        with pytest.raises(SystemExit):
            _load_script().main(["stock", "--config", str(config_file), "--log-level", "foo"])

    def test_log_level_is_case_insensitive(self, config_file, seeded, capsys):
        code = _load_script().main(["stock", "--config", str(config_file), "--log-level", "debug"])
        assert code == 0
        assert capsys.readouterr().out.startswith("kind,id,name,palletType,qty")
