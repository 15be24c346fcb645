import sys
import os
import logging

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import main
from settings import Settings, get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    monkeypatch.setenv("LEDGER_REPORT_STATS", "false")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()


class TestMain:
    def test_prints_sorted_accounts(self, tmp_path, capsys):
        csv_file = tmp_path / "test.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 2, 1, 2.0",
            "deposit, 1, 2, 1843.629",
            "deposit, 1, 3, 10",
            "dispute, 1, 3,",
            "deposit, 3, 4, 5",
            "dispute, 3, 4,",
            "chargeback, 3, 4,",
        ]))

        assert main.main([str(csv_file)]) == 0

        assert capsys.readouterr().out.splitlines() == [
            "client,available,held,total,locked",
            "1,1843.629,10.0,1853.629,false",
            "2,2.0,0.0,2.0,false",
            "3,0.0,0.0,0.0,true",
        ]

    def test_usage_error(self, capsys):
        assert main.main([]) == 1
        assert "Usage" in capsys.readouterr().err

    def test_too_many_arguments(self, capsys):
        assert main.main(["a.csv", "b.csv"]) == 1
        assert "Usage" in capsys.readouterr().err

    def test_empty_file(self, tmp_path, capsys):
        csv_file = tmp_path / "empty.csv"
        csv_file.write_text("")

        assert main.main([str(csv_file)]) == 1
        captured = capsys.readouterr()
        assert "empty" in captured.err
        assert captured.out == ""

    def test_missing_file(self, tmp_path, capsys):
        assert main.main([str(tmp_path / "missing.csv")]) == 1
        assert "Error" in capsys.readouterr().err

    def test_invalid_utf8(self, tmp_path, capsys):
        csv_file = tmp_path / "binary.csv"
        csv_file.write_bytes(b"type, client, tx, amount\ndeposit, 1, 1, 1.0\n\xff\xfe\n")

        assert main.main([str(csv_file)]) == 1
        captured = capsys.readouterr()
        assert "not a valid CSV file" in captured.err
        assert captured.out == ""

    def test_log_file(self, tmp_path, monkeypatch, capsys):
        log_file = tmp_path / "ledger.log"
        monkeypatch.setenv("LEDGER_LOG_FILE", str(log_file))
        csv_file = tmp_path / "test.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 1, 1, 1.0",
            "withdrawal, 1, 2, 1.0, extra",
        ]))

        assert main.main([str(csv_file)]) == 0

        assert "Line 3" in log_file.read_text()


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LEDGER_REPORT_STATS")
        settings = Settings()
        assert settings.log_level == "WARNING"
        assert settings.log_file is None
        assert settings.report_stats is True

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("LEDGER_LOG_LEVEL", "debug")
        settings = Settings()
        assert settings.log_level == "DEBUG"
        assert settings.report_stats is False

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("LEDGER_LOG_LEVEL", "loud")
        with pytest.raises(ValueError):
            Settings()
