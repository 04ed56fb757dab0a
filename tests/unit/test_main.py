import io
import json
from pathlib import Path
from unittest.mock import Mock

import pytest

from telemetry_anonymizer import main as cli
from telemetry_anonymizer.anonymization.engine import AnonymizationEngine
from telemetry_anonymizer.logging.logger import Log


@pytest.fixture(autouse=True)
def _isolated(monkeypatch: pytest.MonkeyPatch, engine: AnonymizationEngine) -> None:
    monkeypatch.setattr(Log, "configure", Mock())
    monkeypatch.setattr(cli, "get_default_engine", lambda settings=None: engine)


def _run(tmp_path: Path, content: str, *args: str) -> dict:
    source = tmp_path / "input.json"
    target = tmp_path / "output.json"
    source.write_text(content, encoding="utf-8")
    cli.main([str(source), "-o", str(target), *args])
    return json.loads(target.read_text(encoding="utf-8"))


class TestMain:
    def test_anonymizes_json_file(self, tmp_path: Path) -> None:
        report = _run(tmp_path, json.dumps({"ip": "10.0.0.1", "port": 8006}))
        assert report["data"]["ip"] != "10.0.0.1"
        assert report["data"]["port"] == 8006
        assert report["metadata"]["isAnonymized"] is True
        assert report["metadata"]["rulesApplied"] == ["ip_address"]

    def test_plain_text_input(self, tmp_path: Path) -> None:
        report = _run(tmp_path, "mail admin@example.com")
        assert isinstance(report["data"], str)
        assert "admin@example.com" not in report["data"]

    def test_kind_selects_processor(self, tmp_path: Path) -> None:
        report = _run(tmp_path, json.dumps({"password": "hunter2"}), "--kind", "config")
        assert report["data"] == {"password": "[REDACTED]"}

    def test_no_pseudonyms(self, tmp_path: Path) -> None:
        report = _run(tmp_path, json.dumps("contact admin@example.com"), "--no-pseudonyms")
        assert report["data"] == "contact [REDACTED]"

    def test_detect_only(self, tmp_path: Path, engine: AnonymizationEngine) -> None:
        report = _run(tmp_path, json.dumps({"contact": "admin@example.com"}), "--detect")
        assert report["has_pii"] is True
        assert "email" in report["detected_types"]
        assert engine.store.total_mappings == 0

    def test_reads_stdin_writes_stdout(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO('["10.0.0.1"]'))
        cli.main([])
        report = json.loads(capsys.readouterr().out)
        assert report["data"][0] != "10.0.0.1"

    def test_unknown_kind_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            _run(tmp_path, "{}", "--kind", "syslog")

    def test_configures_logging_from_settings(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        _run(tmp_path, "{}")
        Log.configure.assert_called_once_with("DEBUG")
