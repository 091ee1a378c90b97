"""End-to-end tests for the command-line entrypoint.

Each test runs ``start()`` against a temporary definitions directory with
HTTP mocked by respx; stdout must carry exactly one JSON document.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import respx

from indexarr.interfaces.cli.cli import EXIT_NOT_FOUND, EXIT_OK, EXIT_USAGE, start

pytestmark = pytest.mark.integration

TRACKER = "https://tracker.test"


def _run(definitions_dir: Path, *args: str) -> int:
    return start(
        ["--definitions-dir", str(definitions_dir), "--log-level", "ERROR", *args]
    )


class TestList:
    def test_lists_definitions(
        self, definitions_dir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert _run(definitions_dir, "list") == EXIT_OK

        listed = json.loads(capsys.readouterr().out)
        assert [d["id"] for d in listed] == ["guarded", "tracker"]
        assert listed[0]["wants_relay"] is True


class TestSearch:
    def test_found(
        self,
        definitions_dir: Path,
        respx_mock: respx.MockRouter,
        tracker_page: str,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        respx_mock.get(url__startswith=f"{TRACKER}/search/").respond(200, text=tracker_page)
        respx_mock.get(url__startswith="https://guarded.test/").respond(200, text="<html/>")

        code = _run(definitions_dir, "search", "ubuntu", "--min-seeders", "300")

        out = json.loads(capsys.readouterr().out)
        assert code == EXIT_OK
        assert out["outcome"] == "found"
        assert out["selected"]["title"] == "Ubuntu 24.04 Desktop"
        assert out["selected"]["seeders"] == 1204
        assert out["total_results"] == 2
        assert out["failures"] == []

    def test_below_threshold_exit_code(
        self,
        definitions_dir: Path,
        respx_mock: respx.MockRouter,
        tracker_page: str,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        respx_mock.get(url__startswith=f"{TRACKER}/search/").respond(200, text=tracker_page)

        code = _run(
            definitions_dir,
            "search",
            "ubuntu",
            "--min-seeders",
            "10000",
            "--indexer",
            "tracker",
        )

        out = json.loads(capsys.readouterr().out)
        assert code == EXIT_NOT_FOUND
        assert out["outcome"] == "below_threshold"
        assert out["selected"] is None
        assert out["total_results"] == 2

    def test_unknown_indexer_is_usage_error(
        self, definitions_dir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = _run(definitions_dir, "search", "ubuntu", "--indexer", "nope")

        captured = capsys.readouterr()
        assert code == EXIT_USAGE
        assert captured.out == ""
        assert "no indexer definitions to search" in captured.err

    def test_negative_threshold_is_usage_error(self, definitions_dir: Path) -> None:
        assert _run(definitions_dir, "search", "x", "--min-seeders", "-1") == EXIT_USAGE


class TestProbe:
    def test_probe_selected_ids(
        self,
        definitions_dir: Path,
        respx_mock: respx.MockRouter,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        respx_mock.get(url__startswith=f"{TRACKER}/").respond(200, text="<html/>")

        code = _run(definitions_dir, "probe", "tracker")

        [result] = json.loads(capsys.readouterr().out)
        assert code == EXIT_OK
        assert result["indexer"] == "tracker"
        assert result["healthy"] is True
        assert result["reason"] == ""

    def test_unhealthy_exit_code(
        self,
        definitions_dir: Path,
        respx_mock: respx.MockRouter,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        respx_mock.get(url__startswith=f"{TRACKER}/").respond(502)

        code = _run(definitions_dir, "probe", "tracker")

        [result] = json.loads(capsys.readouterr().out)
        assert code == EXIT_NOT_FOUND
        assert result["healthy"] is False
        assert result["reason"] == "HTTP Status: 502"
        assert result["http_status"] == 502

    def test_unknown_id_is_usage_error(
        self, definitions_dir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert _run(definitions_dir, "probe", "nope") == EXIT_USAGE
        assert "'nope' not found" in capsys.readouterr().err


class TestConfigErrors:
    def test_missing_config_file(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = start(["--config", str(tmp_path / "absent.yaml"), "list"])

        assert code == EXIT_USAGE
        assert "invalid configuration" in capsys.readouterr().err
