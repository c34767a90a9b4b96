"""Tests for the gotestreport command line."""
from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from gotestreport import __version__
from gotestreport.cli import build_parser

SRC_DIR = Path(__file__).parent.parent / "src"


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """An empty git root so no .gotestreport.yaml is discovered."""
    work = tmp_path / "work"
    (work / ".git").mkdir(parents=True)
    return work


def _run(
    workdir: Path, *args: str, stdin: str | None = None
) -> subprocess.CompletedProcess[str]:
    env = {k: v for k, v in os.environ.items() if not k.startswith("GOTESTREPORT_")}
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    return subprocess.run(
        [sys.executable, "-m", "gotestreport", *args],
        cwd=str(workdir),
        env=env,
        input=stdin,
        capture_output=True,
        text=True,
        encoding="utf-8",
    )


# ============================================================================
# Argument parsing
# ============================================================================


class TestBuildParser:
    """Tests for build_parser()."""

    def test_defaults_are_unset(self) -> None:
        args = build_parser().parse_args([])
        assert args.file is None
        assert args.output is None
        assert args.report_file is None
        assert args.match is None
        assert args.json is False

    def test_short_flags(self) -> None:
        args = build_parser().parse_args(["-f", "in.jsonl", "-o", "out", "-c", "r.html"])
        assert (args.file, args.output, args.report_file) == ("in.jsonl", "out", "r.html")

    def test_report_file_aliases(self) -> None:
        assert build_parser().parse_args(["--reportFile", "a.html"]).report_file == "a.html"
        assert build_parser().parse_args(["--report-file", "b.html"]).report_file == "b.html"

    def test_rejects_unknown_match(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--match", "regex"])


# ============================================================================
# End to end
# ============================================================================


class TestReportCommand:
    """Tests running the CLI as a subprocess."""

    def test_generates_report_from_file(
        self, workdir: Path, sample_log_path: Path, tmp_path: Path
    ) -> None:
        out_dir = tmp_path / "out"
        result = _run(workdir, "-f", str(sample_log_path), "-o", str(out_dir))

        assert result.returncode == 0, f"CLI failed: {result.stderr}"
        report = out_dir / "testCoverageReport.html"
        assert report.exists()
        assert "5 passed, 3 failed across 3 packages in 1m:15s" in result.stdout
        assert f"Report: {report}" in result.stdout
        assert "Test report generated successfully" in result.stderr
        assert not (out_dir / "testCoverageReport.json").exists()

    def test_reads_stdin(self, workdir: Path, sample_log_path: Path) -> None:
        result = _run(workdir, stdin=sample_log_path.read_text(encoding="utf-8"))

        assert result.returncode == 0, f"CLI failed: {result.stderr}"
        assert (workdir / "testCoverageReport.html").exists()

    def test_custom_report_file_and_json(
        self, workdir: Path, sample_log_path: Path, tmp_path: Path
    ) -> None:
        result = _run(
            workdir,
            "-f", str(sample_log_path),
            "-o", str(tmp_path),
            "-c", "ci.html",
            "--json",
            "--title", "Nightly",
        )

        assert result.returncode == 0, f"CLI failed: {result.stderr}"
        html = (tmp_path / "ci.html").read_text(encoding="utf-8")
        assert "<title>Nightly</title>" in html
        data = json.loads((tmp_path / "ci.json").read_text(encoding="utf-8"))
        assert data["summary"]["failed"] == 3

    def test_prefix_matching(
        self, workdir: Path, sample_log_path: Path, tmp_path: Path
    ) -> None:
        result = _run(
            workdir, "-f", str(sample_log_path), "-o", str(tmp_path), "--json", "--match", "prefix"
        )

        assert result.returncode == 0, f"CLI failed: {result.stderr}"
        data = json.loads((tmp_path / "testCoverageReport.json").read_text(encoding="utf-8"))
        store = data["overviews"][0]
        assert store["suite"]["name"] == "TestStore"
        assert "TestStoreCache/evict" not in [c["name"] for c in store["cases"]]

    def test_config_file_discovered(
        self, workdir: Path, sample_log_path: Path, tmp_path: Path
    ) -> None:
        (workdir / ".gotestreport.yaml").write_text(
            f"input_file: {json.dumps(str(sample_log_path))}\nreport_file: from-config.html\n",
            encoding="utf-8",
        )
        result = _run(workdir, "-o", str(tmp_path))

        assert result.returncode == 0, f"CLI failed: {result.stderr}"
        assert (tmp_path / "from-config.html").exists()

    def test_quiet_suppresses_info_logs(
        self, workdir: Path, sample_log_path: Path, tmp_path: Path
    ) -> None:
        result = _run(workdir, "-q", "-f", str(sample_log_path), "-o", str(tmp_path))

        assert result.returncode == 0
        assert "Test report generated successfully" not in result.stderr

    def test_version(self, workdir: Path) -> None:
        result = _run(workdir, "--version")

        assert result.returncode == 0
        assert __version__ in result.stdout


class TestReportCommandErrors:
    """Failures exit non-zero with a coded message and write nothing."""

    def test_malformed_input(
        self, workdir: Path, malformed_log_path: Path, tmp_path: Path
    ) -> None:
        result = _run(workdir, "-f", str(malformed_log_path), "-o", str(tmp_path))

        assert result.returncode == 1
        assert "GTR-E202" in result.stderr
        assert "line 2" in result.stderr
        assert not (tmp_path / "testCoverageReport.html").exists()

    def test_missing_input(self, workdir: Path, tmp_path: Path) -> None:
        result = _run(workdir, "-f", str(tmp_path / "nope.jsonl"), "-o", str(tmp_path))

        assert result.returncode == 1
        assert "GTR-E302" in result.stderr

    def test_empty_input(self, workdir: Path, empty_log_path: Path, tmp_path: Path) -> None:
        result = _run(workdir, "-f", str(empty_log_path), "-o", str(tmp_path))

        assert result.returncode == 1
        assert "GTR-E204" in result.stderr
        assert not (tmp_path / "testCoverageReport.html").exists()

    def test_missing_config_file(self, workdir: Path, sample_log_path: Path) -> None:
        result = _run(workdir, "-f", str(sample_log_path), "--config", "missing.yaml")

        assert result.returncode == 1
        assert "GTR-E003" in result.stderr

    def test_verbose_shows_traceback(
        self, workdir: Path, malformed_log_path: Path, tmp_path: Path
    ) -> None:
        result = _run(workdir, "-v", "-f", str(malformed_log_path), "-o", str(tmp_path))

        assert result.returncode == 1
        assert "Full Traceback" in result.stderr
