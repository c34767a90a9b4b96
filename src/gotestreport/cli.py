from __future__ import annotations

import argparse
import io
import sys
from pathlib import Path

from gotestreport import __version__
from gotestreport.config import DEFAULT_REPORT_FILE, ReportConfig, load_config
from gotestreport.errors import ReportError, handle_exception
from gotestreport.events.source import read_events
from gotestreport.logging import configure_cli_logging, get_logger
from gotestreport.report import ReportModel
from gotestreport.report.aggregate import aggregate
from gotestreport.report.hierarchy import MATCH_STRATEGIES, get_matcher
from gotestreport.report.html_report import write_html_report

logger = get_logger(__name__)


def _check_startup() -> None:
    """Refuse to run on interpreters older than 3.10."""
    major, minor = sys.version_info[:2]
    if major < 3 or (major == 3 and minor < 10):
        print("ERROR: gotestreport requires Python 3.10 or later.", file=sys.stderr)
        print(f"       You are running Python {major}.{minor}.", file=sys.stderr)
        sys.exit(1)


def generate_report(config: ReportConfig) -> tuple[ReportModel, Path]:
    """Read, aggregate, and write a report as described by ``config``."""
    events = read_events(config.input_file)
    model = aggregate(events, matcher=get_matcher(config.match_strategy))
    report_path = write_html_report(model, config)
    return model, report_path


def _cmd_report(args: argparse.Namespace) -> int:
    config = load_config(
        config_file=args.config,
        cli_overrides={
            "input_file": args.file,
            "output_dir": args.output,
            "report_file": args.report_file,
            "title": args.title,
            "match_strategy": args.match,
            "write_json": True if args.json else None,
            "open_browser": True if args.open else None,
        },
    )

    model, report_path = generate_report(config)
    logger.info("Test report generated successfully")

    status_icon = "✅" if model.all_passed else "❌"
    print(
        f"{status_icon} {model.passed_tests} passed, {model.failed_tests} failed "
        f"across {len(model.packages)} packages in {model.total_time}"
    )
    print(f"Report: {report_path}")
    if config.write_json:
        print(f"JSON: {config.json_path}")

    if config.open_browser:
        import webbrowser

        webbrowser.open(report_path.resolve().as_uri())

    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="gotestreport",
        description="Generate an HTML report from go test -json logs",
    )
    p.add_argument(
        "--file", "-f",
        default=None,
        help="File with go test -json logs (default: read standard input)",
    )
    p.add_argument(
        "--output", "-o",
        default=None,
        help="Output directory of the HTML report (default: current directory)",
    )
    p.add_argument(
        "--report-file", "--reportFile", "-c",
        dest="report_file",
        default=None,
        help=f"File name of the HTML report (default: {DEFAULT_REPORT_FILE})",
    )
    p.add_argument(
        "--config",
        default=None,
        help="YAML config file (default: nearest .gotestreport.yaml)",
    )
    p.add_argument("--title", default=None, help="Report title")
    p.add_argument(
        "--match",
        choices=sorted(MATCH_STRATEGIES),
        default=None,
        help="How suites claim subtests: substring (default) or prefix",
    )
    p.add_argument(
        "--json",
        action="store_true",
        help="Also write the report model as JSON next to the HTML report",
    )
    p.add_argument(
        "--open",
        action="store_true",
        help="Open the report in the default browser",
    )
    p.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging and full tracebacks on errors",
    )
    p.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    p.set_defaults(func=_cmd_report)
    return p


def main(argv: list[str] | None = None) -> None:
    # Force UTF-8 output on Windows to handle emoji in output
    if sys.platform == "win32":
        sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")
        sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding="utf-8", errors="replace")

    _check_startup()

    args = build_parser().parse_args(argv)

    configure_cli_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        rc = args.func(args)
        raise SystemExit(rc)
    except SystemExit:
        raise
    except KeyboardInterrupt:
        print("\n⚠️  Interrupted by user", file=sys.stderr)
        raise SystemExit(130)
    except ReportError as e:
        handle_exception(e, verbose=args.verbose)
        raise SystemExit(1)
    except Exception as e:
        handle_exception(e, verbose=args.verbose)
        if not args.verbose:
            print("Run with --verbose for full traceback", file=sys.stderr)
        raise SystemExit(1)
