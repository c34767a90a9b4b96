"""gotestreport configuration management.

Handles:
- Input/output locations and report options
- Loading with precedence: CLI > config file > env vars > defaults
- Config file discovery (.gotestreport.yaml walking up from the cwd)

The resulting ReportConfig is built once by the CLI and passed explicitly to
the reader and the renderer.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from gotestreport.errors import ConfigError, ErrorCode
from gotestreport.report.hierarchy import DEFAULT_MATCH_STRATEGY, MATCH_STRATEGIES

DEFAULT_REPORT_FILE = "testCoverageReport.html"
CONFIG_FILE_NAME = ".gotestreport.yaml"

# Config file key / environment variable -> ReportConfig field
CONFIG_KEYS = {
    "input_file": "input_file",
    "output_dir": "output_dir",
    "report_file": "report_file",
    "title": "title",
    "match": "match_strategy",
    "json": "write_json",
}

ENV_VARS = {
    "GOTESTREPORT_INPUT_FILE": "input_file",
    "GOTESTREPORT_OUTPUT_DIR": "output_dir",
    "GOTESTREPORT_REPORT_FILE": "report_file",
    "GOTESTREPORT_TITLE": "title",
    "GOTESTREPORT_MATCH": "match_strategy",
    "GOTESTREPORT_JSON": "write_json",
}

_TRUE_STRINGS = {"1", "true", "yes", "on"}


@dataclass
class ReportConfig:
    """gotestreport runtime configuration."""

    input_file: Path | None = None
    output_dir: Path = Path(".")
    report_file: str = DEFAULT_REPORT_FILE
    title: str | None = None
    match_strategy: str = DEFAULT_MATCH_STRATEGY
    write_json: bool = False
    open_browser: bool = False
    config_path: Path | None = None

    @property
    def report_path(self) -> Path:
        """Full path of the HTML report."""
        return self.output_dir / self.report_file

    @property
    def json_path(self) -> Path:
        """Full path of the JSON model written beside the report."""
        return self.report_path.with_suffix(".json")

    def reads_stdin(self) -> bool:
        return self.input_file is None


def _find_config_file(start: Path | None = None) -> Path | None:
    """Find .gotestreport.yaml by walking up the directory tree.

    Stops at git root, home directory, or filesystem root.
    Returns None if not found.
    """
    current = (start or Path.cwd()).resolve()

    try:
        home = Path.home()
    except RuntimeError:
        home = None

    for _ in range(20):
        candidate = current / CONFIG_FILE_NAME
        if candidate.exists():
            return candidate

        if home and current == home:
            break
        if current == current.parent:
            break
        if (current / ".git").exists():
            break

        current = current.parent

    return None


def load_config_file(path: Path) -> dict[str, Any]:
    """Parse a YAML config file into ReportConfig field values.

    Raises:
        ConfigError: If the file is unreadable, not YAML, or not a mapping.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"{path}: {e}", code=ErrorCode.E003) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    result: dict[str, Any] = {}
    for key, value in data.items():
        if key not in CONFIG_KEYS:
            raise ConfigError(
                f"{path}: unknown key {key!r} (expected one of {', '.join(CONFIG_KEYS)})"
            )
        result[CONFIG_KEYS[key]] = value
    return result


def _env_values(environ: dict[str, str]) -> dict[str, Any]:
    return {field: environ[name] for name, field in ENV_VARS.items() if environ.get(name)}


def _coerce(values: dict[str, Any]) -> dict[str, Any]:
    """Convert raw string/YAML values to ReportConfig field types."""
    result = dict(values)
    for key in ("input_file", "output_dir", "config_path"):
        if result.get(key) is not None:
            result[key] = Path(str(result[key]))
    for key in ("write_json", "open_browser"):
        if key in result and isinstance(result[key], str):
            result[key] = result[key].strip().lower() in _TRUE_STRINGS
        elif key in result:
            result[key] = bool(result[key])
    for key in ("report_file", "title", "match_strategy"):
        if result.get(key) is not None:
            result[key] = str(result[key])
    return result


def load_config(
    config_file: str | Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
) -> ReportConfig:
    """Load configuration with precedence: CLI > config file > env vars.

    Args:
        config_file: Explicit config file path; auto-discovered when None.
        cli_overrides: Field values given on the command line. None values
            are treated as "not given".
        environ: Environment mapping (default: os.environ).

    Returns:
        Loaded ReportConfig instance

    Raises:
        ConfigError: On unreadable/invalid config files or an unknown match
            strategy.
    """
    environ = dict(os.environ) if environ is None else environ
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}

    # Step 1: environment variables as base
    values = _env_values(environ)

    # Step 2: config file overrides env vars
    config_path: Path | None
    if config_file:
        config_path = Path(config_file)
        if not config_path.exists():
            raise ConfigError(str(config_path), code=ErrorCode.E003)
    else:
        config_path = _find_config_file()
    if config_path is not None:
        values.update(load_config_file(config_path))

    # Step 3: CLI overrides everything
    values.update(overrides)
    values["config_path"] = config_path

    config = ReportConfig(**_coerce(values))

    if config.match_strategy not in MATCH_STRATEGIES:
        raise ConfigError(
            f"{config.match_strategy!r} (choose from {', '.join(sorted(MATCH_STRATEGIES))})",
            code=ErrorCode.E002,
        )

    return config
