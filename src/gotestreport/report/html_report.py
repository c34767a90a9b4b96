"""HTML report generator for aggregated go test runs.

The report model is first turned into a render tree, then walked once:

┌─────────────────────────────────────────────────────────────────────────────┐
│  Go Test Report                       Monday, 01-May-23 10:00:00 UTC        │
│  Total time: 12.500000 s                                                    │
├─────────────────────────────────────────────────────────────────────────────┤
│  [ 41 passed ] [ 2 failed ] [ 43 total ] [ 3 packages ]                     │
│                                                                             │
│  ▼ example.com/app/store                      84.2%        320ms            │
│    ▼ TestStore                                             210ms            │
│      ├─ TestStore/Get                                       20ms            │
│      └─ TestStore/Put                                       30ms            │
│           └─ TestStore/Put/overwrite                        10ms            │
│  ▶ example.com/app/api                        -            1.20s            │
└─────────────────────────────────────────────────────────────────────────────┘

Cases nest under the case named by dropping their last path segment when
that case is part of the same suite, otherwise directly under the suite.
"""
from __future__ import annotations

import html
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from gotestreport.config import ReportConfig
from gotestreport.errors import RenderError
from gotestreport.logging import get_logger
from gotestreport.report import ReportModel, Status, TestNode, TestOverview

logger = get_logger(__name__)

DEFAULT_TITLE = "Go Test Report"

# Status colors and labels; unknown/skip share the neutral style
STATUS_STYLES = {
    Status.PASS: {"css": "pass", "icon": "✅", "label": "PASS"},
    Status.FAIL: {"css": "fail", "icon": "❌", "label": "FAIL"},
    Status.SKIP: {"css": "skip", "icon": "⏭️", "label": "SKIP"},
}
UNKNOWN_STYLE = {"css": "skip", "icon": "•", "label": "—"}


@dataclass
class RenderNode:
    """One card in the report: a package, a suite, or a case."""

    kind: str  # package | suite | case
    name: str
    label: str
    status: Optional[str]
    elapsed: str
    coverage: Optional[str] = None
    output: tuple[str, ...] = ()
    children: list[RenderNode] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.status == Status.FAIL

    @property
    def contains_failure(self) -> bool:
        """True when this node or any descendant failed."""
        return any(n.failed for n in self.walk())

    def walk(self):
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


def _test_node(kind: str, node: TestNode, label: str, model: ReportModel) -> RenderNode:
    return RenderNode(
        kind=kind,
        name=node.name,
        label=label,
        status=node.status,
        elapsed=node.elapsed.display,
        output=model.output_for(node.name),
    )


def _suite_tree(overview: TestOverview, model: ReportModel) -> RenderNode:
    suite = _test_node("suite", overview.suite, overview.suite.name, model)

    by_name: dict[str, RenderNode] = {}
    for case in overview.cases:
        # Repeated runs of the same case keep the first card
        by_name.setdefault(case.name, _test_node("case", case, case.name, model))

    attached: set[str] = set()
    for case in overview.cases:
        if case.name in attached:
            continue
        attached.add(case.name)
        parent_name = case.name.rsplit("/", 1)[0]
        parent = by_name.get(parent_name, suite)
        parent.children.append(by_name[case.name])

    return suite


def build_render_tree(model: ReportModel) -> list[RenderNode]:
    """Arrange the model as package → suite → case nodes.

    Packages follow the model's first-occurrence order; packages that only
    appear in test events come last, in the order their suites appear.
    """
    names = dict.fromkeys(model.packages)
    names.update(dict.fromkeys(o.suite.package for o in model.overviews))

    nodes = []
    for name in names:
        summary = model.packages.get(name)
        node = RenderNode(
            kind="package",
            name=name,
            label=name or "(no package)",
            status=summary.status if summary else None,
            elapsed=summary.elapsed.display if summary else "",
            coverage=summary.coverage if summary else None,
        )
        node.children = [_suite_tree(o, model) for o in model.overviews_for(name)]
        nodes.append(node)
    return nodes


def _render_output(lines: tuple[str, ...]) -> str:
    if not lines:
        return ""
    text = "".join(line if line.endswith("\n") else line + "\n" for line in lines)
    return f'<pre class="test-output">{html.escape(text.rstrip())}</pre>'


def _render_node(node: RenderNode) -> str:
    """Render a node and its children as a collapsible card."""
    style = STATUS_STYLES.get(node.status or "", UNKNOWN_STYLE)
    # Non-failing containers of a failure stay visible under "failures only"
    css = style["css"]
    if node.contains_failure and not node.failed:
        css += " has-failures"
    open_attr = " open" if node.contains_failure else ""
    coverage_html = ""
    if node.kind == "package":
        coverage_html = f'<span class="card-coverage">{html.escape(node.coverage or "-")}</span>'

    children_html = "\n".join(_render_node(child) for child in node.children)
    body = _render_output(node.output) + children_html
    if not body:
        return f'''
    <div class="card {node.kind} {css}" data-status="{style['css']}">
        <div class="card-header">
            <span class="card-icon">{style['icon']}</span>
            <span class="card-name">{html.escape(node.label)}</span>
            {coverage_html}
            <span class="card-duration">{html.escape(node.elapsed)}</span>
        </div>
    </div>'''

    return f'''
    <details class="card {node.kind} {css}" data-status="{style['css']}"{open_attr}>
        <summary class="card-header">
            <span class="card-icon">{style['icon']}</span>
            <span class="card-name">{html.escape(node.label)}</span>
            {coverage_html}
            <span class="card-duration">{html.escape(node.elapsed)}</span>
        </summary>
        <div class="card-body">
            {body}
        </div>
    </details>'''


def render_html_report(model: ReportModel, title: Optional[str] = None) -> str:
    """Render the report model as a self-contained HTML document.

    Args:
        model: Aggregated report model.
        title: Optional page title.

    Returns:
        Complete HTML document as string.
    """
    title = title or DEFAULT_TITLE
    tree = build_render_tree(model)
    cards_html = "\n".join(_render_node(node) for node in tree)
    if not tree:
        cards_html = '<div class="empty">No packages reported.</div>'

    return f'''<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(title)}</title>
    <style>
{_get_css()}
    </style>
</head>
<body>
    <div class="app">
        <header class="header">
            <div class="header-left">
                <h1 class="title">{html.escape(title)}</h1>
                <div class="subtitle">
                    Run date: <strong class="run-date">{html.escape(model.run_date)}</strong> ·
                    Total time: <strong class="total-time">{html.escape(model.total_time)}</strong>
                </div>
            </div>
            <div class="header-right">
                <label class="filter">
                    <input type="checkbox" id="failures-only" onchange="toggleFailuresOnly(this.checked)">
                    Failures only
                </label>
            </div>
        </header>

        <section class="summary">
            <div class="summary-card success">
                <div class="card-value" id="passed-count">{model.passed_tests}</div>
                <div class="card-label">Passed</div>
            </div>
            <div class="summary-card failure">
                <div class="card-value" id="failed-count">{model.failed_tests}</div>
                <div class="card-label">Failed</div>
            </div>
            <div class="summary-card">
                <div class="card-value" id="total-count">{model.total_tests}</div>
                <div class="card-label">Total Tests</div>
            </div>
            <div class="summary-card">
                <div class="card-value" id="package-count">{len(tree)}</div>
                <div class="card-label">Packages</div>
            </div>
        </section>

        <main class="packages">
            {cards_html}
        </main>
    </div>
    <script>
{_get_js()}
    </script>
</body>
</html>
'''


def _get_css() -> str:
    return '''
        :root {
            --bg-color: #ffffff;
            --text-color: #1f2937;
            --border-color: #e5e7eb;
            --panel-bg: #f9fafb;
            --success-color: #10b981;
            --success-bg: #d1fae5;
            --error-color: #ef4444;
            --error-bg: #fee2e2;
            --muted-color: #6b7280;
            --muted-bg: #f3f4f6;
        }
        * { box-sizing: border-box; }
        body {
            margin: 0;
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif;
            color: var(--text-color);
            background: var(--panel-bg);
        }
        .app { max-width: 1100px; margin: 0 auto; padding: 24px; }
        .header { display: flex; justify-content: space-between; align-items: flex-end; }
        .title { margin: 0 0 4px; font-size: 24px; }
        .subtitle { color: var(--muted-color); font-size: 14px; }
        .summary { display: grid; grid-template-columns: repeat(4, 1fr); gap: 12px; margin: 20px 0; }
        .summary-card {
            background: var(--bg-color);
            border: 1px solid var(--border-color);
            border-radius: 8px;
            padding: 12px 16px;
        }
        .summary-card.success .card-value { color: var(--success-color); }
        .summary-card.failure .card-value { color: var(--error-color); }
        .card-value { font-size: 28px; font-weight: 600; }
        .card-label { color: var(--muted-color); font-size: 12px; text-transform: uppercase; }
        .card {
            display: block;
            border: 1px solid var(--border-color);
            border-left-width: 4px;
            border-radius: 6px;
            margin: 6px 0;
            background: var(--bg-color);
        }
        .card.pass { border-left-color: var(--success-color); }
        .card.fail { border-left-color: var(--error-color); }
        .card.skip { border-left-color: var(--muted-color); }
        .card.package > .card-header { font-weight: 600; }
        .card.package.pass > .card-header { background: var(--success-bg); }
        .card.package.fail > .card-header { background: var(--error-bg); }
        .card.package.skip > .card-header { background: var(--muted-bg); }
        .card-header {
            display: grid;
            grid-template-columns: 28px 1fr 90px 90px;
            align-items: center;
            padding: 8px 12px;
            cursor: pointer;
        }
        .card-duration, .card-coverage { text-align: right; font-variant-numeric: tabular-nums; }
        .card-body { padding: 4px 12px 8px 24px; }
        .test-output {
            background: #111827;
            color: #e5e7eb;
            padding: 8px 12px;
            border-radius: 4px;
            overflow-x: auto;
            font-size: 12px;
        }
        .empty { color: var(--muted-color); padding: 24px; text-align: center; }
        body.failures-only .card:not(.fail):not(.has-failures) { display: none; }
    '''


def _get_js() -> str:
    return '''
        function toggleFailuresOnly(enabled) {
            document.body.classList.toggle('failures-only', enabled);
        }
    '''


def write_html_report(model: ReportModel, config: ReportConfig) -> Path:
    """Write the report files.

    Generates:
    - <report_file>: the HTML report
    - <report_file stem>.json: the model as JSON, when config.write_json is set

    Args:
        model: Aggregated report model.
        config: Output location and options.

    Returns:
        Path of the HTML report.

    Raises:
        RenderError: If the output cannot be written.
    """
    report_path = config.report_path
    try:
        config.output_dir.mkdir(parents=True, exist_ok=True)
        report_path.write_text(render_html_report(model, config.title), encoding="utf-8")
        if config.write_json:
            json_content = json.dumps(model.to_dict(), indent=2, ensure_ascii=False)
            config.json_path.write_text(json_content, encoding="utf-8")
    except OSError as e:
        raise RenderError(f"{report_path}: {e}") from e

    logger.debug("Wrote %s", report_path)
    return report_path
