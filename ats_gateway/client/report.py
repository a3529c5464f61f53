"""HTML report rendering for PDF export."""

from __future__ import annotations

import json
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from ats_gateway.client.models import AnalysisReport

TEMPLATE_DIR = Path(__file__).parent / "templates"

_jinja_env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), autoescape=True)


def build_report_html(
    report: AnalysisReport | None,
    optimized_text: str | None = None,
    title: str = "Resume Intelligence",
) -> str:
    """Render the optimized resume, or the analysis report, as an HTML page.

    All user text is escaped.
    """
    if optimized_text:
        body = optimized_text
    elif report is not None:
        body = json.dumps(report.to_payload(), indent=2)
    else:
        body = "No results"

    template = _jinja_env.get_template("report.html")
    return template.render(title=title, report=report, body=body)
