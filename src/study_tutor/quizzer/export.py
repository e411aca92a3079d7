"""Export grade reports as clipboard text, Markdown, HTML, or PDF."""

from __future__ import annotations

from datetime import date
from html import escape
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment
from markdown_it import MarkdownIt

from .models import GradeReport

_MARKDOWN_TEMPLATE = """\
# {{ title }}

{{ date_str }}

**Score:** {{ report.score_label }} ({{ report.percentage }}%)
{%- if report.elapsed_seconds is not none %}
**Time:** {{ report.elapsed_seconds }}s
{%- endif %}

{{ report.feedback }}

{% for verdict in report.verdicts -%}
## {{ verdict.index + 1 }}. {{ verdict.question.text }}

- Your answer: {{ verdict.submitted_text or "(unanswered)" }}
- Correct answer: {{ verdict.correct_text }}
- Result: {{ "Correct" if verdict.is_correct else "Incorrect" }}

{{ verdict.explanation }}

{% endfor -%}
"""

_HTML_SHELL = """\
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{title}</title>
  <style>
    body {{ font-family: 'DejaVu Sans', 'Liberation Sans', sans-serif;
           color: #111; line-height: 1.4; }}
    h2 {{ page-break-after: avoid; }}
  </style>
</head>
<body>
{body}
</body>
</html>
"""


def summary_text(report: GradeReport) -> str:
    """One-line result suitable for copying to the clipboard."""
    text = f"Quiz score: {report.score_label} ({report.percentage}%)"
    if report.elapsed_seconds is not None:
        text += f" in {report.elapsed_seconds}s"
    return f"{text} - {report.feedback}"


def render_markdown(
    report: GradeReport,
    *,
    title: str = "Quiz Results",
    date_str: Optional[str] = None,
) -> str:
    env = Environment(autoescape=False, keep_trailing_newline=True)
    template = env.from_string(_MARKDOWN_TEMPLATE)
    return template.render(
        report=report,
        title=title,
        date_str=date_str or date.today().isoformat(),
    )


def render_html(
    report: GradeReport,
    *,
    title: str = "Quiz Results",
    date_str: Optional[str] = None,
) -> str:
    # Raw HTML in model text is rendered literally.
    md = MarkdownIt("commonmark", options_update={"html": False})
    body = md.render(render_markdown(report, title=title, date_str=date_str))
    return _HTML_SHELL.format(title=escape(title), body=body)


def write_report(
    report: GradeReport,
    path: Path,
    *,
    title: str = "Quiz Results",
) -> Path:
    """Write ``report`` to ``path``; the suffix picks the format."""
    suffix = path.suffix.lower()
    path.parent.mkdir(parents=True, exist_ok=True)
    if suffix in {".md", ".markdown"}:
        path.write_text(render_markdown(report, title=title), encoding="utf-8")
    elif suffix in {".html", ".htm"}:
        path.write_text(render_html(report, title=title), encoding="utf-8")
    elif suffix == ".pdf":
        html_cls = _load_weasyprint()
        html_cls(string=render_html(report, title=title)).write_pdf(
            target=str(path)
        )
    else:
        raise ValueError(
            f"Unsupported export format '{suffix or path.name}'. "
            "Use .md, .html, or .pdf"
        )
    return path


def _load_weasyprint() -> Any:
    try:
        from weasyprint import HTML
    except Exception as exc:
        raise RuntimeError(
            "PDF export requires WeasyPrint. Install system libraries "
            "(Cairo, Pango) and the 'weasyprint' package."
        ) from exc
    return HTML
