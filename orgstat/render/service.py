"""Rendering of ranked contributor reports into a static HTML page."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from orgstat.aggregate.models import Report
from orgstat.errors import RenderError

LOGGER = logging.getLogger(__name__)

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
STDOUT_DESTINATION = "-"


def intcomma(value: int) -> str:
    """Format an integer with a comma after every three orders of magnitude."""
    return f"{value:,}"


class RenderService:
    """Render a ranked report into a single HTML document."""

    def __init__(self, *, template_dir: Path | None = None, template_name: str = "index.html.j2") -> None:
        """Initialise a renderer reading templates from ``template_dir``."""
        self._template_dir = Path(template_dir or DEFAULT_TEMPLATE_DIR)
        self._template_name = template_name
        self._env = Environment(
            loader=FileSystemLoader(self._template_dir),
            autoescape=select_autoescape(["html", "xml", "html.j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._env.filters["intcomma"] = intcomma

    def run(self, report: Report, destination: str | Path) -> Path | None:
        """Render the report and write it to ``destination``; '-' means standard output."""
        document = self.render(report)
        if str(destination) == STDOUT_DESTINATION:
            sys.stdout.write(document)
            sys.stdout.flush()
            return None
        target = Path(destination)
        try:
            target.write_text(document, encoding="utf-8")
        except OSError as exc:
            msg = f"could not write {target}: {exc}"
            raise RenderError(msg) from exc
        LOGGER.debug("Wrote report for %s to %s", report.organization, target)
        return target

    def render(self, report: Report) -> str:
        """Return the HTML document for the report."""
        try:
            template = self._env.get_template(self._template_name)
            return template.render(
                report=report,
                report_data=report.model_dump(mode="json"),
            )
        except TemplateError as exc:
            msg = f"could not render template {self._template_name}: {exc}"
            raise RenderError(msg) from exc
