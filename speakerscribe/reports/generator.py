"""
speakerscribe.reports.generator - Jinja2 rendering for HTML reports.

Templates ship inside the package. Each report gets its data both as
template variables and as a JSON blob the page script reads (the SRT
download needs the full document client-side).
"""

from __future__ import annotations

import json
import webbrowser
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, PackageLoader, select_autoescape

from speakerscribe.io import atomic_write


@lru_cache(maxsize=None)
def template_environment() -> Environment:
    return Environment(
        loader=PackageLoader("speakerscribe.reports", "templates"),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def script_json(data: dict[str, Any]) -> str:
    """Serialize data for an inline <script> block.

    ``</`` is escaped so transcript text cannot close the script element.
    """
    return json.dumps(data, ensure_ascii=False).replace("</", "<\\/")


def render_report(template_name: str, data: dict[str, Any]) -> str:
    template = template_environment().get_template(template_name)
    return template.render(data_json=script_json(data), **data)


def write_report(
    template_name: str,
    data: dict[str, Any],
    output_path: Path,
    open_browser: bool = False,
) -> Path:
    """Render a report to ``output_path``, optionally opening it.

    Returns:
        Path to the generated file
    """
    atomic_write(output_path, render_report(template_name, data))
    if open_browser:
        webbrowser.open(output_path.resolve().as_uri())
    return output_path
