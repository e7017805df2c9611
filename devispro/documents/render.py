"""Jinja2 rendering of quote documents.

Templates live in documents/templates; French formatting filters come from
formatters.py.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from devispro.documents.formatters import format_currency, format_date, format_number, format_rate
from devispro.schemas.documents import QuoteDocument

logger = logging.getLogger(__name__)

_template_dir = Path(__file__).parent / "templates"

env = Environment(
    loader=FileSystemLoader(str(_template_dir)),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)

# Register custom filters
env.filters["currency"] = format_currency
env.filters["date"] = format_date
env.filters["number"] = format_number
env.filters["rate"] = format_rate

QUOTE_TEMPLATE = "quote.txt.j2"


def render_quote(document: QuoteDocument, template_name: str = QUOTE_TEMPLATE) -> str:
    """Render a quote document to text."""
    text = env.get_template(template_name).render(doc=document)
    logger.debug("Rendered quote %s with %s (%d chars)", document.number, template_name, len(text))
    return text
