from __future__ import annotations

import html


def sanitize_html_text(value: str) -> str:
    return html.escape(value, quote=True)


def clean_text(value: str) -> str:
    """Trim surrounding whitespace and escape markup for safe re-rendering."""
    return sanitize_html_text(value.strip())
