"""
Document download formats: plain text, Markdown and standalone HTML.
"""
from __future__ import annotations

import html
from typing import Any, Dict, Tuple

from app.utils.helpers import safe_filename

EXPORT_FORMATS: Dict[str, str] = {
    "txt": "text/plain; charset=utf-8",
    "md": "text/markdown; charset=utf-8",
    "html": "text/html; charset=utf-8",
}

_HTML_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>
        body {{ font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; padding: 20px; }}
        h1 {{ color: #333; border-bottom: 2px solid #eee; padding-bottom: 10px; }}
        .content {{ line-height: 1.6; white-space: pre-wrap; }}
        .meta {{ color: #666; font-size: 0.9em; margin-top: 20px; border-top: 1px solid #eee; padding-top: 10px; }}
    </style>
</head>
<body>
    <h1>{title}</h1>
    <div class="content">{content}</div>
    <div class="meta">
        <p>Word count: {word_count} | Character count: {char_count}</p>
        <p>Created: {created}</p>
        <p>Last updated: {updated}</p>
    </div>
</body>
</html>
"""


def _date(value: Any) -> str:
    return value.strftime("%Y-%m-%d") if value is not None else ""


def render_document(document: Any, fmt: str) -> Tuple[str, str, str]:
    """
    Render *document* in one of ``EXPORT_FORMATS``.

    Returns:
        (body, media_type, file_name)

    Raises:
        ValueError: unknown format.
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt!r}")

    title = document.title or "Untitled"
    content = document.content or ""

    if fmt == "txt":
        body = f"{title}\n\n{content}"
    elif fmt == "md":
        body = f"# {title}\n\n{content}"
    else:
        body = _HTML_TEMPLATE.format(
            title=html.escape(title),
            content=html.escape(content),
            word_count=document.word_count,
            char_count=document.char_count,
            created=_date(document.created_at),
            updated=_date(document.updated_at),
        )

    return body, EXPORT_FORMATS[fmt], f"{safe_filename(title)}.{fmt}"
