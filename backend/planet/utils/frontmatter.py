"""Markdown front-matter extraction.

Splits a document of the form::

    ---
    title: Setup
    summary: First steps
    ---
    # Setup

into ``({"title": "Setup", "summary": "First steps"}, "# Setup\n")``.
Documents without a leading ``---`` block are returned unchanged with empty
metadata.
"""

import re
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .logging import get_logger

logger = get_logger(__name__)

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)

_yaml = YAML(typ="safe", pure=True)


def split_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Return ``(metadata, body)`` for a markdown document.

    Malformed YAML headers and headers that are not mappings are treated as
    absent; the whole document is then returned as the body.
    """
    if not content:
        return {}, content or ""

    match = _FRONTMATTER_RE.match(content)
    if not match:
        return {}, content

    try:
        data = _yaml.load(match.group(1))
    except YAMLError as e:
        logger.warning(f"Ignoring malformed front-matter: {e}")
        return {}, content

    if data is None:
        data = {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring front-matter of type {type(data).__name__}")
        return {}, content

    return _jsonable(data), content[match.end():]


def _jsonable(value: Any) -> Any:
    """Coerce YAML scalars (dates, timestamps) into JSON-storable values."""
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)
