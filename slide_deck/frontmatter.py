"""
Frontmatter extraction for slide decks.

Two header formats are recognised at the very start of a document:

* ``---`` ... ``---`` holds YAML
* ``+++`` ... ``+++`` holds TOML

Anything else means "no frontmatter" and the document is returned as is.
"""
import datetime
import logging
import tomllib
from typing import Any, Dict, Optional, Tuple

import yaml

from .errors import FrontmatterError
from .models import Meta

logger = logging.getLogger(__name__)

YAML_DELIMITER = "---"
TOML_DELIMITER = "+++"

_FORMATS = {
    YAML_DELIMITER: "YAML",
    TOML_DELIMITER: "TOML",
}

META_FIELDS = ("theme", "author", "date", "paging")


def extract_frontmatter(markdown_text: str) -> Tuple[Meta, str]:
    """
    Split an optional frontmatter block from the document body.

    Args:
        markdown_text: Full document text

    Returns:
        Tuple of (Meta, body). Without frontmatter the body is the input
        text, unchanged.

    Raises:
        FrontmatterError: If the block is never closed or cannot be parsed
    """
    stripped = markdown_text.lstrip()
    lines = stripped.split("\n")
    delimiter = lines[0].rstrip()
    if delimiter not in _FORMATS:
        return Meta(), markdown_text

    fmt = _FORMATS[delimiter]
    for idx in range(1, len(lines)):
        if lines[idx].rstrip() == delimiter:
            header = "\n".join(lines[1:idx])
            body = "\n".join(lines[idx + 1:])
            logger.debug("Found %s frontmatter (%d lines)", fmt, idx - 1)
            return parse_meta(header, fmt), body

    raise FrontmatterError(f"Unclosed {fmt} frontmatter block (missing closing {delimiter})")


def parse_meta(header: str, fmt: str = "YAML") -> Meta:
    """
    Deserialize a frontmatter header into :class:`Meta`.

    Args:
        header: Text between the delimiters
        fmt: ``"YAML"`` or ``"TOML"``

    Raises:
        FrontmatterError: On a syntax error or a non-mapping document
    """
    if not header.strip():
        return Meta()

    if fmt == "TOML":
        try:
            data = tomllib.loads(header)
        except tomllib.TOMLDecodeError as exc:
            raise FrontmatterError(f"Failed to parse TOML: {exc}") from exc
    else:
        try:
            data = yaml.safe_load(header)
        except yaml.YAMLError as exc:
            raise FrontmatterError(f"Failed to parse YAML: {exc}") from exc

    if data is None:
        return Meta()
    if not isinstance(data, dict):
        raise FrontmatterError(f"Failed to parse {fmt}: expected a mapping, got {type(data).__name__}")

    return Meta(**_meta_fields(data, fmt))


def _meta_fields(data: Dict[str, Any], fmt: str) -> Dict[str, str]:
    fields: Dict[str, str] = {}
    for key, value in data.items():
        if key not in META_FIELDS:
            logger.debug("Ignoring unknown frontmatter key %r", key)
            continue
        if value is None:
            continue
        text = _scalar_to_str(value)
        if text is None:
            raise FrontmatterError(f"Failed to parse {fmt}: '{key}' must be a string, got {type(value).__name__}")
        fields[key] = text
    return fields


def _scalar_to_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    return None
