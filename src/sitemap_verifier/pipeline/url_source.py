"""Loads already-extracted URL entries from a list file."""

import json
from pathlib import Path
from typing import Any, List, Optional
from urllib.parse import urlparse

import yaml

from sitemap_verifier.models.data_models import URLEntry


class URLSourceError(Exception):
    """URL list file is missing or malformed."""


def load_url_entries(path: Path, logger=None) -> List[URLEntry]:
    """
    Load URL entries from a JSON, YAML or plain-text file.

    JSON and YAML files hold either a list or a mapping with a "urls" list;
    items are URL strings or objects with url/lastmod/changefreq/priority.
    Any other file is read as one URL per line, skipping blanks and # comments.
    Entries that are not http(s) URLs are skipped.

    Raises:
        URLSourceError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise URLSourceError(f"Cannot read URL list {path}: {e}") from e

    suffix = path.suffix.lower()
    if suffix == ".json":
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise URLSourceError(f"Invalid JSON in {path}: {e}") from e
        items = _items_from_document(document, path)
    elif suffix in (".yaml", ".yml"):
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise URLSourceError(f"Invalid YAML in {path}: {e}") from e
        items = _items_from_document(document, path)
    else:
        items = [
            line.strip() for line in text.splitlines()
            if line.strip() and not line.strip().startswith("#")
        ]

    entries = []
    for item in items:
        entry = _to_entry(item, path)
        if _is_valid_url(entry.url):
            entries.append(entry)
        elif logger:
            logger.url_skipped(entry.url, "not an http(s) URL")
    return entries


def _items_from_document(document: Any, path: Path) -> List[Any]:
    if document is None:
        return []
    if isinstance(document, dict):
        document = document.get("urls")
    if not isinstance(document, list):
        raise URLSourceError(f"{path} must contain a list of URLs or a 'urls' list")
    return document


def _to_entry(item: Any, path: Path) -> URLEntry:
    if isinstance(item, str):
        return URLEntry(url=item.strip())
    if isinstance(item, dict) and isinstance(item.get("url"), str):
        return URLEntry(
            url=item["url"].strip(),
            lastmod=_optional_str(item.get("lastmod")),
            changefreq=_optional_str(item.get("changefreq")),
            priority=_optional_float(item.get("priority"), path)
        )
    raise URLSourceError(f"Unrecognized URL entry in {path}: {item!r}")


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _optional_float(value: Any, path: Path) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise URLSourceError(f"Invalid priority {value!r} in {path}") from e


def _is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
