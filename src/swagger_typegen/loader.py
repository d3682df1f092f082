"""API description loading from local files or remote locations."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import httpx
import yaml

from .json_types import JSONObject, JSONValue

logger = logging.getLogger(__name__)

REMOTE_SCHEMES: tuple[str, ...] = ("http://", "https://")
DEFAULT_TIMEOUT = 30.0


class SpecLoadError(RuntimeError):
    """Raised when a source API description cannot be loaded."""


def is_remote(location: str) -> bool:
    return location.startswith(REMOTE_SCHEMES)


def load_document(
    location: str,
    *,
    base_dir: Path,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> JSONObject:
    """Load an API description from a path or an ``http(s)://`` URL.

    Args:
        location (str): Local path (relative to ``base_dir``) or URL.
        base_dir (Path): Directory relative paths are resolved against.
        transport (Optional[httpx.AsyncBaseTransport]): Transport override
            for remote loading.

    Returns:
        JSONObject: Parsed document.
    """
    if is_remote(location):
        text = asyncio.run(fetch_document(location, transport=transport))
        return parse_document(text, source=location)

    path = Path(location)
    if not path.is_absolute():
        path = base_dir / path
    if not path.is_file():
        raise SpecLoadError(f"API description file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecLoadError(f"Failed to read API description {path}: {exc}") from exc
    logger.info("Loaded API description from %s", path)
    return parse_document(text, source=str(path))


async def fetch_document(
    url: str,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Download a remote API description, buffering the full body."""
    try:
        async with httpx.AsyncClient(
            transport=transport, timeout=timeout, follow_redirects=True
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecLoadError(
            f"Failed to fetch {url}: HTTP {exc.response.status_code}"
        ) from exc
    except httpx.HTTPError as exc:
        raise SpecLoadError(f"Failed to fetch {url}: {exc}") from exc
    logger.info("Fetched API description from %s (%d bytes)", url, len(response.content))
    return response.text


def parse_document(text: str, *, source: str) -> JSONObject:
    """Parse JSON or YAML text into a document mapping."""
    try:
        if source.endswith(".json") or text.lstrip().startswith("{"):
            payload = json.loads(text)
        else:
            payload = yaml.safe_load(text)
    except json.JSONDecodeError as exc:
        raise SpecLoadError(f"Failed to parse JSON in {source}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise SpecLoadError(f"Failed to parse YAML in {source}: {exc}") from exc

    payload_value: JSONValue = payload
    if not isinstance(payload_value, dict):
        raise SpecLoadError(
            f"API description must deserialize to a mapping, got {type(payload_value)!r}"
        )
    return payload_value
