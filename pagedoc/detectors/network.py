"""Network collector: turns a recorded HAR into normalised resource entries."""

from __future__ import annotations

import json
from pathlib import Path
from urllib.parse import urlparse

from pagedoc.models.types import ResourceEntry, ResourceType

_DECLARED_TYPES = {
    "image": ResourceType.IMAGE,
    "stylesheet": ResourceType.STYLESHEET,
    "script": ResourceType.SCRIPT,
    "font": ResourceType.FONT,
}

_EXTENSION_TYPES = {
    "png": ResourceType.IMAGE, "jpg": ResourceType.IMAGE, "jpeg": ResourceType.IMAGE,
    "gif": ResourceType.IMAGE, "webp": ResourceType.IMAGE, "avif": ResourceType.IMAGE,
    "svg": ResourceType.IMAGE, "ico": ResourceType.IMAGE, "bmp": ResourceType.IMAGE,
    "css": ResourceType.STYLESHEET,
    "js": ResourceType.SCRIPT, "mjs": ResourceType.SCRIPT,
    "woff": ResourceType.FONT, "woff2": ResourceType.FONT, "ttf": ResourceType.FONT,
    "otf": ResourceType.FONT, "eot": ResourceType.FONT,
}


class NetworkCollector:
    """Records a HAR for a browser context and reads it back once the context is closed."""

    def __init__(self, har_path: str | Path):
        self.har_path = Path(har_path)

    def context_options(self) -> dict:
        return {"record_har_path": str(self.har_path), "record_har_content": "omit"}

    def collect(self) -> list[ResourceEntry]:
        with self.har_path.open(encoding="utf-8") as fh:
            har = json.load(fh)
        return resources_from_har(har)


def resources_from_har(har: dict) -> list[ResourceEntry]:
    """Accepts either a full HAR document or its bare ``log`` object."""
    log = har.get("log", har)
    return [_entry_to_resource(e) for e in log.get("entries", [])]


def _entry_to_resource(entry: dict) -> ResourceEntry:
    request = entry.get("request") or {}
    response = entry.get("response") or {}
    content = response.get("content") or {}
    url = request.get("url", "")

    # HAR uses -1 for "unknown"; zero falls through as well
    size = 0
    for candidate in (response.get("_transferSize"), content.get("size")):
        if isinstance(candidate, (int, float)) and candidate > 0:
            size = int(candidate)
            break

    time = entry.get("time")
    time = float(time) if isinstance(time, (int, float)) and time > 0 else 0.0

    return ResourceEntry(
        name=url,
        size=size,
        type=_resource_type(entry, content.get("mimeType", ""), url),
        time=time,
        human_size=format_bytes(size),
    )


def _resource_type(entry: dict, mime_type: str, url: str) -> ResourceType:
    declared = str(entry.get("_resourceType", "")).lower()
    if declared in _DECLARED_TYPES:
        return _DECLARED_TYPES[declared]

    mime = (mime_type or "").split(";", 1)[0].strip().lower()
    if mime.startswith("image/"):
        return ResourceType.IMAGE
    if mime == "text/css":
        return ResourceType.STYLESHEET
    if "javascript" in mime or "ecmascript" in mime:
        return ResourceType.SCRIPT
    if mime.startswith("font/") or "font" in mime:
        return ResourceType.FONT

    path = urlparse(url).path
    ext = path.rsplit(".", 1)[-1].lower() if "." in path.rsplit("/", 1)[-1] else ""
    return _EXTENSION_TYPES.get(ext, ResourceType.OTHER)


def format_bytes(size: int) -> str:
    if size < 1024:
        return f"{size}B"
    if size < 1024 * 1024:
        return f"{round(size / 1024)}KB"
    return f"{size / (1024 * 1024):.2f}MB"
