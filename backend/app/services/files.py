from __future__ import annotations
import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable
from urllib.parse import unquote, urlsplit
import structlog
from app.schemas.enums import FileCategory
from app.schemas.submission import FileDescriptor

log = structlog.get_logger()

PRESENTATION_EXT = re.compile(r"\.(pdf|ppt|pptx|key|odp)$", re.IGNORECASE)
PRESENTATION_TYPE_HINTS = ("presentation", "pdf", "powerpoint")
DEFAULT_NAME = "File"


class RejectionKind(str, Enum):
    PARSE_ERROR = "ParseError"
    UNKNOWN_STRING_FORMAT = "UnknownStringFormat"
    MISSING_URL = "MissingUrl"
    INVALID_URL_SCHEME = "InvalidUrlScheme"
    UNSUPPORTED_TYPE = "UnsupportedType"


@dataclass(frozen=True)
class Rejected:
    kind: RejectionKind
    detail: str = ""


class FileEncoding(str, Enum):
    """Historical encodings of one entry of a submission's `files` field."""

    JSON_STRING = "json_string"   # '{"name": ..., "url": ...}'
    URL_STRING = "url_string"     # 'https://storage/.../deck.pdf'
    OBJECT = "object"             # {"url": ...} and/or {"downloadUrl": ...}


def _is_http_url(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


def detect_encoding(raw: Any) -> FileEncoding | Rejected:
    if isinstance(raw, dict):
        return FileEncoding.OBJECT
    if isinstance(raw, str):
        text = raw.strip()
        if text.startswith("{"):
            return FileEncoding.JSON_STRING
        if _is_http_url(text):
            return FileEncoding.URL_STRING
        return Rejected(RejectionKind.UNKNOWN_STRING_FORMAT, text[:50])
    return Rejected(RejectionKind.UNSUPPORTED_TYPE, type(raw).__name__)


def url_basename(url: str) -> str:
    path = urlsplit(url).path
    return unquote(path.rstrip("/").rsplit("/", 1)[-1])


def _from_json_string(raw: str) -> dict | Rejected:
    try:
        data = json.loads(raw)
    except ValueError as e:
        return Rejected(RejectionKind.PARSE_ERROR, str(e))
    if not isinstance(data, dict):
        return Rejected(RejectionKind.PARSE_ERROR, "expected a JSON object")
    return data


def _from_url_string(raw: str) -> dict:
    url = raw.strip()
    return {"name": url_basename(url), "url": url, "size": 0}


def _from_object(raw: dict) -> dict:
    return raw


_DECODERS: dict[FileEncoding, Callable[[Any], dict | Rejected]] = {
    FileEncoding.JSON_STRING: _from_json_string,
    FileEncoding.URL_STRING: _from_url_string,
    FileEncoding.OBJECT: _from_object,
}


def classify_category(name: str, mime_type: str = "") -> FileCategory:
    if PRESENTATION_EXT.search(name or ""):
        return FileCategory.PRESENTATION
    lowered = (mime_type or "").lower()
    if any(hint in lowered for hint in PRESENTATION_TYPE_HINTS):
        return FileCategory.PRESENTATION
    return FileCategory.PROJECT


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _coerce_size(value: Any) -> int:
    try:
        size = int(value or 0)
    except (TypeError, ValueError):
        return 0
    return max(size, 0)


def decode(raw: Any, fallback_name: str | None = None) -> FileDescriptor | Rejected:
    """
    Decode one raw `files` entry into a FileDescriptor, or return a Rejected value.

    A signed `downloadUrl` wins over the bare storage `url`. Only http(s) URLs are
    accepted; legacy `file://` entries are rejected rather than repaired.
    """
    encoding = detect_encoding(raw)
    if isinstance(encoding, Rejected):
        return encoding
    data = _DECODERS[encoding](raw)
    if isinstance(data, Rejected):
        return data

    url = data.get("downloadUrl") or data.get("url")
    if not url:
        return Rejected(RejectionKind.MISSING_URL)
    url = str(url).strip()
    if not _is_http_url(url):
        return Rejected(RejectionKind.INVALID_URL_SCHEME, url.split(":", 1)[0])

    name = _text(data.get("name")) or _text(data.get("originalName")) or url_basename(url).strip() or fallback_name or DEFAULT_NAME
    mime_type = data.get("type") or data.get("mimeType") or ""
    return FileDescriptor(
        name=str(name),
        url=url,
        size=_coerce_size(data.get("size")),
        type=str(mime_type),
        category=classify_category(str(name), str(mime_type)),
    )


def _entries(raws: Any) -> list[Any]:
    if raws is None or raws == "":
        return []
    if isinstance(raws, str):
        text = raws.strip()
        if text.startswith("["):
            try:
                parsed = json.loads(text)
            except ValueError as e:
                log.warning("files_field_unparseable", error=str(e))
                return []
            return parsed if isinstance(parsed, list) else []
        return [text]
    if isinstance(raws, dict):
        return [raws]
    if isinstance(raws, (list, tuple)):
        return list(raws)
    return []


def decode_all(raws: Any) -> list[FileDescriptor]:
    """Decode every entry of a `files` field, dropping rejections. Never raises."""
    out: list[FileDescriptor] = []
    for index, raw in enumerate(_entries(raws)):
        result = decode(raw, fallback_name=f"{DEFAULT_NAME} {index + 1}")
        if isinstance(result, Rejected):
            log.warning("file_rejected", index=index, kind=result.kind.value, detail=result.detail)
            continue
        out.append(result)
    return out
