"""Element metadata helpers.

Older elements store attachment fields under legacy keys (``public_url``,
``file_name``). Canonical keys always win; legacy keys are only a fallback
and values from the two are never combined.
"""
from typing import Any, Mapping, Optional

# (canonical, legacy)
LEGACY_KEYS: tuple[tuple[str, str], ...] = (
    ("url", "public_url"),
    ("filename", "file_name"),
)

DEFAULT_FILENAME = "File"


def resolve_url(metadata: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Return the attachment/link URL, or None when neither key is set."""
    metadata = metadata or {}
    return metadata.get("url") or metadata.get("public_url") or None


def resolve_filename(metadata: Optional[Mapping[str, Any]]) -> str:
    """Return the attachment filename, falling back to "File"."""
    metadata = metadata or {}
    return metadata.get("filename") or metadata.get("file_name") or DEFAULT_FILENAME


def normalize_metadata(metadata: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Return a copy with legacy keys folded into their canonical names.

    Run once when rows are loaded so read sites only ever see canonical keys.
    """
    result = dict(metadata or {})
    for canonical, legacy in LEGACY_KEYS:
        legacy_value = result.pop(legacy, None)
        if not result.get(canonical) and legacy_value:
            result[canonical] = legacy_value
    return result
