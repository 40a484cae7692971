"""SKILL.md frontmatter parsing and capability metadata decoding."""

from __future__ import annotations

import json
import re
from typing import Any

from skillkit.models import INSTALL_KINDS, SkillInstallSpec, SkillMetadata, SkillRequires

METADATA_FIELD = "metadata"
# Vendor keys the capability object may be nested under, checked in order.
METADATA_NAMESPACES: tuple[str, ...] = ("skillkit", "clawdis", "openclaw")

_FRONTMATTER_LINE_RE = re.compile(r"^([\w-]+):\s*(.*)$")


def _strip_quotes(value: str) -> str:
    for quote in ('"', "'"):
        if value.startswith(quote) and value.endswith(quote):
            return value[1:-1]
    return value


def parse_frontmatter(content: str) -> dict[str, str]:
    """Extract ``key: value`` pairs from a leading ``---`` delimited block.

    Missing or unterminated blocks yield an empty mapping.
    """
    text = (content or "").replace("\r\n", "\n").replace("\r", "\n")
    if not text.startswith("---"):
        return {}
    end = text.find("\n---", 3)
    if end < 0:
        return {}
    frontmatter: dict[str, str] = {}
    for line in text[4:end].split("\n"):
        match = _FRONTMATTER_LINE_RE.match(line)
        if not match:
            continue
        key = match.group(1)
        value = _strip_quotes(match.group(2).strip())
        if not key or not value:
            continue
        frontmatter[key] = value
    return frontmatter


def _normalize_string_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return []


def _optional_str(raw: dict[str, Any], key: str) -> str | None:
    value = raw.get(key)
    return value if isinstance(value, str) else None


def parse_install_spec(value: Any) -> SkillInstallSpec | None:
    """Validate one ``install`` item; unknown or missing kinds are dropped."""
    if not isinstance(value, dict):
        return None
    kind_raw = value.get("kind")
    if not isinstance(kind_raw, str):
        kind_raw = value.get("type")
    if not isinstance(kind_raw, str):
        return None
    kind = kind_raw.strip().lower()
    if kind not in INSTALL_KINDS:
        return None
    return SkillInstallSpec(
        kind=kind,
        id=_optional_str(value, "id"),
        label=_optional_str(value, "label"),
        bins=_normalize_string_list(value.get("bins")),
        formula=_optional_str(value, "formula"),
        package=_optional_str(value, "package"),
        module=_optional_str(value, "module"),
    )


def _unwrap_namespace(payload: dict[str, Any]) -> dict[str, Any] | None:
    for key in METADATA_NAMESPACES:
        candidate = payload.get(key)
        if isinstance(candidate, dict):
            return candidate
    return None


def resolve_skill_metadata(frontmatter: dict[str, str]) -> SkillMetadata | None:
    """Decode the JSON capability object held in the ``metadata`` field.

    Returns None when the field is absent, is not a JSON object, has no
    recognized namespace, or fails to parse.
    """
    raw = frontmatter.get(METADATA_FIELD)
    if not isinstance(raw, str) or not raw:
        return None
    try:
        parsed = json.loads(raw)
    except (ValueError, RecursionError):
        return None
    if not isinstance(parsed, dict):
        return None
    meta = _unwrap_namespace(parsed)
    if meta is None:
        return None

    requires_raw = meta.get("requires")
    requires: SkillRequires | None = None
    if isinstance(requires_raw, dict):
        requires = SkillRequires(
            bins=_normalize_string_list(requires_raw.get("bins")),
            env=_normalize_string_list(requires_raw.get("env")),
            config=_normalize_string_list(requires_raw.get("config")),
        )

    install_raw = meta.get("install")
    install: list[SkillInstallSpec] = []
    if isinstance(install_raw, list):
        for item in install_raw:
            spec = parse_install_spec(item)
            if spec is not None:
                install.append(spec)

    always = meta.get("always")
    return SkillMetadata(
        always=always if isinstance(always, bool) else None,
        skill_key=_optional_str(meta, "skillKey"),
        primary_env=_optional_str(meta, "primaryEnv"),
        emoji=_optional_str(meta, "emoji"),
        homepage=_optional_str(meta, "homepage"),
        requires=requires,
        install=install,
    )
