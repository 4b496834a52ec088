"""OpenGraph metadata extraction using BeautifulSoup."""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import structlog
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

logger = structlog.get_logger()

OG_PREFIX = "og:"

# Well-known keys with typed accessors, in display order
STANDARD_KEYS: tuple[str, ...] = (
    "title",
    "description",
    "image",
    "url",
    "type",
    "siteName",
    "locale",
)

_CAMEL_RE = re.compile(r"_([a-z])")


@dataclass(frozen=True)
class OpenGraphData:
    """Normalized OpenGraph metadata for one page.

    Well-known properties get typed fields; any other ``og:`` property
    lands in ``extra`` under its camelCase key. A key is only present
    when a non-empty value was found for it.
    """

    title: str | None = None
    description: str | None = None
    image: str | None = None
    url: str | None = None
    type: str | None = None
    site_name: str | None = None
    locale: str | None = None
    extra: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Frozen fields can still hold a mutable dict; expose a read-only view
        if not isinstance(self.extra, MappingProxyType):
            object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @classmethod
    def from_mapping(cls, data: Mapping[str, str]) -> OpenGraphData:
        """Build from a ``{camelCaseKey: value}`` mapping, dropping empties."""
        values = {key: value for key, value in data.items() if value}
        return cls(
            title=values.pop("title", None),
            description=values.pop("description", None),
            image=values.pop("image", None),
            url=values.pop("url", None),
            type=values.pop("type", None),
            site_name=values.pop("siteName", None),
            locale=values.pop("locale", None),
            extra=values,
        )

    def to_dict(self) -> dict[str, str]:
        """Return present keys as a plain ``{camelCaseKey: value}`` dict."""
        standard = {
            "title": self.title,
            "description": self.description,
            "image": self.image,
            "url": self.url,
            "type": self.type,
            "siteName": self.site_name,
            "locale": self.locale,
        }
        result = {key: value for key, value in standard.items() if value}
        result.update(self.extra)
        return result

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.to_dict().get(key, default)

    def keys(self) -> list[str]:
        return list(self.to_dict())

    def __len__(self) -> int:
        return len(self.to_dict())

    def __iter__(self) -> Iterator[str]:
        return iter(self.to_dict())

    def __contains__(self, key: object) -> bool:
        return key in self.to_dict()

    @property
    def is_empty(self) -> bool:
        return len(self) == 0


def normalize_property(prop: str) -> str:
    """Turn an ``og:`` property name into its camelCase key.

    ``og:site_name`` → ``siteName``; ``og:image:width`` → ``imageWidth``.
    """
    raw = prop[len(OG_PREFIX) :] if prop.startswith(OG_PREFIX) else prop
    normalized = raw.replace(":", "_")
    return _CAMEL_RE.sub(lambda m: m.group(1).upper(), normalized)


def extract_metadata(html: str) -> OpenGraphData:
    """Extract OpenGraph metadata with title/description fallbacks.

    Never raises on malformed markup: a broken document yields partial
    matches or an empty result.

    Args:
        html: Raw HTML string.

    Returns:
        OpenGraphData; empty when the page carries no metadata.
    """
    try:
        soup = BeautifulSoup(html or "", "html.parser")
    except ParserRejectedMarkup as exc:
        logger.warning("metadata_parse_rejected", error=str(exc))
        return OpenGraphData()
    found: dict[str, str] = {}

    for tag in soup.find_all("meta", attrs={"property": True}):
        prop = tag.get("property")
        content = tag.get("content")
        if not isinstance(prop, str) or not prop.startswith(OG_PREFIX):
            continue
        if not isinstance(content, str) or not content:
            continue
        key = normalize_property(prop)
        if not key:
            continue
        # Later tags overwrite earlier ones with the same key
        found[key] = content

    og_count = len(found)

    if not found.get("title"):
        title_tag = soup.find("title")
        title = title_tag.get_text().strip() if title_tag is not None else ""
        if title:
            found["title"] = title

    if not found.get("description"):
        desc_tag = soup.find("meta", attrs={"name": "description"})
        desc = desc_tag.get("content") if desc_tag is not None else None
        if isinstance(desc, str) and desc.strip():
            found["description"] = desc.strip()

    logger.debug(
        "metadata_extracted",
        og_tags=og_count,
        keys=len(found),
    )
    return OpenGraphData.from_mapping(found)
