"""Immutable document model built from a fetched page."""
from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any
from urllib.parse import urljoin, urlparse

import extruct
from bs4 import BeautifulSoup
from readability import Document

from src.errors import ParseError
from src.fetcher.html_fetcher import FetchedPage

logger = logging.getLogger(__name__)

_HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
_NON_CONTENT_TAGS = ["script", "style", "noscript", "template", "svg"]
_BLOCK_SEPARATOR_TAGS = ["p", "li", "h1", "h2", "h3", "h4", "h5", "h6", "tr", "blockquote", "div", "section", "article"]


@dataclass(frozen=True)
class StructuredDataBlock:
    """One JSON-LD script block; unparseable blocks are kept with is_valid=False."""
    index: int
    raw: str
    data: Any
    is_valid: bool
    error: str | None = None

    def items(self) -> list[dict]:
        """Flatten top-level lists and @graph containers into schema objects."""
        if not self.is_valid:
            return []
        return _flatten_items(self.data)

    @property
    def has_graph(self) -> bool:
        return self.is_valid and isinstance(self.data, dict) and isinstance(self.data.get("@graph"), list)


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class Link:
    href: str
    anchor_text: str
    is_internal: bool
    rel: tuple[str, ...] = ()

    @property
    def nofollow(self) -> bool:
        return "nofollow" in self.rel


@dataclass(frozen=True)
class Image:
    src: str
    alt: str | None
    has_dimensions: bool
    loading: str | None = None
    has_srcset: bool = False


@dataclass(frozen=True)
class DocumentModel:
    """Read-only snapshot of one page.

    ``dom`` is the parsed tree shared by the scorers; it is only ever
    queried, never modified, after construction.
    """
    url: str
    raw_html: str
    text_content: str
    title: str | None
    structured_data_blocks: tuple[StructuredDataBlock, ...]
    meta_tags: Mapping[str, str]
    headings: tuple[Heading, ...]
    links: tuple[Link, ...]
    images: tuple[Image, ...]
    language: str
    detected_language: str = "en"
    microdata_types: tuple[str, ...] = ()
    main_content: str = ""
    robots_txt: str | None = None
    http_headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    status_code: int = 200
    was_redirected: bool = False
    dom: BeautifulSoup | None = field(default=None, compare=False, repr=False)

    @property
    def is_https(self) -> bool:
        return urlparse(self.url).scheme == "https"

    @property
    def path(self) -> str:
        return urlparse(self.url).path or "/"

    @property
    def word_count(self) -> int:
        return _word_count(self.text_content)

    @property
    def html_size(self) -> int:
        return len(self.raw_html.encode("utf-8"))

    def header(self, name: str) -> str:
        """Case-insensitive HTTP header lookup ('' when absent)."""
        name = name.lower()
        for key, value in self.http_headers.items():
            if key.lower() == name:
                return value
        return ""

    def schema_items(self) -> list[dict]:
        """All schema.org objects from valid JSON-LD blocks."""
        items: list[dict] = []
        for block in self.structured_data_blocks:
            items.extend(block.items())
        return items

    def schema_types(self) -> set[str]:
        """Schema.org types from JSON-LD items and microdata."""
        types: set[str] = set(self.microdata_types)
        for item in self.schema_items():
            types.update(item_types(item))
        return types

    def select(self, selector: str) -> list:
        if self.dom is None:
            return []
        return self.dom.select(selector)

    def find(self, *args, **kwargs):
        if self.dom is None:
            return None
        return self.dom.find(*args, **kwargs)

    def find_all(self, *args, **kwargs) -> list:
        if self.dom is None:
            return []
        return self.dom.find_all(*args, **kwargs)


def item_types(item: dict) -> list[str]:
    """Normalize @type to a list of bare type names."""
    raw = item.get("@type", [])
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        return []
    return [str(t).rsplit("/", 1)[-1] for t in raw if t]


def _flatten_items(data: Any) -> list[dict]:
    if isinstance(data, list):
        items = []
        for entry in data:
            items.extend(_flatten_items(entry))
        return items
    if not isinstance(data, dict):
        return []
    items = []
    if "@type" in data:
        items.append(data)
    graph = data.get("@graph")
    if isinstance(graph, list):
        items.extend(_flatten_items(graph))
    return items


def _clean_text(text: str) -> str:
    return " ".join(text.split())


def _word_count(text: str) -> int:
    if not text:
        return 0
    return len(text.split())


def _detect_language(text: str) -> str:
    """Detect primary language of text based on character patterns.

    Returns:
        Language code: 'zh', 'ja', 'ko' or 'en'
    """
    if not text:
        return "en"

    cjk_count = 0
    latin_count = 0

    for char in text[:1000]:  # Sample first 1000 chars
        code = ord(char)
        # CJK Unified Ideographs
        if 0x4E00 <= code <= 0x9FFF:
            cjk_count += 1
        # Hiragana/Katakana (Japanese specific)
        elif 0x3040 <= code <= 0x30FF:
            return "ja"
        # Hangul (Korean specific)
        elif 0xAC00 <= code <= 0xD7AF:
            return "ko"
        elif (0x0041 <= code <= 0x005A) or (0x0061 <= code <= 0x007A):
            latin_count += 1

    total = cjk_count + latin_count
    if total == 0:
        return "en"
    if cjk_count / total > 0.3:
        return "zh"
    return "en"


def _classify_link(href: str, base_url: str) -> str:
    if not href:
        return "external"
    parsed = urlparse(href)
    if parsed.scheme in {"http", "https"}:
        if base_url:
            base_netloc = urlparse(base_url).netloc
            return "internal" if parsed.netloc == base_netloc else "external"
        return "external"
    if parsed.scheme in {"mailto", "tel", "javascript"}:
        return "external"
    return "internal"


def _extract_structured_data(soup: BeautifulSoup) -> tuple[StructuredDataBlock, ...]:
    blocks = []
    scripts = soup.find_all("script", attrs={"type": lambda v: v and v.lower().strip() == "application/ld+json"})
    for index, script in enumerate(scripts):
        raw = (script.string or script.get_text() or "").strip()
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, ValueError) as exc:
            logger.debug("Invalid JSON-LD block %d: %s", index, exc)
            blocks.append(StructuredDataBlock(index=index, raw=raw, data=None, is_valid=False, error=str(exc)))
            continue
        blocks.append(StructuredDataBlock(index=index, raw=raw, data=data, is_valid=True))
    return tuple(blocks)


def _extract_microdata_types(html: str, url: str) -> tuple[str, ...]:
    try:
        data = extruct.extract(html, base_url=url or None, syntaxes=["microdata"], uniform=True)
    except (ValueError, TypeError) as exc:
        logger.debug("Microdata extraction failed: %s", exc)
        return ()
    types: set[str] = set()
    for item in data.get("microdata", []):
        if isinstance(item, dict):
            types.update(item_types(item))
    return tuple(sorted(types))


def _extract_meta_tags(soup: BeautifulSoup) -> dict[str, str]:
    meta: dict[str, str] = {}
    for tag in soup.find_all("meta"):
        if tag.get("charset"):
            meta.setdefault("charset", tag["charset"].strip())
            continue
        key = tag.get("name") or tag.get("property")
        if key:
            meta.setdefault(key.strip().lower(), (tag.get("content") or "").strip())
            continue
        http_equiv = tag.get("http-equiv")
        if http_equiv:
            key = f"http-equiv:{http_equiv.strip().lower()}"
            meta.setdefault(key, (tag.get("content") or "").strip())
            if http_equiv.strip().lower() == "content-type" and "charset=" in (tag.get("content") or "").lower():
                meta.setdefault("charset", tag["content"].lower().split("charset=", 1)[1].strip())
    return meta


def _extract_text(soup: BeautifulSoup) -> str:
    """Visible body text, one block per line."""
    body = soup.body or soup
    fragment = BeautifulSoup(str(body), "lxml")
    for tag in fragment.find_all(_NON_CONTENT_TAGS):
        tag.decompose()
    lines = [_clean_text(line) for line in fragment.get_text("\n").splitlines()]
    return "\n".join(line for line in lines if line)


def _extract_main_content(html: str) -> str:
    try:
        main_html = Document(html).summary(html_partial=True)
    except Exception as exc:  # readability raises bare Exception subclasses on odd markup
        logger.debug("Main content extraction failed: %s", exc)
        return ""
    return _clean_text(BeautifulSoup(main_html, "lxml").get_text(" "))


def build_document(
    html: str,
    url: str = "",
    *,
    robots_txt: str | None = None,
    headers: Mapping[str, str] | None = None,
    status_code: int = 200,
    was_redirected: bool = False,
) -> DocumentModel:
    """Parse HTML into a DocumentModel.

    Raises:
        ParseError: if the input is empty or not markup at all
    """
    if not html or not html.strip():
        raise ParseError(f"Empty document for {url or 'input'}")

    soup = BeautifulSoup(html, "lxml")
    if soup.find() is None:
        raise ParseError(f"No markup found in document for {url or 'input'}")

    title = _clean_text(soup.title.get_text()) if soup.title and soup.title.get_text().strip() else None
    html_tag = soup.find("html")
    language = (html_tag.get("lang") or "").strip() if html_tag else ""

    headings = []
    for element in soup.find_all(_HEADING_TAGS):
        text = _clean_text(element.get_text(" ", strip=True))
        headings.append(Heading(level=int(element.name[1]), text=text))

    base_url = url if urlparse(url).scheme in {"http", "https"} else ""
    links = []
    for anchor in soup.find_all("a", href=True):
        href = anchor.get("href", "").strip()
        if not href or href.startswith("#"):
            continue
        resolved = urljoin(base_url, href) if base_url else href
        rel = anchor.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        anchor_text = _clean_text(anchor.get_text(" ", strip=True))
        if not anchor_text:
            img = anchor.find("img", alt=True)
            anchor_text = _clean_text(img["alt"]) if img else ""
        links.append(Link(
            href=resolved,
            anchor_text=anchor_text,
            is_internal=_classify_link(resolved, base_url) == "internal",
            rel=tuple(sorted(r.lower() for r in rel)),
        ))

    images = []
    for img in soup.find_all("img"):
        images.append(Image(
            src=img.get("src", "") or img.get("data-src", ""),
            alt=img.get("alt"),
            has_dimensions=bool(img.get("width")) and bool(img.get("height")),
            loading=(img.get("loading") or None),
            has_srcset=bool(img.get("srcset")),
        ))

    text_content = _extract_text(soup)

    return DocumentModel(
        url=url,
        raw_html=html,
        text_content=text_content,
        title=title,
        structured_data_blocks=_extract_structured_data(soup),
        meta_tags=MappingProxyType(_extract_meta_tags(soup)),
        headings=tuple(headings),
        links=tuple(links),
        images=tuple(images),
        language=language,
        detected_language=_detect_language(text_content),
        microdata_types=_extract_microdata_types(html, base_url),
        main_content=_extract_main_content(html),
        robots_txt=robots_txt,
        http_headers=MappingProxyType(dict(headers or {})),
        status_code=status_code,
        was_redirected=was_redirected,
        dom=soup,
    )


def document_from_page(page: FetchedPage) -> DocumentModel:
    """Build a DocumentModel from a fetcher result."""
    return build_document(
        page.html,
        page.final_url,
        robots_txt=page.robots_txt,
        headers=page.headers,
        status_code=page.status_code,
        was_redirected=page.was_redirected,
    )


_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")


def split_sentences(text: str) -> list[str]:
    """Split text into sentences on terminal punctuation and line breaks."""
    sentences = []
    for line in text.splitlines():
        sentences.extend(s.strip() for s in _SENTENCE_SPLIT.split(line) if s.strip())
    return sentences
