"""Markdown rendering with caching.

Converts GitHub-flavored Markdown to HTML with mistune, highlights fenced
code blocks with Pygments, and caches rendered pages by source mtime.
"""

import html
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from docshelf.core.cache import CacheEntry, FileCache
from docshelf.core.routes import find_document_file
from docshelf.core.sources import DocumentLoadError

logger = logging.getLogger(__name__)

GFM_PLUGINS = ["table", "strikethrough", "task_lists", "url"]

_TAG_RE = re.compile(r"<[^>]+>")
_SLUG_STRIP_RE = re.compile(r"[^\w\s-]")
_SLUG_SPACE_RE = re.compile(r"[\s-]+")


@dataclass(frozen=True)
class TocEntry:
    """Table of contents entry."""

    level: int
    title: str
    id: str

    def to_dict(self) -> dict[str, str | int]:
        return {"level": self.level, "title": self.title, "id": self.id}


@dataclass
class RenderedDocument:
    """Result of rendering Markdown text."""

    html: str
    title: str | None
    toc: list[TocEntry]


@dataclass
class RenderResult:
    """Result of rendering a Markdown document from disk."""

    html: str
    title: str | None
    toc: list[TocEntry]
    source_path: Path
    from_cache: bool


class _HighlightRenderer(mistune.HTMLRenderer):
    """HTML renderer adding heading anchors and Pygments code blocks.

    Holds per-document state, so a fresh instance is used for every render.
    """

    def __init__(self, formatter: HtmlFormatter, *, escape: bool) -> None:
        super().__init__(escape=escape)
        self._formatter = formatter
        self.title: str | None = None
        self.toc: list[TocEntry] = []
        self._used_ids: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs: Any) -> str:
        plain = html.unescape(_TAG_RE.sub("", text)).strip()
        anchor = self._unique_id(slugify(plain))

        if level == 1 and self.title is None:
            self.title = plain
        elif level > 1:
            self.toc.append(TocEntry(level=level, title=plain, id=anchor))

        return f'<h{level} id="{anchor}">{text}</h{level}>\n'

    def block_code(self, code: str, info: str | None = None) -> str:
        language = info.split(None, 1)[0] if info and info.strip() else None
        if language:
            try:
                lexer = get_lexer_by_name(language, stripall=False)
            except ClassNotFound:
                logger.debug(f"No lexer for code block language {language!r}")
            else:
                return highlight(code, lexer, self._formatter)

        return f'<pre class="highlight"><code>{html.escape(code)}</code></pre>\n'

    def _unique_id(self, base: str) -> str:
        base = base or "section"
        count = self._used_ids.get(base, 0)
        self._used_ids[base] = count + 1
        return base if count == 0 else f"{base}-{count}"


class MarkdownRenderer:
    """Renders Markdown text to HTML.

    GFM extensions (tables, strikethrough, task lists, autolinks) are always
    enabled. Raw HTML in the source is escaped unless allow_raw_html is set,
    which must only be used for trusted, bundled content.
    """

    def __init__(self, *, style: str = "monokai", allow_raw_html: bool = False) -> None:
        """Initialize renderer.

        Args:
            style: Pygments style name for the highlight stylesheet
            allow_raw_html: Pass raw HTML in Markdown through unescaped

        Raises:
            ClassNotFound: If the Pygments style doesn't exist
        """
        self._style = style
        self._allow_raw_html = allow_raw_html
        self._formatter = HtmlFormatter(style=style, cssclass="highlight")

    @property
    def style(self) -> str:
        return self._style

    @property
    def fingerprint(self) -> str:
        """Identifies render options that change the produced HTML."""
        return "raw" if self._allow_raw_html else "escaped"

    def stylesheet(self) -> str:
        """Return CSS for highlighted code blocks."""
        return self._formatter.get_style_defs(".highlight")

    def render(self, markdown_text: str) -> RenderedDocument:
        """Render Markdown text.

        Args:
            markdown_text: Markdown source

        Returns:
            RenderedDocument with HTML, first H1 as title, and H2-H6 ToC
        """
        renderer = _HighlightRenderer(self._formatter, escape=not self._allow_raw_html)
        markdown = mistune.create_markdown(renderer=renderer, plugins=GFM_PLUGINS)
        rendered = markdown(markdown_text)
        return RenderedDocument(html=rendered, title=renderer.title, toc=renderer.toc)


class PageRenderer:
    """Renders Markdown documents from the docs directory with caching.

    Cache invalidation is based on source file mtime.
    """

    def __init__(
        self,
        source_dir: Path,
        markdown: MarkdownRenderer,
        cache: FileCache | None = None,
    ) -> None:
        """Initialize renderer.

        Args:
            source_dir: Root directory containing Markdown sources
            markdown: Markdown renderer
            cache: FileCache instance, None disables caching
        """
        self._source_dir = source_dir
        self._markdown = markdown
        self._cache = cache

    @property
    def source_dir(self) -> Path:
        """Root directory containing Markdown sources."""
        return self._source_dir

    def render(self, document: str) -> RenderResult:
        """Render a document.

        Args:
            document: Document identifier, e.g., "/markdown/introduction.md"

        Returns:
            RenderResult with HTML, title, and ToC

        Raises:
            FileNotFoundError: If the source file doesn't exist or escapes source_dir
            DocumentLoadError: If the source file can't be read or isn't UTF-8
        """
        source_path = find_document_file(self._source_dir, document)
        if source_path is None:
            raise FileNotFoundError(f"Source file not found: {document}")

        source_mtime = source_path.stat().st_mtime
        cache_key = document.lstrip("/")

        if self._cache is not None:
            cached = self._cache.get(cache_key, source_mtime, self._markdown.fingerprint)
            if cached is not None:
                logger.debug(f"Cache hit for {document}")
                return _from_cache(cached, source_path)

        logger.debug(f"Rendering {source_path}")
        try:
            text = source_path.read_bytes().decode("utf-8")
        except OSError as e:
            raise DocumentLoadError(document, str(e)) from e
        except UnicodeDecodeError as e:
            raise DocumentLoadError(document, "not valid UTF-8") from e
        rendered = self._markdown.render(text)

        if self._cache is not None:
            self._cache.set(
                cache_key,
                rendered.html,
                rendered.title,
                source_mtime,
                self._markdown.fingerprint,
                [entry.to_dict() for entry in rendered.toc],
            )

        return RenderResult(
            html=rendered.html,
            title=rendered.title,
            toc=rendered.toc,
            source_path=source_path,
            from_cache=False,
        )

    def invalidate(self, document: str) -> None:
        """Invalidate cached content for a document."""
        if self._cache is not None:
            self._cache.invalidate(document.lstrip("/"))


def slugify(text: str) -> str:
    """Convert heading text to an anchor id."""
    slug = _SLUG_STRIP_RE.sub("", text.lower()).strip()
    return _SLUG_SPACE_RE.sub("-", slug)


def _from_cache(cached: CacheEntry, source_path: Path) -> RenderResult:
    """Create RenderResult from cache entry."""
    toc_entries = [
        TocEntry(
            level=int(entry["level"]),
            title=str(entry["title"]),
            id=str(entry["id"]),
        )
        for entry in cached.meta["toc"]
    ]

    return RenderResult(
        html=cached.html,
        title=cached.meta["title"],
        toc=toc_entries,
        source_path=source_path,
        from_cache=True,
    )
