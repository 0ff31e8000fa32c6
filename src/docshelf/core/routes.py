"""Route table mapping menu routes to Markdown documents.

A single explicit table replaces routes scattered across page declarations.
It is validated once at start-up so a route pointing at a missing document
fails fast instead of rendering an empty page.
"""

from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path

from docshelf.core.types import DocumentId, URLPath


class RouteTableError(ValueError):
    """Raised when the route table is inconsistent or references missing documents."""

    def __init__(self, message: str, problems: list[str] | None = None) -> None:
        super().__init__(message)
        self.problems = problems or []


class RouteTable(Mapping[URLPath, DocumentId]):
    """Immutable route -> document identifier mapping.

    Routes are normalized to a leading slash and compared exactly, so
    "/ReactMemo" and "/reactmemo" are distinct routes.
    """

    __slots__ = ("_routes",)

    def __init__(self, routes: Iterable[tuple[str, str]]) -> None:
        """Build table from (route, document) pairs.

        Args:
            routes: Pairs in menu order

        Raises:
            RouteTableError: If a route is declared twice
        """
        table: dict[URLPath, DocumentId] = {}
        for route, document in routes:
            normalized = normalize_route(route)
            if normalized in table:
                raise RouteTableError(f"Duplicate route: {normalized}")
            table[normalized] = DocumentId(document)
        self._routes = table

    def __getitem__(self, route: URLPath) -> DocumentId:
        return self._routes[normalize_route(route)]

    def __iter__(self) -> Iterator[URLPath]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def resolve(self, route: str) -> DocumentId | None:
        """Return the document for a route, None if unmatched."""
        return self._routes.get(normalize_route(route))

    def validate(self, source_dir: Path) -> None:
        """Check that every routed document exists under the docs directory.

        Args:
            source_dir: Directory the document identifiers are served from

        Raises:
            RouteTableError: Listing every route whose document is missing
        """
        problems = []
        for route, document in self._routes.items():
            if find_document_file(source_dir, document) is None:
                problems.append(f"{route} -> {document}")

        if problems:
            raise RouteTableError(
                f"{len(problems)} route(s) reference missing documents in {source_dir}",
                problems,
            )


def normalize_route(route: str) -> URLPath:
    """Normalize route to have a single leading slash and no trailing slash."""
    stripped = route.strip("/")
    return URLPath(f"/{stripped}")


def resolve_document_path(source_dir: Path, document: str) -> Path | None:
    """Map a document identifier to a file inside source_dir.

    The identifier is served relative to the docs root, so
    "/markdown/intro.md" lives at <source_dir>/markdown/intro.md.

    Returns:
        Resolved path, or None if the identifier escapes source_dir or is
        not a valid filesystem path
    """
    root = source_dir.resolve()
    try:
        candidate = (root / document.lstrip("/")).resolve()
    except (ValueError, OSError):
        return None
    if not candidate.is_relative_to(root):
        return None
    return candidate


def find_document_file(source_dir: Path, document: str) -> Path | None:
    """Like resolve_document_path, but only returns existing regular files."""
    source_path = resolve_document_path(source_dir, document)
    if source_path is None:
        return None
    try:
        if source_path.is_file():
            return source_path
    except OSError:
        # e.g. ENAMETOOLONG
        pass
    return None
