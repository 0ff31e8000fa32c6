"""Navigation menu model.

The menu is an immutable tree of entries and collapsible groups. Expand and
collapse state lives in a separate immutable MenuState value; toggling a
group returns a new state instead of mutating flags in place.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TypedDict

from docshelf.core.routes import RouteTable, normalize_route
from docshelf.core.types import DocumentId, URLPath


class GroupState(Enum):
    """Visibility of a navigation group's entries."""

    COLLAPSED = "collapsed"
    EXPANDED = "expanded"

    def toggled(self) -> "GroupState":
        if self is GroupState.COLLAPSED:
            return GroupState.EXPANDED
        return GroupState.COLLAPSED


class NavEntryDict(TypedDict):
    """Dictionary representation of a navigation entry."""

    label: str
    path: str


class NavGroupDict(TypedDict):
    """Dictionary representation of a navigation group."""

    group: str
    label: str
    state: str
    children: list[NavEntryDict]


@dataclass(frozen=True)
class NavEntry:
    """Link from a menu label to a route and the document it displays."""

    label: str
    route: URLPath
    document: DocumentId

    def to_dict(self) -> NavEntryDict:
        """Convert to dictionary for JSON serialization."""
        return {"label": self.label, "path": self.route}


@dataclass(frozen=True)
class NavGroup:
    """Collapsible group of entries."""

    id: str
    label: str
    entries: tuple[NavEntry, ...]

    def to_dict(self, state: GroupState) -> NavGroupDict:
        """Convert to dictionary for JSON serialization."""
        return {
            "group": self.id,
            "label": self.label,
            "state": state.value,
            "children": [entry.to_dict() for entry in self.entries],
        }


NavItem = NavEntry | NavGroup


@dataclass(frozen=True)
class MenuState:
    """Per-group expand/collapse state, scoped to one menu instance."""

    groups: tuple[tuple[str, GroupState], ...]

    @classmethod
    def initial(cls, group_ids: Sequence[str]) -> "MenuState":
        """Create state with every group collapsed."""
        return cls(tuple((group_id, GroupState.COLLAPSED) for group_id in group_ids))

    @classmethod
    def from_query(cls, group_ids: Sequence[str], value: str | None) -> "MenuState":
        """Create state from a comma-separated list of expanded group ids.

        Unknown ids are ignored so stale links still render a menu.
        """
        expanded = set(value.split(",")) if value else set()
        return cls(
            tuple(
                (
                    group_id,
                    GroupState.EXPANDED if group_id in expanded else GroupState.COLLAPSED,
                )
                for group_id in group_ids
            )
        )

    def get(self, group_id: str) -> GroupState:
        """Return the state of a group.

        Raises:
            KeyError: If group_id is not part of this menu
        """
        for candidate, state in self.groups:
            if candidate == group_id:
                return state
        raise KeyError(group_id)

    def is_expanded(self, group_id: str) -> bool:
        return self.get(group_id) is GroupState.EXPANDED

    def toggle(self, group_id: str) -> "MenuState":
        """Return a new state with one group flipped.

        Raises:
            KeyError: If group_id is not part of this menu
        """
        self.get(group_id)
        return MenuState(
            tuple(
                (candidate, state.toggled() if candidate == group_id else state)
                for candidate, state in self.groups
            )
        )

    def to_query(self) -> str:
        """Serialize expanded groups for the `open` query parameter."""
        return ",".join(
            group_id for group_id, state in self.groups if state is GroupState.EXPANDED
        )


class Navigation:
    """Navigation menu with its derived route table.

    Every entry, top-level or nested, contributes one route. The route table
    is built here so menu links and routing cannot disagree.
    """

    __slots__ = ("_items", "_routes")

    def __init__(self, items: Sequence[NavItem]) -> None:
        """Initialize navigation.

        Args:
            items: Top-level entries and groups in menu order

        Raises:
            RouteTableError: If two entries share a route
            ValueError: If two groups share an id
        """
        group_ids = [item.id for item in items if isinstance(item, NavGroup)]
        if len(group_ids) != len(set(group_ids)):
            raise ValueError(f"Duplicate navigation group id in {group_ids}")

        self._items = tuple(items)
        self._routes = RouteTable(
            (entry.route, entry.document) for entry in self.entries()
        )

    @property
    def items(self) -> tuple[NavItem, ...]:
        return self._items

    @property
    def routes(self) -> RouteTable:
        return self._routes

    @property
    def group_ids(self) -> list[str]:
        return [item.id for item in self._items if isinstance(item, NavGroup)]

    def initial_state(self) -> MenuState:
        return MenuState.initial(self.group_ids)

    def state_from_query(self, value: str | None) -> MenuState:
        return MenuState.from_query(self.group_ids, value)

    def entries(self) -> Iterator[NavEntry]:
        """Iterate all entries depth-first in menu order."""
        for item in self._items:
            if isinstance(item, NavGroup):
                yield from item.entries
            else:
                yield item

    def select(self, route: str) -> DocumentId | None:
        """Select an entry by route.

        Delegates to the route table and does not touch menu state.

        Returns:
            Document identifier, or None for an unmatched route
        """
        return self._routes.resolve(route)

    def find_entry(self, route: str) -> NavEntry | None:
        normalized = normalize_route(route)
        for entry in self.entries():
            if entry.route == normalized:
                return entry
        return None

    def to_dict(self, state: MenuState) -> list[NavEntryDict | NavGroupDict]:
        """Convert menu tree and group state for JSON serialization."""
        result: list[NavEntryDict | NavGroupDict] = []
        for item in self._items:
            if isinstance(item, NavGroup):
                result.append(item.to_dict(state.get(item.id)))
            else:
                result.append(item.to_dict())
        return result


def entry(label: str, route: str, document: str) -> NavEntry:
    """Build a navigation entry with a normalized route."""
    return NavEntry(label=label, route=normalize_route(route), document=DocumentId(document))


DEFAULT_NAVIGATION: tuple[NavItem, ...] = (
    entry("React starter", "/introduction", "/markdown/introduction.md"),
    entry("Les calls API", "/callApi", "/markdown/callApi.md"),
    entry("Les mutations react queries", "/mutations", "/markdown/mutations.md"),
    NavGroup(
        id="components",
        label="Les Components",
        entries=(
            entry("React.memo", "/ReactMemo", "/markdown/Components/ReactMemo.md"),
            entry(
                "React.forwardRef",
                "/ReactForwardRef",
                "/markdown/Components/ReactForwardRef.md",
            ),
            entry(
                "React.suspense",
                "/ReactSuspense",
                "/markdown/Components/ReactSuspense.md",
            ),
        ),
    ),
    NavGroup(
        id="hooks",
        label="Les Hooks",
        entries=(
            entry("useReducer", "/useReducer", "/markdown/useReducer.md"),
            entry("useMemo", "/useMemo", "/markdown/useMemo.md"),
            entry("useCallback", "/useCallback", "/markdown/useCallback.md"),
            entry("useMyHooks", "/useMyHooks", "/markdown/useMyHooks.md"),
        ),
    ),
)
