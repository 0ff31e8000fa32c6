"""Configuration management for Docshelf.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from docshelf.core.navigation import DEFAULT_NAVIGATION, NavEntry, NavGroup, NavItem, entry

CONFIG_FILENAME = "docshelf.toml"


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class DocsConfig:
    """Documentation configuration."""

    source_dir: Path = field(default_factory=lambda: Path("public"))
    cache_dir: Path = field(default_factory=lambda: Path(".cache"))
    cache_enabled: bool = True
    allow_raw_html: bool = False
    validate_routes: bool = True


@dataclass
class HighlightConfig:
    """Code highlighting configuration."""

    style: str = "monokai"


@dataclass
class FetchConfig:
    """Document fetch configuration."""

    timeout: float = 10.0


@dataclass
class LiveReloadConfig:
    """Live reload configuration."""

    enabled: bool = True
    watch_patterns: list[str] | None = None


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    docs: DocsConfig
    highlight: HighlightConfig
    fetch: FetchConfig
    live_reload: LiveReloadConfig
    navigation: tuple[NavItem, ...] = DEFAULT_NAVIGATION
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for docshelf.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> "Config":
        """Create config with all defaults."""
        return cls(
            server=ServerConfig(),
            docs=DocsConfig(),
            highlight=HighlightConfig(),
            fetch=FetchConfig(),
            live_reload=LiveReloadConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            docs=cls._parse_docs(data.get("docs"), config_dir),
            highlight=cls._parse_highlight(data.get("highlight")),
            fetch=cls._parse_fetch(data.get("fetch")),
            live_reload=cls._parse_live_reload(data.get("live_reload")),
            navigation=cls._parse_navigation(data.get("navigation")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_docs(cls, data: object, config_dir: Path) -> DocsConfig:
        """Parse docs configuration section.

        Args:
            data: Raw docs section data
            config_dir: Directory containing config file (for relative paths)
        """
        if data is None:
            return DocsConfig(
                source_dir=config_dir / "public",
                cache_dir=config_dir / ".cache",
            )

        if not isinstance(data, dict):
            raise ValueError("docs section must be a dictionary")

        source_dir = data.get("source_dir", "public")
        if not isinstance(source_dir, str):
            raise ValueError("docs.source_dir must be a string")

        cache_dir = data.get("cache_dir", ".cache")
        if not isinstance(cache_dir, str):
            raise ValueError("docs.cache_dir must be a string")

        flags: dict[str, bool] = {}
        for name, default in (
            ("cache_enabled", True),
            ("allow_raw_html", False),
            ("validate_routes", True),
        ):
            value = data.get(name, default)
            if not isinstance(value, bool):
                raise ValueError(f"docs.{name} must be a boolean")
            flags[name] = value

        return DocsConfig(
            source_dir=config_dir / source_dir,
            cache_dir=config_dir / cache_dir,
            **flags,
        )

    @classmethod
    def _parse_highlight(cls, data: object) -> HighlightConfig:
        if data is None:
            return HighlightConfig()

        if not isinstance(data, dict):
            raise ValueError("highlight section must be a dictionary")

        style = data.get("style", "monokai")
        if not isinstance(style, str):
            raise ValueError("highlight.style must be a string")
        try:
            get_style_by_name(style)
        except ClassNotFound as e:
            raise ValueError(f"highlight.style: unknown Pygments style {style!r}") from e

        return HighlightConfig(style=style)

    @classmethod
    def _parse_fetch(cls, data: object) -> FetchConfig:
        if data is None:
            return FetchConfig()

        if not isinstance(data, dict):
            raise ValueError("fetch section must be a dictionary")

        timeout = data.get("timeout", 10.0)
        if not isinstance(timeout, int | float) or isinstance(timeout, bool):
            raise ValueError("fetch.timeout must be a number")
        if timeout <= 0:
            raise ValueError("fetch.timeout must be positive")

        return FetchConfig(timeout=float(timeout))

    @classmethod
    def _parse_live_reload(cls, data: object) -> LiveReloadConfig:
        if data is None:
            return LiveReloadConfig()

        if not isinstance(data, dict):
            raise ValueError("live_reload section must be a dictionary")

        enabled = data.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ValueError("live_reload.enabled must be a boolean")

        watch_patterns_raw = data.get("watch_patterns")
        watch_patterns: list[str] | None = None
        if watch_patterns_raw is not None:
            if not isinstance(watch_patterns_raw, list):
                raise ValueError("live_reload.watch_patterns must be a list")
            watch_patterns = []
            for item in watch_patterns_raw:
                if not isinstance(item, str):
                    raise ValueError("live_reload.watch_patterns items must be strings")
                watch_patterns.append(item)

        return LiveReloadConfig(enabled=enabled, watch_patterns=watch_patterns)

    @classmethod
    def _parse_navigation(cls, data: object) -> tuple[NavItem, ...]:
        """Parse [[navigation]] array of entries and groups.

        An item with a `group` key is a collapsible group with nested
        `entries`; any other item is a top-level entry.
        """
        if data is None:
            return DEFAULT_NAVIGATION

        if not isinstance(data, list) or not data:
            raise ValueError("navigation must be a non-empty array of tables")

        items: list[NavItem] = []
        for index, item in enumerate(data):
            where = f"navigation[{index}]"
            if not isinstance(item, dict):
                raise ValueError(f"{where} must be a table")

            if "group" not in item:
                items.append(cls._parse_nav_entry(item, where))
                continue

            group_id = item["group"]
            label = item.get("label", group_id)
            if not isinstance(group_id, str) or not isinstance(label, str):
                raise ValueError(f"{where}.group and .label must be strings")

            entries_raw = item.get("entries")
            if not isinstance(entries_raw, list) or not entries_raw:
                raise ValueError(f"{where}.entries must be a non-empty array")

            entries = tuple(
                cls._parse_nav_entry(child, f"{where}.entries[{child_index}]")
                for child_index, child in enumerate(entries_raw)
            )
            items.append(NavGroup(id=group_id, label=label, entries=entries))

        return tuple(items)

    @classmethod
    def _parse_nav_entry(cls, data: object, where: str) -> NavEntry:
        if not isinstance(data, dict):
            raise ValueError(f"{where} must be a table")

        values = {}
        for key in ("label", "route", "document"):
            value = data.get(key)
            if not isinstance(value, str) or not value:
                raise ValueError(f"{where}.{key} must be a non-empty string")
            values[key] = value

        return entry(values["label"], values["route"], values["document"])

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        source_dir: Path | None = None,
        cache_dir: Path | None = None,
        cache_enabled: bool | None = None,
        live_reload_enabled: bool | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.
        """
        server = replace(
            self.server,
            host=host if host is not None else self.server.host,
            port=port if port is not None else self.server.port,
        )

        docs = replace(
            self.docs,
            source_dir=source_dir if source_dir is not None else self.docs.source_dir,
            cache_dir=cache_dir if cache_dir is not None else self.docs.cache_dir,
            cache_enabled=(
                cache_enabled if cache_enabled is not None else self.docs.cache_enabled
            ),
        )

        live_reload = self.live_reload
        if live_reload_enabled is not None:
            live_reload = replace(self.live_reload, enabled=live_reload_enabled)

        return replace(self, server=server, docs=docs, live_reload=live_reload)
