"""
Scraper configuration.

All page-specific constants (URLs, selectors, currency marker) live here
and are passed into the pipeline explicitly. Defaults follow the markup of
the Hochschulsport booking system ("bs_*" CSS classes).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional, Tuple
from urllib.parse import urlsplit

from unisport.errors import ConfigError
from unisport.query import Position, Selector, descendant, path


INDEX_URL = "https://hochschulsport.uni-example.de/angebote/aktueller_zeitraum/"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def _cell(cls: str) -> Selector:
    return path(descendant("td", class_=cls))


@dataclass(frozen=True)
class Selectors:
    # course links in the menu; the last anchor is not a course
    anchor: Selector = path(
        descendant("dl", class_="bs_menu"),
        descendant("a"),
        position=Position.all_but_last(),
    )
    free_marker: Selector = path(descendant("span", class_="bs_kostenlos"))
    head: Selector = path(descendant("div", class_="bs_head"))
    level: Selector = _cell("bs_sdet")
    day: Selector = _cell("bs_stag")
    time: Selector = _cell("bs_szeit")
    period: Selector = _cell("bs_szr")
    price: Selector = _cell("bs_spreis")


def base_url_of(index_url: str) -> str:
    """
    Directory part of `index_url`, ending in "/".

    >>> base_url_of("https://x.de/angebote/aktueller_zeitraum/index.html")
    'https://x.de/angebote/aktueller_zeitraum/'
    """
    return index_url.rsplit("/", 1)[0] + "/"


def host_of(url: str) -> Tuple[str, ...]:
    host = (urlsplit(url).hostname or "").lower()
    return (host,) if host else ()


@dataclass(frozen=True)
class ScrapeConfig:
    index_url: str = INDEX_URL
    # empty -> derived from index_url
    base_url: str = ""
    selectors: Selectors = field(default_factory=Selectors)
    currency_marker: str = "€"
    timeout: float = 30.0
    max_workers: int = 4
    # hosts whose TLS certificate is not verified (known broken chain);
    # None -> the host of index_url
    insecure_hosts: Optional[Tuple[str, ...]] = None
    user_agent: str = USER_AGENT

    def __post_init__(self) -> None:
        if not self.base_url:
            object.__setattr__(self, "base_url", base_url_of(self.index_url))
        object.__setattr__(self, "insecure_hosts", self._normalize_hosts(self.insecure_hosts))
        if not self.currency_marker:
            raise ConfigError("currency_marker must not be empty")
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")

    def _normalize_hosts(self, hosts: Any) -> Tuple[str, ...]:
        if hosts is None:
            return host_of(self.index_url)
        if isinstance(hosts, str):
            # a single host name, not a sequence of characters
            hosts = [hosts]
        if not isinstance(hosts, (list, tuple)) or not all(isinstance(h, str) for h in hosts):
            raise ConfigError(f"insecure_hosts must be a host name or a list of host names, got {hosts!r}")
        return tuple(h.strip().lower() for h in hosts if h.strip())

    def with_overrides(self, **overrides: Any) -> "ScrapeConfig":
        """
        Copy with every non-None override applied.

        Changing index_url without base_url re-derives base_url. The insecure
        hosts follow the new index host unless they were set explicitly.
        """
        values = {k: v for k, v in overrides.items() if v is not None}
        if "index_url" in values and "base_url" not in values:
            values["base_url"] = ""
        if (
            "index_url" in values
            and "insecure_hosts" not in values
            and self.insecure_hosts == host_of(self.index_url)
        ):
            values["insecure_hosts"] = None
        return replace(self, **values)


# Keys a JSON config file may set (selectors are code, not configuration).
_FILE_KEYS = {f.name for f in fields(ScrapeConfig)} - {"selectors"}


def load_config(config_path: str | Path, base: ScrapeConfig | None = None) -> ScrapeConfig:
    """
    Read scalar overrides from a JSON object file and apply them to `base`.
    """
    p = Path(config_path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"config file not found: {p}") from e
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"invalid config file {p}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config file {p} must contain a JSON object")

    unknown = sorted(set(data) - _FILE_KEYS)
    if unknown:
        raise ConfigError(f"unknown config keys in {p}: {', '.join(unknown)}")

    try:
        return (base or ScrapeConfig()).with_overrides(**data)
    except TypeError as e:
        raise ConfigError(f"invalid value in {p}: {e}") from e
