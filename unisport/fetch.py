"""
HTTP fetching.

Fetcher wraps one requests.Session. Single fetches raise FetchError;
batch fetches log failures and keep going, returning None for every URL
that could not be retrieved.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence
from urllib.parse import urlsplit

import requests
import urllib3

from unisport.config import ScrapeConfig
from unisport.errors import FetchError

logger = logging.getLogger(__name__)


class Fetcher:
    def __init__(self, config: ScrapeConfig, session: Optional[requests.Session] = None) -> None:
        self.timeout = config.timeout
        self.max_workers = config.max_workers
        self.insecure_hosts = frozenset(h.lower() for h in config.insecure_hosts if h)
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"User-Agent": config.user_agent})

        if self.insecure_hosts:
            # process-wide, urllib3 has no per-host switch
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def verify_for(self, url: str) -> bool:
        host = (urlsplit(url).hostname or "").lower()
        return host not in self.insecure_hosts

    def fetch(self, url: str) -> str:
        """
        GET `url` and return the response text.
        """
        verify = self.verify_for(url)
        if not verify:
            logger.debug("TLS verification disabled for %s", url)

        try:
            resp = self.session.get(url, timeout=self.timeout, verify=verify)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(url, str(e)) from e

        return resp.text

    def _fetch_or_none(self, url: str) -> Optional[str]:
        try:
            text = self.fetch(url)
        except FetchError as e:
            logger.warning("FAIL  %s (%s)", url, e.reason)
            return None
        logger.info("FETCH %s", url)
        return text

    def fetch_all(self, urls: Sequence[str]) -> List[Optional[str]]:
        """
        Fetch every URL; the result lines up with `urls`.

        Up to max_workers requests run at the same time.
        """
        if self.max_workers == 1 or len(urls) <= 1:
            return [self._fetch_or_none(u) for u in urls]

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(self._fetch_or_none, urls))
