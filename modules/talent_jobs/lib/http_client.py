# talent_jobs/http_client.py
from __future__ import annotations

import itertools
import logging
import random
import threading
from collections.abc import Mapping, Sequence
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import Settings
from .models import CrawlTask, Label

LOG = logging.getLogger(__name__)

USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/17.4 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36",
)

BROWSER_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Upgrade-Insecure-Requests": "1",
}


class HttpClient:
    """
    Browser-flavoured session for talent.com pages.

    - retries 429/5xx with backoff (urllib3 Retry, total = max_request_retries)
    - rotates the User-Agent per request
    - sends the raw Cookie header and/or structured cookies from settings
    - rotates through proxy URLs when use_proxy is on
    """

    def __init__(
        self,
        timeout: float = 30.0,
        *,
        max_retries: int = 5,
        cookie_header: str = "",
        cookies: Sequence[Mapping[str, Any]] = (),
        proxy_urls: Sequence[str] = (),
        use_proxy: bool = False,
        user_agents: Sequence[str] = USER_AGENTS,
        rng: random.Random | None = None,
    ):
        self.timeout = float(timeout)
        self.user_agents = tuple(user_agents) or USER_AGENTS
        self._rng = rng or random.Random()
        self._lock = threading.Lock()

        self.session = requests.Session()
        self.session.headers.update(BROWSER_HEADERS)
        if cookie_header:
            self.session.headers["Cookie"] = cookie_header
        for c in cookies:
            self.session.cookies.set(
                str(c["name"]),
                str(c.get("value", "")),
                domain=c.get("domain") or "",
                path=c.get("path") or "/",
            )

        self._proxies = None
        if use_proxy:
            if proxy_urls:
                self._proxies = itertools.cycle(list(proxy_urls))
            else:
                LOG.warning("use_proxy is on but no proxy URLs are configured; relying on environment proxies")

        retry = Retry(
            total=max_retries,
            backoff_factor=0.5,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset(["GET", "HEAD"]),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=20)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    @classmethod
    def from_settings(cls, settings: Settings) -> HttpClient:
        return cls(
            settings.request_timeout,
            max_retries=settings.max_request_retries,
            cookie_header=settings.cookies,
            cookies=settings.cookies_json,
            proxy_urls=settings.proxy_urls,
            use_proxy=settings.use_proxy,
        )

    # ---- per-request knobs ----
    def _next_proxy(self) -> dict[str, str] | None:
        if self._proxies is None:
            return None
        with self._lock:
            url = next(self._proxies)
        return {"http": url, "https": url}

    def _headers_for(self, task: CrawlTask | None) -> dict[str, str]:
        headers = {"User-Agent": self._rng.choice(self.user_agents)}
        if task is not None and task.label is Label.DETAIL and task.from_list_url:
            headers["Referer"] = task.from_list_url
        return headers

    # ---- convenience ----
    def get_text(
        self,
        url: str,
        *,
        task: CrawlTask | None = None,
        timeout: float | None = None,
        encoding: str | None = None,
    ) -> tuple[str, int, str]:
        """GET and return (final_url, status, text); non-2xx raises HTTPError."""
        resp = self.session.get(
            url,
            headers=self._headers_for(task),
            proxies=self._next_proxy(),
            timeout=timeout or self.timeout,
        )
        resp.raise_for_status()
        if encoding:
            resp.encoding = encoding
        elif not resp.encoding and resp.apparent_encoding:
            resp.encoding = resp.apparent_encoding
        return resp.url or url, resp.status_code, resp.text

    def fetch(self, task: CrawlTask) -> dict[str, Any]:
        """Crawler-facing fetch: one task in, {url, status, body} out."""
        final_url, status, body = self.get_text(task.url, task=task)
        return {"url": final_url, "status": status, "body": body}

    def close(self) -> None:
        try:
            self.session.close()
        except Exception:
            LOG.debug("HttpClient.close() swallow", exc_info=True)
