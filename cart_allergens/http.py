from __future__ import annotations

from dataclasses import dataclass, field

import requests

from .errors import FetchError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


@dataclass(frozen=True)
class HttpClient:
    """Fetches product pages as HTML text."""

    user_agent: str = DEFAULT_USER_AGENT
    cookies: dict[str, str] = field(default_factory=dict)
    # None leaves the request unbounded.
    timeout_s: float | None = 30.0
    session: requests.Session = field(default_factory=requests.Session, compare=False, repr=False)

    def get(self, url: str) -> requests.Response:
        return self.session.get(
            url,
            headers={
                "User-Agent": self.user_agent,
                "Accept": "text/html,application/xhtml+xml",
            },
            cookies=self.cookies or None,
            timeout=self.timeout_s,
        )

    def get_html(self, url: str) -> str:
        try:
            resp = self.get(url)
        except requests.RequestException as e:
            raise FetchError(f"{type(e).__name__}: {e}") from e
        if not 200 <= resp.status_code < 300:
            raise FetchError(f"Failed to fetch product page: {resp.status_code} {resp.reason}")
        return resp.text

    def close(self) -> None:
        self.session.close()
