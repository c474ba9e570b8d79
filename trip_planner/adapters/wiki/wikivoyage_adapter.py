"""Wikivoyage adapter fetching page wikitext through the MediaWiki API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import requests

from ...config import WikiConfig, get_config


@dataclass
class WikivoyageAdapter:
    """WikiContentPort implementation backed by Wikivoyage.

    Attributes:
        config: Wiki configuration
        session: Optional requests session (injected in tests)
    """

    config: WikiConfig = field(default_factory=lambda: get_config().wiki)
    session: Optional[requests.Session] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> Dict[str, str]:
        return {"User-Agent": self.config.user_agent, "Accept": "application/json"}

    def fetch_wikitext(self, page: str) -> Optional[str]:
        """Fetch a page's wikitext.

        Args:
            page: Page title (e.g. "Jaipur").

        Returns:
            Raw wikitext, or None if missing or unavailable.
        """
        http = self.session or requests
        params = {
            "action": "parse",
            "page": page,
            "prop": "wikitext",
            "redirects": 1,
            "format": "json",
            "formatversion": 2,
        }

        try:
            response = http.get(
                self.config.api_url,
                params=params,
                headers=self._headers(),
                timeout=self.config.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            self._logger.warning(
                "Wikivoyage request failed",
                extra={"page": page, "reason": "provider_error", "error": str(e)},
            )
            return None

        if "error" in payload:
            self._logger.info(
                "Wikivoyage page not available",
                extra={"page": page, "reason": payload["error"].get("code", "unknown")},
            )
            return None

        wikitext = payload.get("parse", {}).get("wikitext")
        # formatversion=1 nests the text under '*'
        if isinstance(wikitext, dict):
            wikitext = wikitext.get("*")
        return wikitext or None
