"""
ESPN scoreboard connector.
Fetches the raw daily scoreboard for a league from ESPN's public site API.
Normalization is left to the league adapters.
"""
from __future__ import annotations

from typing import Any

import httpx

from shared.config import Settings, get_settings
from shared.models.enums import League
from shared.utils.http_client import ProviderHTTPClient
from shared.utils.logging import get_logger

logger = get_logger(__name__)


class ESPNScoreboardClient:
    """ESPN scoreboard fetcher; one shared HTTP client for every league."""

    PROVIDER = "espn"

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._http = ProviderHTTPClient(
            provider_name=self.PROVIDER,
            base_url=self._settings.espn_base_url,
            headers={"User-Agent": self._settings.user_agent, "Accept": "application/json"},
            timeout_s=self._settings.fetch_timeout_s,
            max_retries=self._settings.http_max_retries,
            transport=transport,
        )

    async def start(self) -> None:
        await self._http.start()

    async def close(self) -> None:
        await self._http.close()

    async def __aenter__(self) -> "ESPNScoreboardClient":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @staticmethod
    def scoreboard_path(league: League) -> str:
        """Build ESPN API path for a league's scoreboard."""
        return f"/{league.espn_path}/scoreboard"

    async def fetch_scoreboard(self, league: League) -> Any:
        """
        Fetch today's scoreboard payload for a league.

        Returns:
            The decoded JSON body, unvalidated.

        Raises:
            httpx.HTTPError: On transport failures and error statuses.
            ValueError: If the body is not JSON.
        """
        resp = await self._http.get(self.scoreboard_path(league), league=league.value)
        data = resp.json()
        logger.debug(
            "scoreboard_fetched",
            league=league.value,
            events=len(data.get("events", [])) if isinstance(data, dict) else None,
        )
        return data
