from typing import Any, Dict, List, Optional

import httpx
from loguru import logger
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from scoresheet.config.settings import settings
from scoresheet.models.reference import (
    ClubEntry,
    ReferenceCatalog,
    StadiumEntry,
    TeamEntry,
)

# Define common HTTP status codes that warrant a retry
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}


class DictClientError(Exception):
    """Custom exception for dictionary API errors."""

    pass


class DictClientAuthError(DictClientError):
    """Exception raised for authentication failures (401, 403)."""

    pass


class _RetryableStatus(DictClientError):
    pass


class DictClient:
    """Reads the team/stadium/club reference lists from the dictionary API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        token: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.client = client or httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            headers=headers,
        )

    @classmethod
    def from_settings(cls) -> "DictClient":
        return cls(settings.api_base, settings.api_timeout, settings.api_token)

    def __enter__(self) -> "DictClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def teams(self) -> List[TeamEntry]:
        return [TeamEntry.model_validate(row) for row in self.get_data("/dict/teams")]

    def stadiums(self) -> List[StadiumEntry]:
        return [
            StadiumEntry.model_validate(row) for row in self.get_data("/dict/stadiums")
        ]

    def clubs(self) -> List[ClubEntry]:
        return [ClubEntry.model_validate(row) for row in self.get_data("/dict/clubs")]

    def load_catalog(self) -> ReferenceCatalog:
        catalog = ReferenceCatalog(
            teams=self.teams(), stadiums=self.stadiums(), clubs=self.clubs()
        )
        logger.info(
            f"Loaded reference catalog: {len(catalog.teams)} teams, "
            f"{len(catalog.stadiums)} stadiums, {len(catalog.clubs)} clubs"
        )
        return catalog

    def get_data(self, path: str) -> List[Dict[str, Any]]:
        """The ``data`` array of a dictionary endpoint's JSON body."""
        try:
            payload = self._get_json(path)
        except (httpx.RequestError, _RetryableStatus) as e:
            logger.error(f"Max retries exceeded for dictionary request {path}: {e}")
            raise DictClientError(f"Failed request to {path} after retries") from e
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list):
            raise DictClientError(f"Unexpected response shape from {path}")
        return data

    @retry(
        stop=stop_after_attempt(4),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.RequestError, _RetryableStatus)),
        reraise=True,
    )
    def _get_json(self, path: str) -> Any:
        logger.debug(f"GET {self.base_url}{path}")
        response = self.client.get(path)

        if response.status_code in {401, 403}:
            raise DictClientAuthError(
                f"Authentication failed ({response.status_code}) for {path}"
            )
        if response.status_code in RETRYABLE_STATUS_CODES:
            logger.warning(f"Retrying {path} due to status {response.status_code}")
            raise _RetryableStatus(f"HTTP {response.status_code} for {path}")
        if response.status_code != 200:
            raise DictClientError(f"HTTP error {response.status_code} for {path}")

        try:
            return response.json()
        except ValueError as e:
            raise DictClientError(f"Invalid JSON from {path}") from e

    def close(self) -> None:
        self.client.close()
        logger.debug("Closed dictionary HTTP client")
