"""Gerrit REST API client.

Uses httpx.AsyncClient with trio so several instances can be queried
concurrently. See https://gerrit-review.googlesource.com/Documentation/rest-api.html
"""

import json
import logging
from typing import Any

import httpx
import trio
from pydantic import ValidationError

from .config import GERRIT_JSON_PREFIX, GERRIT_PASSWORD, GERRIT_USERNAME, REQUEST_TIMEOUT
from .models import Account, GerritInstance
from .search import SearchResult, SearchResults

logger = logging.getLogger(__name__)

LOGIN_PROMPT = " Make sure you are logged in to the Gerrit instance or set GERRIT_USERNAME and GERRIT_PASSWORD."

# Change options needed to categorize CLs.
REVIEW_OPTIONS = ["DETAILED_LABELS", "REVIEWED", "SUBMITTABLE", "MESSAGES"]
# Extra options for the author name and description.
DETAILED_OPTIONS = ["DETAILED_ACCOUNTS", "CURRENT_REVISION", "CURRENT_COMMIT"]


class GerritError(Exception):
    """A request to a Gerrit server failed or returned something unexpected."""


def parse_json(reply: str) -> Any:
    """Parse a JSON reply from Gerrit.

    All Gerrit JSON replies start with )]}'\\n; anything else is rejected.
    """
    header = reply[: len(GERRIT_JSON_PREFIX)]
    if header != GERRIT_JSON_PREFIX:
        raise GerritError(f"Unexpected reply from Gerrit server: {header}...")
    try:
        return json.loads(reply[len(GERRIT_JSON_PREFIX) :])
    except json.JSONDecodeError as e:
        raise GerritError(f"Malformed JSON from Gerrit server: {e}") from e


class GerritClient:
    """Async client for a single Gerrit host."""

    def __init__(
        self,
        host: str,
        username: str | None = None,
        password: str | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        """Initialize the client.

        Args:
            host: Origin of the Gerrit server, without trailing slash
            username: HTTP username (defaults to GERRIT_USERNAME)
            password: HTTP password (defaults to GERRIT_PASSWORD)
            timeout: Per-request timeout in seconds
        """
        self.host = host
        self.username = username if username is not None else GERRIT_USERNAME
        self.password = password if password is not None else GERRIT_PASSWORD
        self.timeout = timeout
        self.client: httpx.AsyncClient | None = None
        self._request_count = 0

    async def __aenter__(self):
        auth = None
        if self.authenticated:
            auth = httpx.BasicAuth(self.username, self.password)
        self.client = httpx.AsyncClient(
            base_url=self.host,
            headers={
                "pragma": "no-cache",
                "cache-control": "no-cache, must-revalidate",
            },
            auth=auth,
            timeout=self.timeout,
            http2=True,
        )
        return self

    async def __aexit__(self, *args):
        if self.client:
            await self.client.aclose()

    @property
    def authenticated(self) -> bool:
        return bool(self.username and self.password)

    @property
    def request_count(self) -> int:
        return self._request_count

    def _path(self, path: str) -> str:
        # Authenticated REST endpoints live under /a/.
        return f"/a{path}" if self.authenticated else path

    async def _request(self, path: str, params: list[tuple[str, str]] | None = None) -> str:
        """GET ``path`` and return the raw reply text."""
        if not self.client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        logger.debug(f"GET {self.host}{self._path(path)} {params or ''}")
        try:
            response = await self.client.get(self._path(path), params=params)
            self._request_count += 1
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GerritError(f"{self.host}{path}: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise GerritError(f"{self.host}{path}: {e}") from e
        return response.text

    async def get(self, path: str, params: list[tuple[str, str]] | None = None) -> Any:
        """GET request returning the decoded JSON reply."""
        return parse_json(await self._request(path, params))

    async def fetch_account(self) -> Account:
        """Fetch the account of the logged in user."""
        reply = await self._request("/accounts/self")
        if not reply.startswith(GERRIT_JSON_PREFIX):
            raise GerritError("Cannot fetch account." + LOGIN_PROMPT)
        try:
            return Account.model_validate(parse_json(reply))
        except ValidationError as e:
            raise GerritError(f"Unexpected account record from {self.host}: {e}") from e

    async def fetch_reviews(self, account: Account, detailed: bool = False) -> SearchResult:
        """Fetch the open CLs owned by or waiting on ``account``."""
        user_id = account.account_id
        params = [
            ("q", f"status:open owner:{user_id}"),
            ("q", f"status:open -is:ignored reviewer:{user_id} -owner:{user_id}"),
        ]
        options = REVIEW_OPTIONS + (DETAILED_OPTIONS if detailed else [])
        params.extend(("o", option) for option in options)

        results = await self.get("/changes/", params)
        # One list of changes per query.
        if not isinstance(results, list) or not all(
            isinstance(query_result, list) and all(isinstance(change, dict) for change in query_result)
            for query_result in results
        ):
            raise GerritError(f"Unexpected reply to change query from {self.host}")
        changes = [change for query_result in results for change in query_result]
        logger.info(f"{self.host}: {len(changes)} open changes for account {user_id}")
        return SearchResult.wrap(self.host, account, changes)


async def fetch_instance(instance: GerritInstance, detailed: bool = False) -> SearchResult:
    """Fetch the account and reviews of one instance."""
    async with GerritClient(instance.host) as client:
        account = await client.fetch_account()
        return await client.fetch_reviews(account, detailed)


async def fetch_all(
    instances: list[GerritInstance],
    detailed: bool = False,
) -> tuple[SearchResults, dict[str, str]]:
    """Fetch all instances concurrently.

    Returns the results in instance order and a host -> error message map
    for the instances that could not be fetched.
    """
    results: list[SearchResult | None] = [None] * len(instances)
    errors: dict[str, str] = {}

    async def fetch_one(index: int, instance: GerritInstance) -> None:
        try:
            results[index] = await fetch_instance(instance, detailed)
        except GerritError as e:
            logger.warning(f"Failed to fetch {instance.name} ({instance.host}): {e}")
            errors[instance.host] = str(e)

    async with trio.open_nursery() as nursery:
        for index, instance in enumerate(instances):
            nursery.start_soon(fetch_one, index, instance)

    return SearchResults([result for result in results if result is not None]), errors
