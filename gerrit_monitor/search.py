"""Search results grouped by the attention each CL needs."""

from __future__ import annotations

from datetime import datetime

from .changelist import Category, Changelist
from .models import Account


class SearchResult:
    """The CLs returned by one query against one Gerrit host."""

    def __init__(self, host: str, user: Account, data: list[Changelist]):
        self._host = host
        self._user = user
        self._data = data

    @classmethod
    def wrap(cls, host: str, user: Account, data: list[dict]) -> SearchResult:
        return cls(host, user, [Changelist.wrap(host, json) for json in data])

    @classmethod
    def from_json(cls, data: dict) -> SearchResult:
        """Recreate a SearchResult from the output of `to_json`."""
        return cls.wrap(data["host"], Account.model_validate(data["user"]), data["data"])

    def to_json(self) -> dict:
        """Return the data required to recreate the SearchResult."""
        return {
            "host": self._host,
            "user": self._user.to_json(),
            "data": [cl.to_json() for cl in self._data],
        }

    @property
    def host(self) -> str:
        return self._host

    @property
    def changelists(self) -> list[Changelist]:
        return self._data

    def get_account(self) -> Account:
        return self._user

    def get_category_map(self, now: datetime | None = None) -> dict[Category, list[Changelist]]:
        """Map each type of attention to the CLs that need it from the user."""
        result: dict[Category, list[Changelist]] = {}
        user = self.get_account()
        for cl in self._data:
            changelists = result.setdefault(cl.get_category(user, now), [])
            if not any(existing is cl for existing in changelists):
                changelists.append(cl)
        return result


class SearchResults:
    """The results of several queries, e.g. one per Gerrit host."""

    def __init__(self, results: list[SearchResult]):
        self._results = results

    @classmethod
    def from_json(cls, data: list[dict]) -> SearchResults:
        return cls([SearchResult.from_json(item) for item in data])

    def to_json(self) -> list[dict]:
        return [result.to_json() for result in self._results]

    @property
    def results(self) -> list[SearchResult]:
        return self._results

    def get_category_map(self, now: datetime | None = None) -> dict[Category, list[Changelist]]:
        """Merge the category maps of every result, in result order."""
        categories: dict[Category, list[Changelist]] = {}
        for result in self._results:
            for category, changelists in result.get_category_map(now).items():
                categories.setdefault(category, []).extend(changelists)
        return categories
