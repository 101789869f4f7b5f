"""Tests for SearchResult and SearchResults."""

from datetime import timedelta

from factories import NOW, OWNER_ID, REVIEWER_ID, make_change, make_message, make_votes
from gerrit_monitor.changelist import Category, Changelist
from gerrit_monitor.search import SearchResult, SearchResults

HOST = "https://chromium-review.googlesource.com"
OTHER_HOST = "https://android-review.googlesource.com"


def owner_changes() -> list[dict]:
    return [
        make_change(_number=1, submittable=True),
        make_change(_number=2, labels=make_votes((OWNER_ID, 0))),
        make_change(_number=3, unresolved_comment_count=1, messages=[make_message(REVIEWER_ID)]),
        make_change(_number=4, messages=[make_message(REVIEWER_ID, ago=timedelta(days=2))]),
        make_change(_number=5, submittable=True),
    ]


def numbers(cls: list[Changelist]) -> list[int]:
    return [cl.to_json()["_number"] for cl in cls]


class TestSearchResult:
    """Test classifying a single query result."""

    def test_wrap(self, owner):
        result = SearchResult.wrap(HOST, owner, owner_changes())
        assert result.host == HOST
        assert result.get_account() is owner
        assert all(cl.host == HOST for cl in result.changelists)
        assert len(result.changelists) == 5

    def test_category_map(self, owner):
        category_map = SearchResult.wrap(HOST, owner, owner_changes()).get_category_map(NOW)
        assert list(category_map) == [
            Category.READY_TO_SUBMIT,
            Category.NOT_MAILED,
            Category.OUTGOING_NEEDS_ATTENTION,
            Category.STALE,
        ]
        assert numbers(category_map[Category.READY_TO_SUBMIT]) == [1, 5]
        assert numbers(category_map[Category.NOT_MAILED]) == [2]
        assert numbers(category_map[Category.OUTGOING_NEEDS_ATTENTION]) == [3]
        assert numbers(category_map[Category.STALE]) == [4]

    def test_category_map_for_reviewer(self, reviewer):
        changes = [
            make_change(_number=1, messages=[make_message(OWNER_ID)]),
            make_change(
                _number=2,
                messages=[make_message(OWNER_ID, ago=timedelta(hours=2)), make_message(REVIEWER_ID)],
            ),
        ]
        category_map = SearchResult.wrap(HOST, reviewer, changes).get_category_map(NOW)
        assert numbers(category_map[Category.INCOMING_NEEDS_ATTENTION]) == [1]
        assert numbers(category_map[Category.NONE]) == [2]

    def test_same_changelist_listed_once(self, owner):
        cl = Changelist.wrap(HOST, make_change(submittable=True))
        result = SearchResult(HOST, owner, [cl, cl])
        assert result.get_category_map(NOW)[Category.READY_TO_SUBMIT] == [cl]

    def test_equal_records_are_distinct_changelists(self, owner):
        result = SearchResult.wrap(HOST, owner, [make_change(submittable=True), make_change(submittable=True)])
        assert len(result.get_category_map(NOW)[Category.READY_TO_SUBMIT]) == 2

    def test_empty(self, owner):
        assert SearchResult.wrap(HOST, owner, []).get_category_map(NOW) == {}

    def test_json_round_trip(self, owner):
        result = SearchResult.wrap(HOST, owner, owner_changes())
        data = result.to_json()
        assert data["host"] == HOST
        assert data["user"] == {"_account_id": OWNER_ID, "name": "Olive Owner"}
        assert data["data"] == owner_changes()

        restored = SearchResult.from_json(data)
        assert restored.get_account() == owner
        assert {
            category: numbers(cls) for category, cls in restored.get_category_map(NOW).items()
        } == {category: numbers(cls) for category, cls in result.get_category_map(NOW).items()}


class TestSearchResults:
    """Test merging results from several hosts."""

    def test_merge_in_result_order(self, owner):
        first = SearchResult.wrap(HOST, owner, [make_change(_number=1, submittable=True)])
        second = SearchResult.wrap(
            OTHER_HOST,
            owner,
            [
                make_change(_number=7, submittable=True),
                make_change(_number=8, labels=make_votes((OWNER_ID, 0))),
            ],
        )
        category_map = SearchResults([first, second]).get_category_map(NOW)
        ready = category_map[Category.READY_TO_SUBMIT]
        assert numbers(ready) == [1, 7]
        assert [cl.host for cl in ready] == [HOST, OTHER_HOST]
        assert numbers(category_map[Category.NOT_MAILED]) == [8]

    def test_no_deduplication_across_results(self, owner):
        cl = Changelist.wrap(HOST, make_change(submittable=True))
        first = SearchResult(HOST, owner, [cl])
        second = SearchResult(HOST, owner, [cl])
        assert SearchResults([first, second]).get_category_map(NOW)[Category.READY_TO_SUBMIT] == [cl, cl]

    def test_empty(self):
        assert SearchResults([]).get_category_map(NOW) == {}

    def test_json_round_trip(self, owner, reviewer):
        results = SearchResults(
            [
                SearchResult.wrap(HOST, owner, owner_changes()),
                SearchResult.wrap(OTHER_HOST, reviewer, [make_change(_number=9)]),
            ]
        )
        data = results.to_json()
        assert [item["host"] for item in data] == [HOST, OTHER_HOST]

        restored = SearchResults.from_json(data)
        assert [r.get_account().account_id for r in restored.results] == [OWNER_ID, REVIEWER_ID]
        assert restored.to_json() == data
