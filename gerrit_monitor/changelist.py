"""Changelists returned by a Gerrit search and the attention they need.

Both classes wrap the raw JSON records from the Gerrit REST API and derive
everything lazily. The records are never modified.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum

from .config import STALE_AFTER
from .description import Description
from .models import Account

# Vote-only comments posted by the commit queue bot.
AUTOGENERATED_RE = re.compile(r"^Patch Set [1-9][0-9]*: Commit-Queue\+[12]$")

AUTOGENERATED_TAG_PREFIX = "autogenerated:"

GERRIT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


class Category(Enum):
    """The type of attention a CL needs from a given user."""

    # The CL does not require any attention.
    NONE = "none"
    # No recent activity.
    STALE = "stale"
    # The CL has not been sent for review yet.
    NOT_MAILED = "not_mailed"
    # Someone else is waiting for this user to review the CL.
    INCOMING_NEEDS_ATTENTION = "incoming_needs_attention"
    # The CL is authored by this user and requires this user's attention.
    OUTGOING_NEEDS_ATTENTION = "outgoing_needs_attention"
    # Fully approved, the owner can submit.
    READY_TO_SUBMIT = "ready_to_submit"


class SizeCategory(Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


def parse_gerrit_date(value: str) -> datetime:
    """Parse a Gerrit timestamp ("YYYY-MM-DD HH:MM:SS.nnnnnnnnn", UTC).

    datetime only holds microseconds, so the nanosecond fraction is truncated.
    """
    base, _, fraction = value.partition(".")
    fraction = (fraction[:6] or "0").ljust(6, "0")
    return datetime.strptime(f"{base}.{fraction}", GERRIT_DATE_FORMAT).replace(tzinfo=UTC)


class Message:
    """A single message in a CL's review thread."""

    def __init__(self, json: dict):
        self._json = json

    @classmethod
    def wrap(cls, json: dict) -> Message:
        return cls(json)

    def to_json(self) -> dict:
        return self._json

    def is_autogenerated(self) -> bool:
        tag = self._json.get("tag")
        if tag and tag.startswith(AUTOGENERATED_TAG_PREFIX):
            return True
        return AUTOGENERATED_RE.match(self._json.get("message", "")) is not None

    def is_authored_by(self, user: Account) -> bool:
        """Whether ``user`` wrote this message. Bots never count as authors."""
        author = self._json.get("real_author") or {}
        return not self.is_autogenerated() and author.get("_account_id") == user.account_id

    def get_time(self) -> datetime:
        return parse_gerrit_date(self._json["date"])

    def __repr__(self) -> str:
        return f"Message(date={self._json.get('date')!r}, tag={self._json.get('tag')!r})"


# A rule decides whether a CL falls into its category for the given user.
Rule = Callable[..., bool]

# Evaluated in order when the user owns the CL; first match wins.
OWNER_RULES: list[tuple[Category, Rule]] = [
    (Category.READY_TO_SUBMIT, lambda cl, user, now: cl.is_submittable() and not cl.has_unresolved_comments()),
    (Category.NOT_MAILED, lambda cl, user, now: not cl.get_reviewers()),
    (Category.OUTGOING_NEEDS_ATTENTION, lambda cl, user, now: cl.has_unresolved_comments()),
    (Category.STALE, lambda cl, user, now: cl.is_stale(now)),
]

# Evaluated in order when the user is a reviewer.
#
# Gerrit's API does not return every comment, so unresolved_comment_count
# cannot be trusted here. Instead, the CL needs the reviewer when the owner
# spoke after them (or neither spoke) and they have not approved yet.
REVIEWER_RULES: list[tuple[Category, Rule]] = [
    (
        Category.INCOMING_NEEDS_ATTENTION,
        lambda cl, user, now: not cl.has_reviewed(user) and cl.author_commented_after_user(user),
    ),
]


class Changelist:
    """A single CL in a search result."""

    def __init__(self, host: str, json: dict):
        self._host = host
        self._json = json
        self._description: Description | None = None
        self._reviewers: list[dict] | None = None
        self._messages: list[Message] | None = None

    @classmethod
    def wrap(cls, host: str, json: dict) -> Changelist:
        return cls(host, json)

    from_json = wrap

    def to_json(self) -> dict:
        """Return the underlying record."""
        return self._json

    @property
    def host(self) -> str:
        return self._host

    @property
    def owner(self) -> Account:
        return Account.model_validate(self._json["owner"])

    def is_owner(self, user: Account) -> bool:
        return self._json["owner"]["_account_id"] == user.account_id

    def is_submittable(self) -> bool:
        return bool(self._json.get("submittable", False))

    def has_unresolved_comments(self) -> bool:
        return self._json.get("unresolved_comment_count", 0) != 0

    def get_delta_size(self) -> int:
        """Number of lines changed by this CL."""
        return self._json.get("insertions", 0) + self._json.get("deletions", 0)

    def get_size_category(self) -> SizeCategory:
        delta_size = self.get_delta_size()
        if delta_size < 30:
            return SizeCategory.SMALL
        if delta_size < 300:
            return SizeCategory.MEDIUM
        return SizeCategory.LARGE

    def filter_reviewers(self, predicate: Callable[[dict], bool]) -> list[dict]:
        """Return the Code-Review voters (owner included) matching ``predicate``."""
        label = self._json.get("labels", {}).get("Code-Review") or {}
        return [
            reviewer
            for reviewer in label.get("all") or []
            if reviewer.get("_account_id") and predicate(reviewer)
        ]

    def has_reviewed(self, user: Account) -> bool:
        """Whether ``user`` gave a positive Code-Review vote."""
        voted = self.filter_reviewers(
            lambda reviewer: reviewer.get("value", 0) > 0 and reviewer["_account_id"] == user.account_id
        )
        return len(voted) != 0

    def is_stale(self, now: datetime | None = None) -> bool:
        """Whether the last human message was posted more than 24h ago."""
        messages = [m for m in self.get_messages() if not m.is_autogenerated()]
        if not messages:
            return True

        now = now or datetime.now(UTC)
        return now - messages[-1].get_time() > STALE_AFTER

    def author_commented_after_user(self, user: Account) -> bool:
        """Whether the owner commented more recently than ``user``.

        True as well when neither of them commented.
        """
        owner = self.owner
        messages = [m for m in self.get_messages() if m.is_authored_by(user) or m.is_authored_by(owner)]
        if not messages:
            return True
        return messages[-1].is_authored_by(owner)

    def get_category(self, user: Account, now: datetime | None = None) -> Category:
        """Return the type of attention this CL needs from ``user``."""
        rules = OWNER_RULES if self.is_owner(user) else REVIEWER_RULES
        for category, applies in rules:
            if applies(self, user, now):
                return category
        return Category.NONE

    def get_gerrit_url(self) -> str:
        return f"{self._host}/c/{self._json['project']}/+/{self._json['_number']}"

    def get_reviewers(self) -> list[dict]:
        """Code-Review voters other than the owner."""
        if self._reviewers is None:
            owner_id = self._json["owner"]["_account_id"]
            self._reviewers = self.filter_reviewers(lambda reviewer: reviewer["_account_id"] != owner_id)
        return self._reviewers

    def get_messages(self) -> list[Message]:
        if self._messages is None:
            self._messages = [Message.wrap(m) for m in self._json.get("messages") or []]
        return self._messages

    def get_author(self) -> str | None:
        """Owner display name. Requires a detailed fetch."""
        return self._json["owner"].get("name")

    def get_description(self) -> Description:
        """Commit message of the current revision. Requires a detailed fetch."""
        if self._description is None:
            revision = self._json["revisions"][self._json["current_revision"]]
            self._description = Description(revision["commit"]["message"])
        return self._description

    def has_description(self) -> bool:
        return bool(self._json.get("current_revision") and self._json.get("revisions"))

    def __repr__(self) -> str:
        return f"Changelist({self.get_gerrit_url()!r})"
