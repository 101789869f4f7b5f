"""Commit description parsing.

A Gerrit commit message ends with a block of trailers::

    Fix crash when the cache is empty.

    Bug: 123456
    Change-Id: I0123456789abcdef

`Description` splits such text into the human-written body and the
ordered list of ``(key, value)`` trailers.
"""

from __future__ import annotations

import re

ATTRIBUTE_RE = re.compile(r"^\s*([-A-Za-z]+)[=:](.*)$")


class Description:
    """Wrapper around a changelist description, parsed on first use."""

    def __init__(self, text: str):
        self._text = text
        self._message: str | None = None
        self._attributes: list[tuple[str, str]] | None = None

    @property
    def text(self) -> str:
        """Raw description text."""
        return self._text

    @property
    def message(self) -> str:
        """Just the message, without the trailers at the bottom."""
        self._ensure_parsed()
        return self._message

    @property
    def attributes(self) -> list[tuple[str, str]]:
        """Trailers in top-to-bottom order."""
        self._ensure_parsed()
        return self._attributes

    def get(self, key: str) -> list[str]:
        """Return the values of every trailer named ``key``, in order."""
        return [value for name, value in self.attributes if name == key]

    def _ensure_parsed(self) -> None:
        if self._message is None:
            self._message, self._attributes = self.parse(self._text)

    @staticmethod
    def parse(text: str) -> tuple[str, list[tuple[str, str]]]:
        """Split ``text`` into ``(body, attributes)``.

        The first line is always part of the body, even when it looks
        like a trailer.
        """
        lines = text.split("\n")
        cutoff = len(lines) - 1

        # Peel off the trailing empty lines.
        while cutoff >= 1 and lines[cutoff] == "":
            cutoff -= 1

        # Peel off the attributes, bottom-up.
        attributes = []
        while cutoff >= 1:
            if lines[cutoff] != "":
                match = ATTRIBUTE_RE.match(lines[cutoff])
                if not match:
                    break
                attributes.append((match.group(1), match.group(2)))
            cutoff -= 1

        # Peel off any empty line separating the attributes and the message.
        while cutoff >= 1 and lines[cutoff] == "":
            cutoff -= 1

        attributes.reverse()
        return "\n".join(lines[: cutoff + 1]), attributes

    def __repr__(self) -> str:
        return f"Description({self._text!r})"
