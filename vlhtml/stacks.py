"""The stack of open elements and the list of active formatting elements."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from vlhtml.dom import Element, Node


class Scope(enum.Enum):
    """The kinds of element scope used when searching the open elements."""

    GENERIC = enum.auto()
    BUTTON = enum.auto()
    TABLE = enum.auto()
    LIST = enum.auto()


_SPECIAL = frozenset(
    {
        "address", "applet", "area", "article", "aside", "base", "basefont",
        "bgsound", "blockquote", "body", "br", "button", "caption", "center",
        "col", "colgroup", "dd", "details", "dir", "div", "dl", "dt", "embed",
        "fieldset", "figcaption", "figure", "footer", "form", "frame",
        "frameset", "h1", "h2", "h3", "h4", "h5", "h6", "head", "header",
        "hgroup", "hr", "html", "iframe", "img", "input", "keygen", "li",
        "link", "listing", "main", "marquee", "menu", "meta", "nav", "noembed",
        "noframes", "noscript", "object", "ol", "p", "param", "plaintext",
        "pre", "script", "search", "section", "select", "source", "style",
        "summary", "table", "tbody", "td", "template", "textarea", "tfoot",
        "th", "thead", "title", "tr", "track", "ul", "wbr",
    }
)

_ALL_SCOPE_BOUNDARIES = frozenset({"html", "table", "template"})
_NON_TABLE_BOUNDARIES = frozenset(
    {"applet", "caption", "td", "th", "marquee", "select", "object"}
)
_LIST_BOUNDARIES = frozenset({"ol", "ul"})


def is_special(name: str) -> bool:
    """Return True if ``name`` belongs to the special category of elements."""
    return name in _SPECIAL


class OpenElements:
    """The stack of open elements; the last item is the current node."""

    def __init__(self) -> None:
        self._nodes: list[Node] = []

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def __getitem__(self, index: int) -> Node:
        return self._nodes[index]

    def __contains__(self, node: object) -> bool:
        return any(item is node for item in self._nodes)

    def push(self, node: Node) -> None:
        """Push ``node`` on top of the stack."""
        self._nodes.append(node)

    def pop(self) -> Node:
        """Remove and return the current node."""
        if not self._nodes:
            raise IndexError("pop from an empty stack of open elements")
        return self._nodes.pop()

    def remove(self, node: Node) -> None:
        """Remove ``node`` from wherever it is in the stack; do nothing if absent."""
        for i, item in enumerate(self._nodes):
            if item is node:
                del self._nodes[i]
                return

    def insert(self, index: int, node: Node) -> None:
        """Insert ``node`` at ``index``; indices past the top are ignored."""
        if index >= len(self._nodes):
            return
        self._nodes.insert(index, node)

    def replace(self, old: Node, new: Node) -> None:
        """Put ``new`` wherever ``old`` appears."""
        self._nodes = [new if item is old else item for item in self._nodes]

    def current(self) -> Optional[Node]:
        """Return the current node, or None when the stack is empty."""
        return self._nodes[-1] if self._nodes else None

    def contains_name(self, name: str) -> bool:
        """Return True if an element named ``name`` is on the stack."""
        return any(
            isinstance(item, Element) and item.name == name for item in self._nodes
        )

    def in_scope(self, name: str, scope: Scope) -> bool:
        """Return True if an element named ``name`` is in the given scope."""
        for item in reversed(self._nodes):
            node_name = item.name
            if node_name == name:
                return True
            if node_name in _ALL_SCOPE_BOUNDARIES:
                return False
            if scope is not Scope.TABLE and node_name in _NON_TABLE_BOUNDARIES:
                return False
            if scope is Scope.BUTTON and node_name == "button":
                return False
            if scope is Scope.LIST and node_name in _LIST_BOUNDARIES:
                return False
        return False

    def find_last(self, name: str) -> Optional[Node]:
        """Return the topmost node named ``name``, or None."""
        return next((item for item in reversed(self._nodes) if item.name == name), None)

    def find_first(self, name: str) -> Optional[Node]:
        """Return the bottommost node named ``name``, or None."""
        return next((item for item in self._nodes if item.name == name), None)

    def index(self, node: Node) -> int:
        """Return the position of ``node``, searching from the top."""
        for i in range(len(self._nodes) - 1, -1, -1):
            if self._nodes[i] is node:
                return i
        raise ValueError("node is not on the stack of open elements")

    def furthest_block(self, node: Node) -> Optional[Node]:
        """Return the lowest special node above ``node``, or None."""
        start = next((i for i, item in enumerate(self._nodes) if item is node), 0)
        return next(
            (item for item in self._nodes[start + 1:] if is_special(item.name)), None
        )

    def common_ancestor(self, node: Node) -> Node:
        """Return the node immediately below ``node`` in the stack."""
        for i in range(len(self._nodes) - 1, 0, -1):
            if self._nodes[i] is node:
                return self._nodes[i - 1]
        raise ValueError("node has no ancestor on the stack of open elements")

    def pop_until(self, name: str) -> list[Node]:
        """Pop nodes until one named ``name`` has been popped; return them."""
        if self.find_last(name) is None:
            raise ValueError(f"no {name!r} element on the stack of open elements")
        popped: list[Node] = []
        while True:
            node = self._nodes.pop()
            popped.append(node)
            if node.name == name:
                return popped

    def pop_including(self, node: Node) -> list[Node]:
        """Pop nodes until ``node`` itself has been popped; return them."""
        if node not in self:
            raise ValueError("node is not on the stack of open elements")
        popped: list[Node] = []
        while True:
            item = self._nodes.pop()
            popped.append(item)
            if item is node:
                return popped

    def clear(self) -> None:
        """Pop every node."""
        self._nodes.clear()


@dataclass
class FormattingEntry:
    """One entry in the list of active formatting elements."""

    node: Optional[Node]
    token: Any
    is_marker: bool = False


class ActiveFormatting:
    """The list of active formatting elements, with scope markers."""

    def __init__(self) -> None:
        self._entries: list[FormattingEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[FormattingEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> FormattingEntry:
        return self._entries[index]

    def insert_marker(self) -> None:
        """Append a scope marker."""
        self._entries.append(FormattingEntry(None, None, True))

    def push(self, node: Node, token: Any) -> None:
        """Append a formatting element together with the token that made it."""
        self._entries.append(FormattingEntry(node, token))

    def insert(self, index: int, node: Node, token: Any) -> None:
        """Insert a formatting element at ``index``."""
        self._entries.insert(index, FormattingEntry(node, token))

    def remove(self, node: Node) -> None:
        """Remove the first entry holding ``node``; do nothing if absent."""
        for i, entry in enumerate(self._entries):
            if entry.node is node and not entry.is_marker:
                del self._entries[i]
                return

    def contains(self, node: Node) -> bool:
        """Return True if ``node`` is in the list."""
        return any(e.node is node and not e.is_marker for e in self._entries)

    def index(self, node: Node) -> int:
        """Return the position of ``node``, searching from the end."""
        for i in range(len(self._entries) - 1, -1, -1):
            entry = self._entries[i]
            if entry.node is node and not entry.is_marker:
                return i
        raise ValueError("node is not in the list of active formatting elements")

    def replace(self, old: Node, new: Node) -> None:
        """Put ``new`` wherever ``old`` appears."""
        for entry in self._entries:
            if entry.node is old and not entry.is_marker:
                entry.node = new

    def clear_to_last_marker(self) -> None:
        """Remove entries from the end up to and including the last marker."""
        while self._entries:
            if self._entries.pop().is_marker:
                return

    def find_after_last_marker(self, name: str) -> Optional[Node]:
        """Return the last element named ``name`` after the last marker, or None."""
        for entry in reversed(self._entries):
            if entry.is_marker:
                return None
            if entry.node is not None and entry.node.name == name:
                return entry.node
        return None