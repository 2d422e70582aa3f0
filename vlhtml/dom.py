"""A small document object model: nodes, elements, text, comments and documents."""

from __future__ import annotations

from typing import Iterator, Optional

MAX_HTML_NAME_LEN = 64
MAX_HTML_NODE_CHILDREN = 20
HTML_NAMESPACE = "http://www.w3.org/1999/xhtml"


class DomError(Exception):
    """Raised when a tree operation is not allowed."""


class Node:
    """A node in a document tree, linked to its parent and siblings."""

    def __init__(self, document: Optional["Node"], name: str) -> None:
        self.document = document
        self.name = name
        self.base_uri: Optional[str] = None
        self.is_connected = False
        self.parent: Optional[Node] = None
        self.first: Optional[Node] = None
        self.last: Optional[Node] = None
        self.prev: Optional[Node] = None
        self.next: Optional[Node] = None

    def insert_before(self, new_node: "Node", child: Optional["Node"]) -> "Node":
        """Insert ``new_node`` before ``child``, or at the end when ``child`` is None."""
        if new_node is None:
            raise DomError("cannot insert a missing node")
        ref_child = child
        if ref_child is new_node:
            ref_child = new_node.next
        if ref_child is not None and ref_child.parent is not self:
            raise DomError("reference child is not a child of this node")

        if ref_child is None:
            last = self.last
            if last is not None:
                last.next = new_node
                new_node.prev = last
                self.last = new_node
            else:
                self.first = new_node
                self.last = new_node
        else:
            prev = ref_child.prev
            if prev is not None:
                prev.next = new_node
                new_node.prev = prev
            else:
                self.first = new_node
            ref_child.prev = new_node
            new_node.next = ref_child

        new_node.parent = self
        return new_node

    def append(self, new_node: "Node") -> "Node":
        """Append ``new_node`` as the last child."""
        return self.insert_before(new_node, None)

    def remove(self, child: "Node") -> "Node":
        """Detach ``child`` from this node and return it."""
        if child.parent is not self:
            raise DomError("node is not a child of this node")

        prev, nxt = child.prev, child.next
        if prev is not None:
            prev.next = nxt
        if nxt is not None:
            nxt.prev = prev
        if self.first is child:
            self.first = nxt
        if self.last is child:
            self.last = prev

        child.parent = None
        child.next = None
        child.prev = None
        return child

    def children(self) -> Iterator["Node"]:
        """Yield the child nodes in document order."""
        child = self.first
        while child is not None:
            nxt = child.next
            yield child
            child = nxt

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class Text(Node):
    """A run of character data, limited to ``MAX_HTML_NAME_LEN`` characters."""

    def __init__(self, document: Optional[Node], data: str) -> None:
        super().__init__(document, "#text")
        self.data = data[:MAX_HTML_NAME_LEN]

    def append_data(self, data: str) -> None:
        """Append characters until the length limit is reached."""
        room = MAX_HTML_NAME_LEN - len(self.data)
        if room > 0:
            self.data += data[:room]


class Comment(Node):
    """A comment node, limited to ``MAX_HTML_NAME_LEN`` characters."""

    def __init__(self, document: Optional[Node], data: str) -> None:
        super().__init__(document, "#comment")
        self.data = data[:MAX_HTML_NAME_LEN]


class Attr(Node):
    """A name/value attribute owned by an element."""

    def __init__(self, name: str, value: Optional[str], owner: Optional[Node]) -> None:
        super().__init__(owner.document if owner is not None else None, name)
        self.value = value
        self.owner = owner


class Element(Node):
    """An element in the HTML namespace."""

    def __init__(self, document: Optional[Node], name: str) -> None:
        if len(name) > MAX_HTML_NAME_LEN:
            raise DomError(f"element name longer than {MAX_HTML_NAME_LEN} characters")
        super().__init__(document, name)
        self.namespace = HTML_NAMESPACE
        self.prefix: Optional[str] = None
        self.local_name = name
        self.tag_name = "".join(
            chr(ord(c) - 0x20) if "a" <= c <= "z" else c for c in name
        )
        self.id: Optional[str] = None
        self.class_name: Optional[str] = None
        self.attributes: list[Attr] = []

    def append_attr(self, attr: Attr) -> None:
        """Add an attribute after the existing ones."""
        self.attributes.append(attr)


class DocumentType(Node):
    """A document type declaration."""

    def __init__(
        self,
        document: Optional[Node],
        name: str,
        public_id: Optional[str] = None,
        system_id: Optional[str] = None,
    ) -> None:
        super().__init__(document, name)
        self.public_id = public_id or None
        self.system_id = system_id or None


class Document(Node):
    """The root of a document tree."""

    def __init__(self) -> None:
        super().__init__(None, "#document")
        self.document = self
        self.url: Optional[str] = None
        self.uri: Optional[str] = None
        self.compat_mode: Optional[str] = None
        self.character_set: Optional[str] = None
        self.content_set: Optional[str] = None
        self.content_type: Optional[str] = None
        self.doctype: Optional[DocumentType] = None
        self.parser_cannot_change_mode = False

    def set_doctype(self, doctype: Optional[DocumentType]) -> None:
        """Record the document's type declaration."""
        self.doctype = doctype


def format_tree(node: Node) -> str:
    """Render a tree as indented lines, two spaces per level."""
    lines: list[str] = []

    def walk(current: Node, level: int) -> None:
        indent = "  " * level
        if isinstance(current, Element):
            lines.append(f"{indent}{current.local_name}")
            lines.extend(f"{indent}  #attr - {attr.name}" for attr in current.attributes)
        elif isinstance(current, Document):
            lines.append(f"{indent}#document")
        elif isinstance(current, Text):
            lines.append(f"{indent}#text - {current.data}")
        elif isinstance(current, Comment):
            lines.append(f"{indent}<!-- {current.data} -->")
        for child in current.children():
            walk(child, level + 1)

    walk(node, 0)
    return "\n".join(lines)