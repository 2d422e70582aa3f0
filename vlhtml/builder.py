"""Token types and the shared tree-construction machinery used by every insertion mode."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from vlhtml.dom import Attr, Comment, Document, Element, Node, Text
from vlhtml.stacks import ActiveFormatting, OpenElements, Scope, is_special


class InsertionMode(enum.Enum):
    """The tree builder's insertion modes."""

    INITIAL = enum.auto()
    BEFORE_HTML = enum.auto()
    BEFORE_HEAD = enum.auto()
    IN_HEAD = enum.auto()
    IN_HEAD_NOSCRIPT = enum.auto()
    AFTER_HEAD = enum.auto()
    IN_BODY = enum.auto()
    TEXT = enum.auto()
    IN_TABLE = enum.auto()
    IN_TABLE_TEXT = enum.auto()
    IN_CAPTION = enum.auto()
    IN_COLUMN_GROUP = enum.auto()
    IN_TABLE_BODY = enum.auto()
    IN_ROW = enum.auto()
    IN_CELL = enum.auto()
    IN_TEMPLATE = enum.auto()
    AFTER_BODY = enum.auto()
    IN_FRAMESET = enum.auto()
    AFTER_FRAMESET = enum.auto()
    AFTER_AFTER_BODY = enum.auto()
    AFTER_AFTER_FRAMESET = enum.auto()


class TokenType(enum.Enum):
    """The kinds of token a tokenizer hands to the tree builder."""

    DOCTYPE = enum.auto()
    START = enum.auto()
    END = enum.auto()
    COMMENT = enum.auto()
    CHARACTER = enum.auto()
    EOF = enum.auto()


class TokenizerState(enum.Enum):
    """Tokenizer states the tree builder may switch the tokenizer into."""

    DATA = enum.auto()
    RCDATA = enum.auto()
    RAWTEXT = enum.auto()
    SCRIPT_DATA = enum.auto()
    PLAINTEXT = enum.auto()


@dataclass
class TokenAttribute:
    """A name/value pair found in a start tag."""

    name: str
    value: str = ""


@dataclass
class Token:
    """A single token produced by the tokenizer."""

    type: TokenType
    name: str = ""
    data: str = ""
    public_id: str = ""
    system_id: str = ""
    attributes: list[TokenAttribute] = field(default_factory=list)
    self_closing: bool = False


class UnsupportedMarkup(Exception):
    """Raised when the input uses markup the tree builder does not handle."""


WHITESPACE = "\t\n\f\r "

_IMPLIED_END_TAGS = frozenset(
    {"dd", "dt", "li", "optgroup", "option", "p", "rb", "rp", "rt", "rtc"}
)
_FOSTER_TARGETS = frozenset({"table", "tbody", "thead", "tfoot", "tr"})
_TABLE_ROW_CONTEXT = frozenset({"tr", "html", "template"})
_TABLE_CONTEXT = frozenset({"table", "html", "template"})
_TABLE_BODY_CONTEXT = frozenset({"tfoot", "tbody", "thead", "html", "template"})
_ADOPTION_OUTER_LIMIT = 8


class TreeBuilderBase:
    """State and algorithms shared by the insertion modes of the tree builder."""

    def __init__(
        self, on_tokenizer_state: Optional[Callable[[TokenizerState], None]] = None
    ) -> None:
        self.on_tokenizer_state = on_tokenizer_state
        self.reset()

    def reset(self) -> None:
        """Return the builder to its initial state with a fresh document."""
        self.mode = InsertionMode.INITIAL
        self.original_mode = InsertionMode.INITIAL
        self.replacement_mode: Optional[InsertionMode] = None
        self.pending_table_text: list[Token] = []
        self.open_elements = OpenElements()
        self.formatting = ActiveFormatting()
        self.document = Document()
        self.stopped = False
        self.foster_parenting = False
        self.will_use_foster_parenting = False
        self.head_pointer: Optional[Node] = None
        self.form_element: Optional[Node] = None
        self.scripting_enabled = False
        self.remove_head = False
        self.will_remove_head = False

    # -- small helpers ---------------------------------------------------

    @staticmethod
    def _is_whitespace(token: Token) -> bool:
        return (
            token.type is TokenType.CHARACTER
            and bool(token.data)
            and token.data[0] in WHITESPACE
        )

    def _set_tokenizer_state(self, state: TokenizerState) -> None:
        if self.on_tokenizer_state is not None:
            self.on_tokenizer_state(state)

    def _process_using(self, mode: InsertionMode) -> bool:
        """Ask for the current token to be reprocessed with the rules of ``mode``."""
        self.replacement_mode = mode
        return False

    def _stack_has_any(self, names: Iterable[str]) -> bool:
        return any(self.open_elements.contains_name(name) for name in names)

    def _current_name(self) -> Optional[str]:
        current = self.open_elements.current()
        return current.name if current is not None else None

    # -- insertion -------------------------------------------------------

    def _insertion_location(
        self, override: Optional[Node] = None
    ) -> tuple[Node, Optional[Node]]:
        """Return the parent to insert into and the child to insert before."""
        target = override if override is not None else self.open_elements.current()
        if target is None:
            target = self.document

        if (
            self.foster_parenting
            and isinstance(target, Element)
            and target.name in _FOSTER_TARGETS
        ):
            last_template = self.open_elements.find_last("template")
            last_table = self.open_elements.find_last("table")
            if last_template is not None:
                raise UnsupportedMarkup("foster parenting inside a template")
            if last_table is None:
                return self.open_elements[0], None
            if last_table.parent is not None:
                return last_table.parent, last_table
            table_index = self.open_elements.index(last_table)
            return self.open_elements[table_index - 1], None

        return target, None

    def _insert_comment(self, token: Token, position: Optional[Node] = None) -> None:
        parent, child = self._insertion_location(position)
        parent.insert_before(Comment(self.document, token.data), child)

    def _create_element(self, name: str, token: Optional[Token]) -> Element:
        element = Element(self.document, name)
        if token is not None:
            for attribute in token.attributes:
                element.append_attr(
                    Attr(attribute.name, attribute.value or None, element)
                )
        return element

    def _insert_foreign_element(
        self, name: str, token: Optional[Token], only_add_to_stack: bool = False
    ) -> Element:
        parent, child = self._insertion_location()
        element = self._create_element(name, token)
        if not only_add_to_stack:
            parent.insert_before(element, child)
        self.open_elements.push(element)
        return element

    def _insert_html_element(self, name: str, token: Optional[Token] = None) -> Element:
        return self._insert_foreign_element(name, token)

    def _insert_character(self, data: str) -> None:
        parent, child = self._insertion_location()
        previous = child.prev if child is not None else parent.last

        if isinstance(parent, Document):
            return

        if isinstance(previous, Text):
            previous.append_data(data)
        else:
            parent.insert_before(Text(self.document, data), child)

    # -- stack manipulation ----------------------------------------------

    def _stop_parsing(self) -> None:
        self.open_elements.clear()
        self.stopped = True

    def _generate_implied_end_tags(self, exclude: Optional[str] = None) -> None:
        while len(self.open_elements):
            name = self._current_name()
            if exclude is not None and name == exclude:
                return
            if name not in _IMPLIED_END_TAGS:
                return
            self.open_elements.pop()

    def _clear_formatting_elements(self) -> None:
        self.formatting.clear_to_last_marker()

    def _close_p_element(self) -> None:
        self._generate_implied_end_tags("p")
        self.open_elements.pop_until("p")

    def _close_cell(self) -> None:
        self._generate_implied_end_tags()
        while len(self.open_elements) and self._current_name() not in ("td", "th"):
            self.open_elements.pop()
        if len(self.open_elements):
            self.open_elements.pop()
        self._clear_formatting_elements()
        self.mode = InsertionMode.IN_ROW

    def _clear_stack_back_to(self, names: frozenset[str]) -> None:
        while len(self.open_elements) and self._current_name() not in names:
            self.open_elements.pop()

    def _clear_stack_back_to_table_row(self) -> None:
        self._clear_stack_back_to(_TABLE_ROW_CONTEXT)

    def _clear_stack_back_to_table(self) -> None:
        self._clear_stack_back_to(_TABLE_CONTEXT)

    def _clear_stack_back_to_table_body(self) -> None:
        self._clear_stack_back_to(_TABLE_BODY_CONTEXT)

    # -- formatting elements ---------------------------------------------

    def _reconstruct_formatting_elements(self) -> None:
        entries = self.formatting
        if not len(entries):
            return
        last = entries[-1]
        if last.is_marker or last.node in self.open_elements:
            return

        index = len(entries) - 1
        while index > 0:
            previous = entries[index - 1]
            if previous.is_marker or previous.node in self.open_elements:
                break
            index -= 1

        while True:
            entry = entries[index]
            entry.node = self._insert_html_element(entry.token.name, entry.token)
            if index + 1 == len(entries):
                return
            index += 1

    def _run_adoption_procedure(self, name: str) -> bool:
        """Run the adoption agency algorithm; False means "act as any other end tag"."""
        stack = self.open_elements
        formatting = self.formatting

        current = stack.current()
        if current is not None and current.name == name and not formatting.contains(current):
            stack.pop()
            return True

        for _ in range(_ADOPTION_OUTER_LIMIT):
            formatting_node = formatting.find_after_last_marker(name)
            if formatting_node is None:
                return False

            if formatting_node not in stack:
                formatting.remove(formatting_node)
                return True

            if not stack.in_scope(formatting_node.name, Scope.GENERIC):
                return True

            furthest = stack.furthest_block(formatting_node)
            if furthest is None:
                stack.pop_including(formatting_node)
                formatting.remove(formatting_node)
                return True

            common_ancestor = stack.common_ancestor(formatting_node)
            bookmark = formatting.index(formatting_node)

            node: Node = furthest
            last_node: Node = furthest
            inner = 0
            node_index = stack.index(node)

            while True:
                inner += 1
                node_index -= 1
                node = stack[node_index]

                if node is formatting_node:
                    break

                if inner > 3 and formatting.contains(node):
                    if formatting.index(node) < bookmark:
                        bookmark -= 1
                    formatting.remove(node)

                if not formatting.contains(node):
                    stack.remove(node)
                    continue

                entry_token = formatting[formatting.index(node)].token
                new_node = self._create_element(entry_token.name, entry_token)
                common_ancestor.append(new_node)
                formatting.replace(node, new_node)
                stack.replace(node, new_node)
                node = new_node

                if last_node is furthest:
                    bookmark = formatting.index(new_node) + 1

                if last_node.parent is not None:
                    last_node.parent.remove(last_node)
                node.append(last_node)
                last_node = node

            parent, child = self._insertion_location(common_ancestor)
            if last_node.parent is not None:
                last_node.parent.remove(last_node)
            parent.insert_before(last_node, child)

            formatting_index = formatting.index(formatting_node)
            formatting_token = formatting[formatting_index].token
            new_element = self._create_element(formatting_token.name, formatting_token)

            for child_node in list(furthest.children()):
                furthest.remove(child_node)
                new_element.append(child_node)

            furthest.append(new_element)

            formatting.remove(formatting_node)
            if formatting_index < bookmark:
                bookmark -= 1
            formatting.insert(bookmark, new_element, formatting_token)

            stack.remove(formatting_node)
            stack.insert(stack.index(furthest) + 1, new_element)

        return True

    def _handle_end_tag_in_body(self, name: str) -> None:
        for node in reversed(list(self.open_elements)):
            if node.name == name:
                self._generate_implied_end_tags(name)
                self.open_elements.pop_including(node)
                return
            if is_special(node.name):
                return

    # -- mode selection --------------------------------------------------

    def _reset_insertion_mode(self) -> None:
        nodes = list(self.open_elements)
        for position in range(len(nodes) - 1, -1, -1):
            last = position == 0
            name = nodes[position].name

            if name in ("td", "th") and not last:
                self.mode = InsertionMode.IN_CELL
                return
            if name == "tr":
                self.mode = InsertionMode.IN_ROW
                return
            if name in ("tbody", "thead", "tfoot"):
                self.mode = InsertionMode.IN_TABLE_BODY
                return
            if name == "caption":
                self.mode = InsertionMode.IN_CAPTION
                return
            if name == "colgroup":
                self.mode = InsertionMode.IN_COLUMN_GROUP
                return
            if name == "table":
                self.mode = InsertionMode.IN_TABLE
                return
            if name == "template":
                raise UnsupportedMarkup("resetting the insertion mode inside a template")
            if name == "head":
                self.mode = InsertionMode.IN_HEAD
                return
            if name == "body":
                self.mode = InsertionMode.IN_BODY
                return
            if name == "frameset":
                self.mode = InsertionMode.IN_FRAMESET
                return
            if name == "html":
                self.mode = (
                    InsertionMode.BEFORE_HEAD
                    if self.head_pointer is None
                    else InsertionMode.AFTER_HEAD
                )
                return
            if last:
                self.mode = InsertionMode.IN_BODY
                return
        self.mode = InsertionMode.IN_BODY

    @staticmethod
    def _find_nearest_ancestor(node: Node, name: str) -> Optional[Node]:
        parent = node.parent
        while parent is not None and not isinstance(parent, Document):
            if parent.name == name:
                return parent
            parent = parent.parent
        return None