"""Insertion modes for the body, text, tables, framesets and what follows the body."""

from __future__ import annotations

import dataclasses
from typing import Callable

from vlhtml.builder import (
    InsertionMode,
    Token,
    TokenizerState,
    TokenType,
    TreeBuilderBase,
    UnsupportedMarkup,
)
from vlhtml.stacks import Scope, is_special

Handler = Callable[[Token], bool]

_MAX_PENDING_TABLE_TEXT = 10

_HEAD_RULE_TAGS = frozenset(
    {
        "base", "basefont", "bgsound", "link", "meta", "noframes",
        "script", "template", "title", "style",
    }
)
_OPEN_AT_END_OF_BODY = (
    "dd", "dt", "li", "optgroup", "option", "p", "rb", "rt", "rtc",
    "tbody", "td", "tfoot", "th", "thead", "tr", "body", "html",
)
_BLOCK_START = frozenset(
    {
        "address", "article", "aside", "blockquote", "center", "details",
        "dialog", "dir", "div", "dl", "fieldset", "figcaption", "figure",
        "footer", "header", "hgroup", "main", "menu", "nav", "ol", "p",
        "search", "section", "summary", "ul",
    }
)
_BLOCK_END = frozenset(
    {
        "address", "article", "aside", "blockquote", "button", "center",
        "details", "dialog", "dir", "div", "dl", "fieldset", "figcaption",
        "figure", "footer", "header", "hgroup", "listing", "main", "menu",
        "nav", "ol", "pre", "search", "section", "summary", "select", "ul",
    }
)
_HEADINGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
_FORMATTING_START = frozenset(
    {
        "b", "big", "code", "em", "font", "i", "s", "small", "strike",
        "strong", "tt", "u",
    }
)
_FORMATTING_END = _FORMATTING_START | {"a", "nobr"}
_MARKER_ELEMENTS = frozenset({"applet", "marquee", "object"})
_VOID_BODY_ELEMENTS = frozenset({"area", "br", "embed", "img", "keygen", "wbr"})
_UNSUPPORTED_BODY_START = frozenset(
    {
        "plaintext", "nobr", "input", "param", "source", "track", "xmp",
        "iframe", "noembed", "rb", "rtc", "rp", "rt", "math", "svg",
    }
)
_MISPLACED_TABLE_PARTS = frozenset(
    {
        "caption", "col", "colgroup", "frame", "head", "tbody", "td",
        "tfoot", "th", "thead", "tr",
    }
)
_LIST_ITEM_PASSTHROUGH = frozenset({"address", "div", "p"})

_TABLE_TEXT_CONTEXT = frozenset({"table", "tbody", "template", "tfoot", "thead", "tr"})
_TABLE_SECTIONS = frozenset({"tbody", "tfoot", "thead"})
_TABLE_IGNORED_END = frozenset(
    {
        "body", "caption", "col", "colgroup", "html", "tbody", "td", "tfoot",
        "th", "thead", "tr",
    }
)
_TABLE_BODY_EXIT_START = frozenset(
    {"caption", "col", "colgroup", "tbody", "tfoot", "thead"}
)
_TABLE_BODY_UNSUPPORTED_END = frozenset(
    {"body", "caption", "col", "colgroup", "html", "td", "th", "tr"}
)
_ROW_EXIT_START = _TABLE_BODY_EXIT_START | {"tr"}
_ROW_UNSUPPORTED_END = frozenset(
    {"body", "caption", "col", "colgroup", "html", "td", "th"}
)
_CELL_EXIT_START = _ROW_EXIT_START | {"th", "td"}
_CELL_UNSUPPORTED_END = frozenset({"body", "caption", "col", "colgroup", "html"})
_CELL_EXIT_END = frozenset({"table", "tfoot", "thead", "tbody", "tr"})


class BodyModeMixin(TreeBuilderBase):
    """Rules for the in-body, text, table, frameset and after-body insertion modes.

    Each handler takes the current token and returns True when the token has
    been consumed, or False when it must be processed again.
    """

    def _body_mode_handlers(self) -> dict[InsertionMode, Handler]:
        """Map each insertion mode handled here to its bound handler."""
        return {
            InsertionMode.IN_BODY: self._in_body_mode,
            InsertionMode.TEXT: self._text_mode,
            InsertionMode.IN_TABLE: self._in_table_mode,
            InsertionMode.IN_TABLE_TEXT: self._in_table_text_mode,
            InsertionMode.IN_CAPTION: self._in_caption_mode,
            InsertionMode.IN_COLUMN_GROUP: self._in_column_group_mode,
            InsertionMode.IN_TABLE_BODY: self._in_table_body_mode,
            InsertionMode.IN_ROW: self._in_row_mode,
            InsertionMode.IN_CELL: self._in_cell_mode,
            InsertionMode.IN_TEMPLATE: self._in_template_mode,
            InsertionMode.AFTER_BODY: self._after_body_mode,
            InsertionMode.IN_FRAMESET: self._in_frameset_mode,
            InsertionMode.AFTER_FRAMESET: self._after_frameset_mode,
            InsertionMode.AFTER_AFTER_BODY: self._after_after_body_mode,
            InsertionMode.AFTER_AFTER_FRAMESET: self._after_after_frameset_mode,
        }

    # -- in body ---------------------------------------------------------

    def _in_body_mode(self, token: Token) -> bool:
        kind = token.type
        if kind is TokenType.CHARACTER:
            if token.data[:1] in ("", "\0"):
                return True
            self._reconstruct_formatting_elements()
            self._insert_character(token.data)
            return True
        if kind is TokenType.COMMENT:
            self._insert_comment(token)
            return True
        if kind is TokenType.DOCTYPE:
            return True
        if kind is TokenType.START:
            return self._in_body_start(token)
        if kind is TokenType.END:
            return self._in_body_end(token)
        self._stop_parsing()
        return True

    def _in_body_start(self, token: Token) -> bool:
        name = token.name
        stack = self.open_elements

        if name == "html":
            return True
        if name in _HEAD_RULE_TAGS:
            return self._process_using(InsertionMode.IN_HEAD)
        if name == "body":
            return True
        if name == "frameset":
            self._insert_html_element(name, token)
            self.mode = InsertionMode.IN_FRAMESET
            return True
        if name in _BLOCK_START:
            if stack.in_scope("p", Scope.BUTTON):
                self._close_p_element()
            self._insert_html_element(name, token)
            return True
        if name in _HEADINGS:
            if self._current_name() in _HEADINGS:
                stack.pop()
            self._insert_html_element(name, token)
            return True
        if name in ("pre", "listing"):
            self._insert_html_element(name, token)
            return True
        if name == "form":
            if self.form_element is not None and not stack.contains_name("template"):
                return True
            element = self._insert_html_element(name, token)
            if not stack.contains_name("template"):
                self.form_element = element
            return True
        if name == "li":
            self._close_list_item(frozenset({"li"}))
            self._insert_html_element(name, token)
            return True
        if name in ("dd", "dt"):
            self._close_list_item(frozenset({"dd", "dt"}))
            self._insert_html_element(name, token)
            return True
        if name in _UNSUPPORTED_BODY_START or (
            name == "noscript" and self.scripting_enabled
        ):
            raise UnsupportedMarkup(f"<{name}> in body is not supported")
        if name == "button":
            if stack.in_scope("button", Scope.BUTTON):
                self._generate_implied_end_tags()
                stack.pop_until("button")
            self._insert_html_element(name, token)
            return True
        if name == "a":
            node = self.formatting.find_after_last_marker("a")
            if node is not None:
                if not self._run_adoption_procedure(name):
                    self._handle_end_tag_in_body(name)
                stack.remove(node)
                self.formatting.remove(node)
            self._reconstruct_formatting_elements()
            element = self._insert_html_element(name, token)
            self.formatting.push(element, token)
            return True
        if name in _FORMATTING_START:
            self._reconstruct_formatting_elements()
            element = self._insert_html_element(name, token)
            self.formatting.push(element, token)
            return True
        if name in _MARKER_ELEMENTS:
            self._reconstruct_formatting_elements()
            self._insert_html_element(name, token)
            self.formatting.insert_marker()
            return True
        if name == "table":
            self._insert_html_element(name, token)
            self.mode = InsertionMode.IN_TABLE
            return True
        if name in _VOID_BODY_ELEMENTS:
            self._reconstruct_formatting_elements()
            self._insert_html_element(name, token)
            stack.pop()
            return True
        if name == "hr":
            if stack.in_scope("p", Scope.BUTTON):
                self._close_p_element()
            if stack.in_scope("select", Scope.GENERIC):
                self._generate_implied_end_tags()
            self._insert_html_element(name, token)
            stack.pop()
            return True
        if name == "image":
            token.name = "img"
            return False
        if name == "textarea":
            self._insert_html_element(name, token)
            self._set_tokenizer_state(TokenizerState.RCDATA)
            self.original_mode = self.mode
            self.mode = InsertionMode.TEXT
            return True
        if name == "select":
            if stack.in_scope("select", Scope.GENERIC):
                stack.pop_until("select")
            else:
                self._reconstruct_formatting_elements()
                self._insert_html_element(name, token)
            return True
        if name in ("option", "optgroup"):
            if stack.in_scope("select", Scope.GENERIC):
                self._generate_implied_end_tags("optgroup" if name == "option" else None)
            elif self._current_name() == "option":
                stack.pop()
            self._reconstruct_formatting_elements()
            self._insert_html_element(name, token)
            return True
        if name in _MISPLACED_TABLE_PARTS:
            return True
        self._insert_html_element(name, token)
        return True

    def _close_list_item(self, names: frozenset[str]) -> None:
        for node in reversed(list(self.open_elements)):
            if node.name in names:
                self._generate_implied_end_tags(node.name)
                self.open_elements.pop_until(node.name)
                break
            if is_special(node.name) and node.name not in _LIST_ITEM_PASSTHROUGH:
                break
        if self.open_elements.in_scope("p", Scope.BUTTON):
            self._close_p_element()

    def _in_body_end(self, token: Token) -> bool:
        name = token.name
        stack = self.open_elements

        if name == "template":
            return self._process_using(InsertionMode.IN_HEAD)
        if name == "body":
            if not stack.in_scope("body", Scope.GENERIC):
                raise UnsupportedMarkup("</body> without a body element in scope")
            if not self._stack_has_any(_OPEN_AT_END_OF_BODY):
                raise UnsupportedMarkup("</body> with no open body content")
            self.mode = InsertionMode.AFTER_BODY
            return True
        if name == "html":
            self.mode = InsertionMode.AFTER_BODY
            return False
        if name in _BLOCK_END:
            if stack.in_scope(name, Scope.GENERIC):
                self._generate_implied_end_tags()
                stack.pop_until(name)
            return True
        if name == "form":
            if stack.contains_name("template"):
                raise UnsupportedMarkup("</form> inside a template")
            node = self.form_element
            self.form_element = None
            if node is not None and node in stack:
                self._generate_implied_end_tags()
                stack.remove(node)
            return True
        if name == "p":
            if not stack.in_scope("p", Scope.BUTTON):
                self._insert_html_element("p", None)
            self._close_p_element()
            return True
        if name == "li":
            if stack.in_scope("li", Scope.LIST):
                self._generate_implied_end_tags("li")
                stack.pop_until("li")
            return True
        if name in ("dd", "dt"):
            if stack.in_scope(name, Scope.GENERIC):
                self._generate_implied_end_tags(name)
                stack.pop_until(name)
            return True
        if name in _HEADINGS:
            if any(stack.in_scope(heading, Scope.GENERIC) for heading in sorted(_HEADINGS)):
                self._generate_implied_end_tags()
                while len(stack) and self._current_name() not in _HEADINGS:
                    stack.pop()
            return True
        if name in _FORMATTING_END:
            if not self._run_adoption_procedure(name):
                self._handle_end_tag_in_body(name)
            return True
        if name in _MARKER_ELEMENTS:
            if stack.in_scope(name, Scope.GENERIC):
                self._generate_implied_end_tags()
                stack.pop_until(name)
                self._clear_formatting_elements()
            return True
        if name == "br":
            bare = dataclasses.replace(token, attributes=[])
            self._reconstruct_formatting_elements()
            self._insert_html_element(name, bare)
            stack.pop()
            return True
        if name == "option":
            self._handle_end_tag_in_body(name)
            return True
        self._handle_end_tag_in_body(name)
        return True

    # -- text ------------------------------------------------------------

    def _text_mode(self, token: Token) -> bool:
        kind = token.type
        if kind is TokenType.CHARACTER:
            self._insert_character(token.data)
            return True
        if kind is TokenType.EOF:
            if len(self.open_elements):
                self.open_elements.pop()
            self.mode = self.original_mode
            return False
        if kind is TokenType.END:
            if len(self.open_elements):
                self.open_elements.pop()
            self.mode = self.original_mode
        return True

    # -- tables ----------------------------------------------------------

    def _in_table_mode(self, token: Token) -> bool:
        kind, name = token.type, token.name
        is_start = kind is TokenType.START
        is_end = kind is TokenType.END

        if kind is TokenType.CHARACTER and self._current_name() in _TABLE_TEXT_CONTEXT:
            self.pending_table_text = []
            self.original_mode = self.mode
            self.mode = InsertionMode.IN_TABLE_TEXT
            return False
        if kind is TokenType.COMMENT:
            self._insert_comment(token)
            return True
        if kind is TokenType.DOCTYPE:
            raise UnsupportedMarkup("doctype inside a table")
        if is_start and name == "caption":
            raise UnsupportedMarkup("table captions are not supported")
        if is_start and name == "colgroup":
            self._clear_stack_back_to_table()
            self._insert_html_element(name, token)
            self.mode = InsertionMode.IN_COLUMN_GROUP
            return True
        if is_start and name == "col":
            self._clear_stack_back_to_table()
            self._insert_html_element("colgroup", None)
            self.mode = InsertionMode.IN_COLUMN_GROUP
            return False
        if is_start and name in _TABLE_SECTIONS:
            self._clear_stack_back_to_table()
            self._insert_html_element(name, token)
            self.mode = InsertionMode.IN_TABLE_BODY
            return True
        if is_start and name in ("td", "th", "tr"):
            self._clear_stack_back_to_table()
            self._insert_html_element("tbody", None)
            self.mode = InsertionMode.IN_TABLE_BODY
            return False
        if is_start and name == "table":
            raise UnsupportedMarkup("nested <table> start tag inside a table")
        if is_end and name == "table":
            if self.open_elements.in_scope("table", Scope.TABLE):
                self.open_elements.pop_until("table")
                self._reset_insertion_mode()
            return True
        if is_end and name in _TABLE_IGNORED_END:
            return True
        if (is_start and name in ("style", "script", "template")) or (
            is_end and name == "template"
        ):
            raise UnsupportedMarkup(f"<{name}> inside a table is not supported")
        if is_start and name in ("input", "form"):
            raise UnsupportedMarkup(f"<{name}> inside a table is not supported")
        if kind is TokenType.EOF:
            self.replacement_mode = InsertionMode.IN_BODY
            return True
        self.will_use_foster_parenting = True
        return self._process_using(InsertionMode.IN_BODY)

    def _in_table_text_mode(self, token: Token) -> bool:
        if token.type is TokenType.CHARACTER:
            if token.data == "\0":
                raise UnsupportedMarkup("NUL character in table text")
            if len(self.pending_table_text) < _MAX_PENDING_TABLE_TEXT:
                self.pending_table_text.append(token)
            return True

        for pending in self.pending_table_text:
            self.foster_parenting = True
            self._reconstruct_formatting_elements()
            self._insert_character(pending.data)
            self.foster_parenting = False
        self.pending_table_text = []
        self.mode = self.original_mode
        return False

    def _in_caption_mode(self, token: Token) -> bool:
        raise UnsupportedMarkup("table captions are not supported")

    def _in_column_group_mode(self, token: Token) -> bool:
        kind, name = token.type, token.name
        is_start = kind is TokenType.START
        is_end = kind is TokenType.END

        if self._is_whitespace(token):
            raise UnsupportedMarkup("whitespace in a column group")
        if kind is TokenType.COMMENT:
            self._insert_comment(token)
            return True
        if kind is TokenType.DOCTYPE or (is_start and name == "html"):
            raise UnsupportedMarkup(f"{kind.name.lower()} token in a column group")
        if is_start and name == "col":
            self._insert_html_element(name, token)
            self.open_elements.pop()
            return True
        if is_end and name in ("colgroup", "col"):
            raise UnsupportedMarkup(f"</{name}> in a column group is not supported")
        if (is_start or is_end) and name == "template":
            raise UnsupportedMarkup("template elements are not supported")
        if kind is TokenType.EOF:
            raise UnsupportedMarkup("end of file in a column group")
        if self._current_name() != "colgroup":
            return True
        self.open_elements.pop()
        self.mode = InsertionMode.IN_TABLE
        return False

    def _in_table_body_mode(self, token: Token) -> bool:
        kind, name = token.type, token.name
        is_start = kind is TokenType.START
        is_end = kind is TokenType.END
        stack = self.open_elements

        if is_start and name == "tr":
            self._clear_stack_back_to_table_body()
            self._insert_html_element(name, token)
            self.mode = InsertionMode.IN_ROW
            return True
        if is_start and name in ("th", "td"):
            self._clear_stack_back_to_table_body()
            self._insert_html_element("tr", None)
            self.mode = InsertionMode.IN_ROW
            return False
        if is_end and name in _TABLE_SECTIONS:
            if not stack.in_scope(name, Scope.TABLE):
                return True
            self._clear_stack_back_to_table_body()
            stack.pop()
            self.mode = InsertionMode.IN_TABLE
            return False
        if (is_start and name in _TABLE_BODY_EXIT_START) or (is_end and name == "table"):
            if not any(stack.in_scope(section, Scope.TABLE) for section in ("tbody", "thead", "tfoot")):
                return True
            self._clear_stack_back_to_table_body()
            stack.pop()
            self.mode = InsertionMode.IN_TABLE
            return False
        if is_end and name in _TABLE_BODY_UNSUPPORTED_END:
            raise UnsupportedMarkup(f"</{name}> in a table body is not supported")
        return self._process_using(InsertionMode.IN_TABLE)

    def _in_row_mode(self, token: Token) -> bool:
        kind, name = token.type, token.name
        is_start = kind is TokenType.START
        is_end = kind is TokenType.END
        stack = self.open_elements

        if is_start and name in ("th", "td"):
            self._clear_stack_back_to_table_row()
            self._insert_html_element(name, token)
            self.formatting.insert_marker()
            self.mode = InsertionMode.IN_CELL
            return True
        if is_end and name == "tr":
            if stack.in_scope("tr", Scope.TABLE):
                self._clear_stack_back_to_table_row()
                stack.pop()
                self.mode = InsertionMode.IN_TABLE_BODY
            return True
        if (is_start and name in _ROW_EXIT_START) or (is_end and name == "table"):
            if not stack.in_scope("tr", Scope.TABLE):
                return True
            self._clear_stack_back_to_table_row()
            stack.pop()
            self.mode = InsertionMode.IN_TABLE_BODY
            return False
        if is_end and name in _TABLE_SECTIONS:
            if not stack.in_scope(name, Scope.TABLE) or not stack.in_scope("tr", Scope.TABLE):
                return True
            self._clear_stack_back_to_table_row()
            stack.pop()
            self.mode = InsertionMode.IN_TABLE_BODY
            return False
        if is_end and name in _ROW_UNSUPPORTED_END:
            raise UnsupportedMarkup(f"</{name}> in a table row is not supported")
        return self._process_using(InsertionMode.IN_TABLE)

    def _in_cell_mode(self, token: Token) -> bool:
        kind, name = token.type, token.name
        is_start = kind is TokenType.START
        is_end = kind is TokenType.END
        stack = self.open_elements

        if is_end and name in ("td", "th"):
            if stack.in_scope(name, Scope.TABLE):
                self._generate_implied_end_tags()
                stack.pop_until(name)
                self._clear_formatting_elements()
                self.mode = InsertionMode.IN_ROW
            return True
        if is_start and name in _CELL_EXIT_START:
            if not (stack.in_scope("td", Scope.GENERIC) or stack.in_scope("th", Scope.GENERIC)):
                raise UnsupportedMarkup("no table cell in scope")
            self._close_cell()
            return False
        if is_end and name in _CELL_UNSUPPORTED_END:
            raise UnsupportedMarkup(f"</{name}> in a table cell is not supported")
        if is_end and name in _CELL_EXIT_END:
            if not stack.in_scope(name, Scope.TABLE):
                return True
            self._close_cell()
            return False
        return self._process_using(InsertionMode.IN_BODY)

    def _in_template_mode(self, token: Token) -> bool:
        raise UnsupportedMarkup("template contents are not supported")

    # -- after the body and framesets ------------------------------------

    def _after_body_mode(self, token: Token) -> bool:
        kind, name = token.type, token.name
        if self._is_whitespace(token):
            raise UnsupportedMarkup("whitespace after the body")
        if kind is TokenType.COMMENT:
            target = self.open_elements[0] if len(self.open_elements) else self.document
            self._insert_comment(token, target)
            return True
        if kind is TokenType.DOCTYPE or (kind is TokenType.START and name == "html"):
            raise UnsupportedMarkup(f"{kind.name.lower()} token after the body")
        if kind is TokenType.END and name == "html":
            self.mode = InsertionMode.AFTER_AFTER_BODY
            return True
        if kind is TokenType.EOF:
            self._stop_parsing()
            return True
        self.mode = InsertionMode.IN_BODY
        return False

    def _in_frameset_mode(self, token: Token) -> bool:
        kind, name = token.type, token.name
        is_start = kind is TokenType.START
        is_end = kind is TokenType.END

        if self._is_whitespace(token):
            self._insert_character(token.data)
            return True
        if kind is TokenType.COMMENT:
            self._insert_comment(token)
            return True
        if kind is TokenType.DOCTYPE:
            return True
        if is_start and name == "html":
            raise UnsupportedMarkup("<html> inside a frameset")
        if is_start and name == "frameset":
            self._insert_html_element(name, token)
            return True
        if is_end and name == "frameset":
            if self._current_name() != "html" and len(self.open_elements):
                self.open_elements.pop()
            return True
        if is_start and name == "frame":
            self._insert_html_element(name, token)
            self.open_elements.pop()
            return True
        if is_start and name == "noframes":
            return self._process_using(InsertionMode.IN_HEAD)
        if kind is TokenType.EOF:
            self._stop_parsing()
            return True
        return True

    def _after_frameset_mode(self, token: Token) -> bool:
        if token.type is TokenType.COMMENT:
            self._insert_comment(token)
            return True
        raise UnsupportedMarkup("content after a frameset is not supported")

    def _after_after_body_mode(self, token: Token) -> bool:
        kind = token.type
        if kind is TokenType.COMMENT:
            self._insert_comment(token, self.document)
            return True
        if (
            kind is TokenType.DOCTYPE
            or self._is_whitespace(token)
            or (kind is TokenType.START and token.name == "html")
        ):
            raise UnsupportedMarkup(f"{kind.name.lower()} token after the document")
        if kind is TokenType.EOF:
            self._stop_parsing()
            return True
        self.mode = InsertionMode.IN_BODY
        return False

    def _after_after_frameset_mode(self, token: Token) -> bool:
        if token.type is TokenType.COMMENT:
            self._insert_comment(token, self.document)
            return True
        raise UnsupportedMarkup("content after a frameset is not supported")