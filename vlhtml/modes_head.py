"""Insertion modes that build the document up to the start of the body."""

from __future__ import annotations

from typing import Callable

from vlhtml.builder import (
    InsertionMode,
    Token,
    TokenizerState,
    TokenType,
    TreeBuilderBase,
    UnsupportedMarkup,
)
from vlhtml.dom import DocumentType

_OUTER_END_TAGS = frozenset({"html", "head", "body", "br"})
_HEAD_ALLOWED_END_TAGS = frozenset({"body", "html", "br"})
_VOID_HEAD_ELEMENTS = frozenset({"base", "basefont", "bgsound", "link"})
_NOSCRIPT_HEAD_ELEMENTS = frozenset(
    {"basefont", "bgsound", "link", "meta", "noframes", "style"}
)
_AFTER_HEAD_REOPEN = frozenset(
    {
        "base", "basefont", "bgsound", "link", "meta", "noframes",
        "script", "template", "title", "style",
    }
)

Handler = Callable[[Token], bool]


class HeadModesMixin(TreeBuilderBase):
    """Rules for the initial, before-html, head and after-head insertion modes.

    Each handler takes the current token and returns True when the token has
    been consumed, or False when it must be processed again.
    """

    def _head_mode_handlers(self) -> dict[InsertionMode, Handler]:
        """Map each insertion mode handled here to its bound handler."""
        return {
            InsertionMode.INITIAL: self._initial_mode,
            InsertionMode.BEFORE_HTML: self._before_html_mode,
            InsertionMode.BEFORE_HEAD: self._before_head_mode,
            InsertionMode.IN_HEAD: self._in_head_mode,
            InsertionMode.IN_HEAD_NOSCRIPT: self._in_head_noscript_mode,
            InsertionMode.AFTER_HEAD: self._after_head_mode,
        }

    def _initial_mode(self, token: Token) -> bool:
        if self._is_whitespace(token):
            return True
        if token.type is TokenType.COMMENT:
            self._insert_comment(token, self.document)
            return True
        if token.type is TokenType.DOCTYPE:
            doctype = DocumentType(self.document, token.name)
            self.document.set_doctype(doctype)
            self.mode = InsertionMode.BEFORE_HTML
            return True
        self.mode = InsertionMode.BEFORE_HTML
        return False

    def _before_html_mode(self, token: Token) -> bool:
        kind, name = token.type, token.name
        if kind is TokenType.DOCTYPE:
            return True
        if kind is TokenType.COMMENT:
            self._insert_comment(token, self.document)
            return True
        if self._is_whitespace(token):
            return True
        if kind is TokenType.START and name == "html":
            element = self._create_element(name, token)
            self.document.append(element)
            self.open_elements.push(element)
            self.mode = InsertionMode.BEFORE_HEAD
            return True
        if kind is TokenType.END and name not in _OUTER_END_TAGS:
            return True
        element = self._create_element("html", None)
        self.document.append(element)
        self.open_elements.push(element)
        self.mode = InsertionMode.BEFORE_HEAD
        return False

    def _before_head_mode(self, token: Token) -> bool:
        kind, name = token.type, token.name
        if self._is_whitespace(token):
            return True
        if kind is TokenType.COMMENT:
            self._insert_comment(token)
            return True
        if kind is TokenType.DOCTYPE:
            return True
        if kind is TokenType.START and name == "html":
            return self._process_using(InsertionMode.IN_BODY)
        if kind is TokenType.START and name == "head":
            self.mode = InsertionMode.IN_HEAD
            self.head_pointer = self._insert_html_element(name, token)
            return True
        if kind is TokenType.END and name not in _OUTER_END_TAGS:
            return True
        self.mode = InsertionMode.IN_HEAD
        self.head_pointer = self._insert_html_element("head", None)
        return False

    def _enter_text_mode(self, name: str, token: Token, state: TokenizerState) -> None:
        self._insert_html_element(name, token)
        self._set_tokenizer_state(state)
        self.original_mode = self.mode
        self.mode = InsertionMode.TEXT

    def _in_head_mode(self, token: Token) -> bool:
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
            return self._process_using(InsertionMode.IN_BODY)
        if is_start and (name in _VOID_HEAD_ELEMENTS or name == "meta"):
            self._insert_html_element(name, token)
            self.open_elements.pop()
            return True
        if is_start and name == "title":
            self._enter_text_mode(name, token, TokenizerState.RCDATA)
            return True
        if is_start and (
            (name == "noscript" and self.scripting_enabled)
            or name in ("noframes", "style")
        ):
            self._enter_text_mode(name, token, TokenizerState.RAWTEXT)
            return True
        if is_start and name == "noscript":
            self._insert_html_element(name, token)
            self.mode = InsertionMode.IN_HEAD_NOSCRIPT
            return True
        if is_start and name == "script":
            parent, child = self._insertion_location()
            element = self._create_element(name, token)
            parent.insert_before(element, child)
            self.open_elements.push(element)
            self._set_tokenizer_state(TokenizerState.SCRIPT_DATA)
            self.original_mode = self.mode
            self.mode = InsertionMode.TEXT
            return True
        if is_end and name == "head":
            self.open_elements.pop()
            self.mode = InsertionMode.AFTER_HEAD
            return True
        if (is_start or is_end) and name == "template":
            raise UnsupportedMarkup("template elements are not supported")
        if (is_start and name == "head") or (
            is_end and name not in _HEAD_ALLOWED_END_TAGS
        ):
            return True
        self.open_elements.pop()
        self.mode = InsertionMode.AFTER_HEAD
        return False

    def _in_head_noscript_mode(self, token: Token) -> bool:
        kind, name = token.type, token.name
        is_start = kind is TokenType.START
        is_end = kind is TokenType.END

        if kind is TokenType.DOCTYPE:
            return True
        if is_start and name == "html":
            return self._process_using(InsertionMode.IN_BODY)
        if is_end and name == "noscript":
            self.open_elements.pop()
            self.mode = InsertionMode.IN_HEAD
            return True
        if (
            self._is_whitespace(token)
            or kind is TokenType.COMMENT
            or (is_start and name in _NOSCRIPT_HEAD_ELEMENTS)
        ):
            return self._process_using(InsertionMode.IN_HEAD)
        if (is_start and name in ("head", "noscript")) or (is_end and name != "br"):
            return True
        self.open_elements.pop()
        self.mode = InsertionMode.IN_HEAD
        return False

    def _after_head_mode(self, token: Token) -> bool:
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
            return self._process_using(InsertionMode.IN_BODY)
        if is_start and name == "body":
            self._insert_html_element(name, token)
            self.mode = InsertionMode.IN_BODY
            return True
        if is_start and name == "frameset":
            self._insert_html_element(name, token)
            self.mode = InsertionMode.IN_FRAMESET
            return True
        if is_start and name in _AFTER_HEAD_REOPEN:
            if self.head_pointer is None:
                raise UnsupportedMarkup("no head element to reopen")
            self.open_elements.push(self.head_pointer)
            self.will_remove_head = True
            return self._process_using(InsertionMode.IN_HEAD)
        if is_end and name == "template":
            return self._process_using(InsertionMode.IN_HEAD)
        if (is_start and name == "head") or (
            is_end and name not in _HEAD_ALLOWED_END_TAGS
        ):
            return True
        self._insert_html_element("body", None)
        self.mode = InsertionMode.IN_BODY
        return False