import pytest

from vlhtml.builder import (
    InsertionMode,
    Token,
    TokenAttribute,
    TokenizerState,
    TokenType,
    UnsupportedMarkup,
)
from vlhtml.dom import Comment, Element, Text, format_tree
from vlhtml.modes_head import HeadModesMixin


def feed(builder, token):
    """Run one token through the head modes; return the mode left unhandled, if any."""
    handlers = builder._head_mode_handlers()
    while True:
        mode = builder.mode
        if builder.replacement_mode is not None:
            mode, builder.replacement_mode = builder.replacement_mode, None
        handler = handlers.get(mode)
        if handler is None:
            return mode
        if handler(token):
            return None


def feed_all(builder, tokens):
    return [feed(builder, token) for token in tokens]


def start(name, **kwargs):
    return Token(TokenType.START, name=name, **kwargs)


def end(name):
    return Token(TokenType.END, name=name)


def names(builder):
    return [node.name for node in builder.open_elements]


def test_start_html_creates_root_element():
    builder = HeadModesMixin()
    feed(builder, start("html"))
    assert builder.mode is InsertionMode.BEFORE_HEAD
    assert names(builder) == ["html"]
    assert builder.document.first is builder.open_elements[0]


def test_non_head_start_tag_creates_implied_structure():
    builder = HeadModesMixin()
    leftover = feed(builder, start("p"))
    assert leftover is InsertionMode.IN_BODY
    assert builder.mode is InsertionMode.IN_BODY
    assert names(builder) == ["html", "body"]
    assert builder.head_pointer.name == "head"
    assert format_tree(builder.document) == "#document\n  html\n    head\n    body"


def test_doctype_is_recorded_not_appended():
    builder = HeadModesMixin()
    feed(builder, Token(TokenType.DOCTYPE, name="html"))
    assert builder.document.doctype.name == "html"
    assert builder.document.first is None
    assert builder.mode is InsertionMode.BEFORE_HTML


def test_comment_before_html_goes_to_document():
    builder = HeadModesMixin()
    feed(builder, Token(TokenType.COMMENT, data="hello"))
    child = builder.document.first
    assert isinstance(child, Comment)
    assert child.data == "hello"
    assert builder.mode is InsertionMode.INITIAL


def test_leading_whitespace_is_ignored():
    builder = HeadModesMixin()
    feed(builder, Token(TokenType.CHARACTER, data=" "))
    assert builder.mode is InsertionMode.INITIAL
    assert builder.document.first is None


def test_unexpected_end_tag_before_html_is_ignored():
    builder = HeadModesMixin()
    feed_all(builder, [Token(TokenType.DOCTYPE, name="html"), end("div")])
    assert builder.document.first is None
    assert builder.mode is InsertionMode.BEFORE_HTML


def test_title_switches_tokenizer_to_rcdata():
    states = []
    builder = HeadModesMixin(states.append)
    feed_all(builder, [start("html"), start("head"), start("title")])
    assert states == [TokenizerState.RCDATA]
    assert builder.mode is InsertionMode.TEXT
    assert builder.original_mode is InsertionMode.IN_HEAD
    assert names(builder) == ["html", "head", "title"]


@pytest.mark.parametrize(
    "tag, state",
    [
        ("style", TokenizerState.RAWTEXT),
        ("noframes", TokenizerState.RAWTEXT),
        ("script", TokenizerState.SCRIPT_DATA),
    ],
)
def test_raw_text_elements_set_tokenizer_state(tag, state):
    states = []
    builder = HeadModesMixin(states.append)
    feed_all(builder, [start("head"), start(tag)])
    assert states == [state]
    assert builder.mode is InsertionMode.TEXT
    assert builder.open_elements.current().name == tag
    assert builder.open_elements.current().parent is builder.head_pointer


def test_meta_keeps_attributes_and_is_popped():
    builder = HeadModesMixin()
    meta = start("meta", attributes=[TokenAttribute("charset", "utf-8")])
    feed_all(builder, [start("head"), meta])
    assert names(builder) == ["html", "head"]
    element = builder.head_pointer.first
    assert isinstance(element, Element)
    assert [(a.name, a.value) for a in element.attributes] == [("charset", "utf-8")]


def test_noscript_without_scripting_uses_noscript_mode():
    builder = HeadModesMixin()
    feed_all(builder, [start("head"), start("noscript")])
    assert builder.mode is InsertionMode.IN_HEAD_NOSCRIPT
    feed(builder, start("link"))
    noscript = builder.open_elements.current()
    assert noscript.name == "noscript"
    assert noscript.first.name == "link"
    feed(builder, end("noscript"))
    assert builder.mode is InsertionMode.IN_HEAD
    assert names(builder) == ["html", "head"]


def test_template_in_head_is_unsupported():
    builder = HeadModesMixin()
    feed(builder, start("head"))
    with pytest.raises(UnsupportedMarkup):
        feed(builder, start("template"))


def test_whitespace_in_head_becomes_text():
    builder = HeadModesMixin()
    feed_all(builder, [start("head"), Token(TokenType.CHARACTER, data="\n")])
    text = builder.head_pointer.first
    assert isinstance(text, Text)
    assert text.data == "\n"


def test_end_head_moves_to_after_head():
    builder = HeadModesMixin()
    feed_all(builder, [start("head"), end("head")])
    assert builder.mode is InsertionMode.AFTER_HEAD
    assert names(builder) == ["html"]


def test_head_element_after_head_reopens_head():
    builder = HeadModesMixin()
    feed_all(builder, [start("head"), end("head"), start("meta")])
    assert builder.will_remove_head is True
    assert builder.head_pointer.first.name == "meta"
    assert names(builder) == ["html", "head"]


def test_frameset_after_head():
    builder = HeadModesMixin()
    feed_all(builder, [start("head"), end("head"), start("frameset")])
    assert builder.mode is InsertionMode.IN_FRAMESET
    assert builder.open_elements.current().name == "frameset"


def test_html_start_in_before_head_defers_to_body_rules():
    builder = HeadModesMixin()
    results = feed_all(builder, [start("html"), start("html")])
    assert results == [None, InsertionMode.IN_BODY]
    assert builder.mode is InsertionMode.BEFORE_HEAD


def test_body_start_after_head_enters_body():
    builder = HeadModesMixin()
    feed_all(builder, [start("head"), end("head"), start("body")])
    assert builder.mode is InsertionMode.IN_BODY
    assert names(builder) == ["html", "body"]