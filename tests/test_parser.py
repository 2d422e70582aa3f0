import pytest

from vlhtml.builder import Token, TokenizerState, TokenType, UnsupportedMarkup
from vlhtml.dom import Comment, Document, Element, Text, format_tree
from vlhtml.parser import HTMLParser, parse_tokens


def start(name, **kwargs):
    return Token(TokenType.START, name=name, **kwargs)


def end(name):
    return Token(TokenType.END, name=name)


def chars(data):
    return Token(TokenType.CHARACTER, data=data)


def eof():
    return Token(TokenType.EOF)


def names(node):
    return [child.name for child in node.children()]


def test_implied_html_head_and_body():
    document = parse_tokens([start("p"), chars("One"), eof()])
    assert isinstance(document, Document)
    assert format_tree(document).splitlines() == [
        "#document",
        "  html",
        "    head",
        "    body",
        "      p",
        "        #text - One",
    ]


def test_adjacent_characters_are_merged():
    document = parse_tokens([start("p"), chars("a"), chars("b"), eof()])
    html = document.first
    body = html.last
    p = body.first
    texts = list(p.children())
    assert len(texts) == 1
    assert isinstance(texts[0], Text)
    assert texts[0].data == "ab"


def test_comment_before_html_goes_to_document():
    document = parse_tokens([Token(TokenType.COMMENT, data="x"), eof()])
    children = list(document.children())
    assert isinstance(children[0], Comment)
    assert children[0].data == "x"
    assert children[1].name == "html"


def test_doctype_is_recorded():
    document = parse_tokens([Token(TokenType.DOCTYPE, name="html"), eof()])
    assert document.doctype is not None
    assert document.doctype.name == "html"


def test_title_switches_tokenizer_to_rcdata():
    states = []
    parser = HTMLParser(states.append)
    document = parser.run(
        [
            start("html"),
            start("head"),
            start("title"),
            chars("T"),
            end("title"),
            end("head"),
            start("body"),
            eof(),
        ]
    )
    assert states == [TokenizerState.RCDATA]
    html = document.first
    assert names(html) == ["head", "body"]
    title = html.first.first
    assert title.name == "title"
    assert title.first.data == "T"


def test_formatting_element_closes():
    document = parse_tokens([start("b"), chars("x"), end("b"), chars("y"), eof()])
    body = document.first.last
    children = list(body.children())
    assert children[0].name == "b"
    assert children[0].first.data == "x"
    assert isinstance(children[1], Text)
    assert children[1].data == "y"


def test_table_sections_are_implied():
    document = parse_tokens([start("table"), start("tr"), start("td"), chars("c"), eof()])
    body = document.first.last
    table = body.first
    assert table.name == "table"
    tbody = table.first
    assert tbody.name == "tbody"
    tr = tbody.first
    assert tr.name == "tr"
    td = tr.first
    assert td.name == "td"
    assert td.first.data == "c"


def test_attributes_are_copied_to_element():
    token = start("div")
    token.attributes.append(__import_attr("id", "main"))
    document = parse_tokens([token, eof()])
    div = document.first.last.first
    assert isinstance(div, Element)
    assert [(a.name, a.value) for a in div.attributes] == [("id", "main")]


def __import_attr(name, value):
    from vlhtml.builder import TokenAttribute

    return TokenAttribute(name, value)


def test_unsupported_markup_raises():
    with pytest.raises(UnsupportedMarkup):
        parse_tokens([start("svg"), eof()])


def test_tokens_after_eof_are_ignored():
    document = parse_tokens([start("p"), eof(), start("span")])
    body = document.first.last
    assert names(body) == ["p"]


def test_run_twice_gives_fresh_documents():
    parser = HTMLParser()
    first = parser.run([start("p"), eof()])
    second = parser.run([start("div"), eof()])
    assert first is not second
    assert names(first.first.last) == ["p"]
    assert names(second.first.last) == ["div"]


def test_without_eof_returns_partial_tree():
    document = parse_tokens([start("html")])
    assert names(document) == ["html"]
    assert names(document.first) == []