import pytest

from vlhtml.dom import Document, Element, Text
from vlhtml.stacks import ActiveFormatting, OpenElements, Scope, is_special


@pytest.fixture
def doc():
    return Document()


def make_stack(doc, *names):
    stack = OpenElements()
    nodes = [Element(doc, name) for name in names]
    for node in nodes:
        stack.push(node)
    return stack, nodes


def test_is_special():
    assert is_special("div")
    assert is_special("table")
    assert not is_special("b")
    assert not is_special("span")


def test_push_pop_current(doc):
    stack, nodes = make_stack(doc, "html", "body", "div")
    assert stack.current() is nodes[2]
    assert stack.pop() is nodes[2]
    assert stack.current() is nodes[1]
    assert len(stack) == 2


def test_pop_empty_raises():
    with pytest.raises(IndexError):
        OpenElements().pop()


def test_current_empty_is_none():
    assert OpenElements().current() is None


def test_remove_and_contains(doc):
    stack, nodes = make_stack(doc, "html", "body", "div")
    stack.remove(nodes[1])
    assert list(stack) == [nodes[0], nodes[2]]
    assert nodes[1] not in stack
    stack.remove(nodes[1])
    assert len(stack) == 2


def test_insert_ignores_index_past_top(doc):
    stack, nodes = make_stack(doc, "html", "body")
    extra = Element(doc, "p")
    stack.insert(2, extra)
    assert list(stack) == nodes
    stack.insert(1, extra)
    assert list(stack) == [nodes[0], extra, nodes[1]]


def test_replace(doc):
    stack, nodes = make_stack(doc, "html", "b")
    new = Element(doc, "b")
    stack.replace(nodes[1], new)
    assert stack[1] is new


def test_contains_name_only_counts_elements(doc):
    stack, _ = make_stack(doc, "html", "body")
    text = Text(doc, "x")
    stack.push(text)
    assert stack.contains_name("body")
    assert not stack.contains_name("#text")
    assert not stack.contains_name("p")


def test_in_scope_generic(doc):
    stack, _ = make_stack(doc, "html", "body", "p", "span")
    assert stack.in_scope("p", Scope.GENERIC)
    assert not stack.in_scope("li", Scope.GENERIC)


def test_in_scope_table_boundary(doc):
    stack, _ = make_stack(doc, "html", "body", "p", "table", "tbody")
    assert not stack.in_scope("p", Scope.GENERIC)
    assert stack.in_scope("table", Scope.TABLE)


def test_in_scope_button_and_list(doc):
    stack, _ = make_stack(doc, "html", "body", "p", "button")
    assert stack.in_scope("p", Scope.GENERIC)
    assert not stack.in_scope("p", Scope.BUTTON)
    stack2, _ = make_stack(doc, "html", "body", "li", "ul")
    assert stack2.in_scope("li", Scope.GENERIC)
    assert not stack2.in_scope("li", Scope.LIST)


def test_in_scope_td_blocks_except_table_scope(doc):
    stack, _ = make_stack(doc, "html", "body", "tr", "td")
    assert not stack.in_scope("tr", Scope.GENERIC)
    assert stack.in_scope("tr", Scope.TABLE)


def test_find_last_and_first(doc):
    stack, nodes = make_stack(doc, "html", "div", "div")
    assert stack.find_last("div") is nodes[2]
    assert stack.find_first("div") is nodes[1]
    assert stack.find_last("p") is None


def test_index(doc):
    stack, nodes = make_stack(doc, "html", "body")
    assert stack.index(nodes[1]) == 1
    with pytest.raises(ValueError):
        stack.index(Element(doc, "p"))


def test_furthest_block(doc):
    stack, nodes = make_stack(doc, "html", "body", "a", "span", "div", "p")
    assert stack.furthest_block(nodes[2]) is nodes[4]
    assert stack.furthest_block(nodes[5]) is None


def test_common_ancestor(doc):
    stack, nodes = make_stack(doc, "html", "body", "a")
    assert stack.common_ancestor(nodes[2]) is nodes[1]
    with pytest.raises(ValueError):
        stack.common_ancestor(nodes[0])


def test_pop_until(doc):
    stack, nodes = make_stack(doc, "html", "body", "li", "span")
    popped = stack.pop_until("li")
    assert popped == [nodes[3], nodes[2]]
    assert stack.current() is nodes[1]


def test_pop_until_missing_leaves_stack(doc):
    stack, nodes = make_stack(doc, "html", "body")
    with pytest.raises(ValueError):
        stack.pop_until("li")
    assert list(stack) == nodes


def test_pop_including(doc):
    stack, nodes = make_stack(doc, "html", "body", "b", "i")
    assert stack.pop_including(nodes[2]) == [nodes[3], nodes[2]]
    assert list(stack) == nodes[:2]
    with pytest.raises(ValueError):
        stack.pop_including(nodes[3])


def test_clear(doc):
    stack, _ = make_stack(doc, "html", "body")
    stack.clear()
    assert len(stack) == 0


def test_formatting_push_contains_index(doc):
    fmt = ActiveFormatting()
    b = Element(doc, "b")
    fmt.push(b, "tok-b")
    assert fmt.contains(b)
    assert fmt.index(b) == 0
    assert fmt[0].token == "tok-b"
    assert not fmt[0].is_marker


def test_formatting_index_missing(doc):
    with pytest.raises(ValueError):
        ActiveFormatting().index(Element(doc, "b"))


def test_formatting_insert_and_remove(doc):
    fmt = ActiveFormatting()
    b, i, u = (Element(doc, n) for n in ("b", "i", "u"))
    fmt.push(b, None)
    fmt.push(u, None)
    fmt.insert(1, i, None)
    assert [e.node for e in fmt] == [b, i, u]
    fmt.remove(i)
    assert [e.node for e in fmt] == [b, u]
    fmt.remove(i)
    assert len(fmt) == 2


def test_formatting_replace(doc):
    fmt = ActiveFormatting()
    b, new = Element(doc, "b"), Element(doc, "b")
    fmt.push(b, None)
    fmt.replace(b, new)
    assert fmt[0].node is new
    assert not fmt.contains(b)


def test_clear_to_last_marker(doc):
    fmt = ActiveFormatting()
    b, i = Element(doc, "b"), Element(doc, "i")
    fmt.push(b, None)
    fmt.insert_marker()
    fmt.push(i, None)
    fmt.clear_to_last_marker()
    assert [e.node for e in fmt] == [b]


def test_clear_to_last_marker_without_marker_empties(doc):
    fmt = ActiveFormatting()
    fmt.push(Element(doc, "b"), None)
    fmt.clear_to_last_marker()
    assert len(fmt) == 0


def test_find_after_last_marker(doc):
    fmt = ActiveFormatting()
    a1, a2 = Element(doc, "a"), Element(doc, "a")
    fmt.push(a1, None)
    assert fmt.find_after_last_marker("a") is a1
    fmt.insert_marker()
    assert fmt.find_after_last_marker("a") is None
    fmt.push(a2, None)
    assert fmt.find_after_last_marker("a") is a2
    assert fmt.find_after_last_marker("b") is None


def test_marker_not_matched_by_contains(doc):
    fmt = ActiveFormatting()
    fmt.insert_marker()
    assert fmt[0].is_marker
    assert not fmt.contains(None)