# vlhtml

`vlhtml` builds a DOM tree from a stream of HTML tokens. It follows the tree
construction stage of the WHATWG HTML parsing algorithm: insertion modes, the
stack of open elements, the list of active formatting elements and the
adoption agency algorithm.

## Installing

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Using it

Build a list of `Token` objects (from `vlhtml.builder`) and hand it to
`parse_tokens`, which returns a `Document`:

```python
from vlhtml.builder import Token, TokenType
from vlhtml.parser import parse_tokens
from vlhtml.dom import format_tree

tokens = [
    Token(TokenType.START, name="p"),
    Token(TokenType.CHARACTER, data="Hello"),
    Token(TokenType.END, name="p"),
    Token(TokenType.EOF),
]

document = parse_tokens(tokens)
print(format_tree(document))
```

which prints

```
#document
  html
    head
    body
      p
        #text - Hello
```

Missing `html`, `head` and `body` elements are created as the algorithm
requires, and misnested formatting elements such as `<b><p></b>` are repaired.

A `Token` has a `type` (`TokenType.DOCTYPE`, `START`, `END`, `COMMENT`,
`CHARACTER` or `EOF`), a `name`, `data`, `public_id`, `system_id`, a list of
`TokenAttribute(name, value)` and a `self_closing` flag. Parsing stops at the
first `EOF` token that ends the document.

If the tokenizer must change state (for `title`, `textarea`, `style` or
`script` contents), pass a callback to `HTMLParser`. It is called with a
`TokenizerState` each time the tree builder asks for a switch:

```python
from vlhtml.parser import HTMLParser

parser = HTMLParser(on_tokenizer_state=lambda state: print("switch to", state))
document = parser.run(tokens)
```

`HTMLParser.run` starts from a fresh state and a new `Document` each time it
is called.

## The tree

`Document`, `Element`, `Text`, `Comment`, `DocumentType` and `Attr` live in
`vlhtml.dom`. Every `Node` has `insert_before`, `append`, `remove` and
`children`; invalid tree operations raise `DomError`. An `Element` keeps its
attributes in `attributes`, its upper-cased name in `tag_name` and the HTML
namespace in `namespace`. `Text.append_data` extends a text node. Text and
comment data are kept to at most 64 characters. `format_tree` renders a node
and its descendants as an indented outline.

The stack of open elements (`OpenElements`), the list of active formatting
elements (`ActiveFormatting`), `Scope` and `is_special` are in
`vlhtml.stacks`.

## What it does not do

There is no tokenizer: turning raw HTML text into tokens is left to the
caller, and the package has no command-line program. Markup whose handling is
not supported (templates, `math`, `svg`, table captions, `input`, `iframe`,
and some table, column group and frameset cases, among others) raises
`vlhtml.builder.UnsupportedMarkup`. Parse errors that the algorithm recovers
from are handled silently and not reported.