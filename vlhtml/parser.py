"""The HTML tree builder: drives the insertion modes over a stream of tokens."""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from vlhtml.builder import InsertionMode, Token, TokenizerState
from vlhtml.dom import Document
from vlhtml.modes_body import BodyModeMixin
from vlhtml.modes_head import HeadModesMixin

Handler = Callable[[Token], bool]


class HTMLParser(HeadModesMixin, BodyModeMixin):
    """Builds a document tree from tokens following the HTML insertion modes."""

    def __init__(
        self, on_tokenizer_state: Optional[Callable[[TokenizerState], None]] = None
    ) -> None:
        super().__init__(on_tokenizer_state)
        self._handlers: dict[InsertionMode, Handler] = {
            **self._head_mode_handlers(),
            **self._body_mode_handlers(),
        }

    def _next_mode(self) -> InsertionMode:
        """Return the mode whose rules apply to the next step, using a pending override once."""
        if self.replacement_mode is not None:
            mode = self.replacement_mode
            self.replacement_mode = None
            return mode
        return self.mode

    def _after_step(self) -> None:
        """Update the one-step flags that every token step leaves behind."""
        if self.foster_parenting:
            self.foster_parenting = False
        if self.will_use_foster_parenting:
            self.will_use_foster_parenting = False
            self.foster_parenting = True
        if (
            self.remove_head
            and self.head_pointer is not None
            and self.head_pointer in self.open_elements
        ):
            self.open_elements.remove(self.head_pointer)
        if self.will_remove_head:
            self.remove_head = True

    def run(self, tokens: Iterable[Token]) -> Document:
        """Build and return a new document from ``tokens``."""
        self.reset()
        for token in tokens:
            if self.stopped:
                break
            consumed = False
            while not consumed and not self.stopped:
                handler = self._handlers[self._next_mode()]
                consumed = handler(token)
                self._after_step()
        return self.document


def parse_tokens(tokens: Iterable[Token]) -> Document:
    """Build a document from ``tokens`` with a fresh parser."""
    return HTMLParser().run(tokens)