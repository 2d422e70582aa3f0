"""Build a DOM tree from HTML tokens using the WHATWG tree construction rules."""

__version__ = "0.1.0"
__all__ = ["builder", "dom", "modes_body", "modes_head", "parser", "stacks"]