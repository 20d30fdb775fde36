"""Token counting with :mod:`tiktoken`.

Useful for checking that a prompt fits a model's context window before
sending it::

    encoding = Tokenizer().for_model("gpt-3.5-turbo")
    encoding.num_tokens("Hello, world!")
"""

from __future__ import annotations

import tiktoken

from gptwire.exceptions import UnknownEncodingError, UnknownModelError


class Tokenizer:
    """Look up :class:`Encoding` objects by model or encoding name."""

    def for_model(self, model: str) -> Encoding:
        try:
            encoding = tiktoken.encoding_for_model(model)
        except KeyError as exc:
            raise UnknownModelError(
                f"Invalid model name or not recognized by tiktoken: {model!r}"
            ) from exc
        return Encoding(encoding.name)

    def get(self, encoding_name: str) -> Encoding:
        try:
            encoding = tiktoken.get_encoding(encoding_name)
        except ValueError as exc:
            raise UnknownEncodingError(
                f"Invalid encoding name or not recognized by tiktoken: {encoding_name!r}"
            ) from exc
        return Encoding(encoding.name)


class Encoding:
    """A named tiktoken encoding.

    Only the name is stored; tiktoken caches the underlying encoder itself.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Encoding):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"<Encoding {self.name}>"

    def encode(self, text: str) -> list[int]:
        return self._encoder().encode(text)

    tokenize = encode

    def decode(self, tokens: list[int]) -> str:
        return self._encoder().decode(tokens)

    def num_tokens(self, text: str) -> int:
        return len(self.encode(text))

    def _encoder(self) -> tiktoken.Encoding:
        return tiktoken.get_encoding(self.name)
