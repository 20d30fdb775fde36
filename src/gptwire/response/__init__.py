"""Typed response decoding for gptwire.

:class:`PayloadView` is the base of every response schema; :mod:`gptwire.response.types`
holds the concrete per-endpoint schemas built on it.
"""

from gptwire.response.payload import (
    Field,
    OptionalField,
    PayloadView,
    field,
    freeze,
    optional_field,
    thaw,
)

__all__ = [
    "Field",
    "OptionalField",
    "PayloadView",
    "field",
    "freeze",
    "optional_field",
    "thaw",
]
