"""Typed, read-only views over decoded JSON response documents.

Every API response type is a :class:`PayloadView` subclass that declares its
shape as data rather than parsing code::

    class Post(PayloadView):
        created_at = field(("meta", "birth", "created"))
        text = field()
        author = field(wrapper=User)
        co_author = optional_field(wrapper=User)

Each declaration binds an attribute name to a *key path* (defaulting to the
attribute name itself) and an optional *wrapper* type.  Accessing a required
field whose path cannot be resolved raises
:class:`~gptwire.exceptions.MissingFieldError` naming the exact key that was
missing.  Optional fields only tolerate the absence of their *last* key.

The document handed to a view is frozen on construction: mappings become
:class:`types.MappingProxyType` instances and lists become tuples, so no
accessor can be used to mutate what :meth:`PayloadView.original_payload`
returns.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Optional, Sequence, TypeVar, Union

from gptwire.exceptions import MissingFieldError, ParseError

KeyPath = Union[str, Sequence[str]]
Wrapper = Callable[[Any], Any]

V = TypeVar("V", bound="PayloadView")


def freeze(value: Any) -> Any:
    """Return a deeply read-only copy of a decoded JSON value.

    Mappings are copied into :class:`types.MappingProxyType` instances and
    lists (or tuples) into tuples, recursively.  Scalars are returned as-is.
    """
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of :func:`freeze`: rebuild plain ``dict`` / ``list`` values."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(item) for item in value]
    return value


def _normalize_path(path: KeyPath) -> tuple[str, ...]:
    if isinstance(path, str):
        return (path,)
    return tuple(path)


class Field:
    """Descriptor for a required response field.

    Created through :func:`field`.  The attribute name is learned in
    :meth:`__set_name__`, which also fills in the default key path.
    """

    optional = False

    def __init__(self, path: Optional[KeyPath] = None, wrapper: Optional[Wrapper] = None) -> None:
        self.name: Optional[str] = None
        self.path: Optional[tuple[str, ...]] = (
            _normalize_path(path) if path is not None else None
        )
        self.wrapper = wrapper

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        if self.path is None:
            self.path = (name,)

    def __get__(self, instance: Optional[PayloadView], owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return self.resolve(instance)

    def __set__(self, instance: PayloadView, value: Any) -> None:
        raise AttributeError(f"Response field {self.name!r} is read-only")

    def resolve(self, view: PayloadView) -> Any:
        assert self.path is not None, "Field used outside of a class body"
        return view._field(self.path, wrapper=self.wrapper)

    def __repr__(self) -> str:
        kind = "optional_field" if self.optional else "field"
        return f"<{kind} {self.name} path={list(self.path or ())!r}>"


class OptionalField(Field):
    """Descriptor for a field whose last key may be absent."""

    optional = True

    def resolve(self, view: PayloadView) -> Any:
        assert self.path is not None, "Field used outside of a class body"
        return view._optional_field(self.path, wrapper=self.wrapper)


def field(path: Optional[KeyPath] = None, wrapper: Optional[Wrapper] = None) -> Any:
    """Declare a required field on a :class:`PayloadView` subclass.

    Args:
        path: A key or sequence of keys to resolve against the document.
            Defaults to the attribute name.
        wrapper: Optional callable (usually another ``PayloadView``
            subclass) applied to the resolved value.  Array values are
            wrapped element-wise into a tuple.
    """
    return Field(path, wrapper)


def optional_field(path: Optional[KeyPath] = None, wrapper: Optional[Wrapper] = None) -> Any:
    """Declare an optional field on a :class:`PayloadView` subclass.

    Every key but the last must still be present; a missing last key makes
    the accessor return ``None`` instead of raising.
    """
    return OptionalField(path, wrapper)


class PayloadView:
    """Immutable typed projection over a decoded JSON document.

    Args:
        document: The decoded JSON value.  It is deep-frozen on the way in.
    """

    __slots__ = ("_document",)

    _field_registry: Mapping[str, Field] = MappingProxyType({})

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        # Inherited declarations come first; a redeclared name keeps its slot.
        registry = dict(cls._field_registry)
        for name, attr in vars(cls).items():
            if isinstance(attr, Field):
                registry[name] = attr
        cls._field_registry = MappingProxyType(registry)

    def __init__(self, document: Any) -> None:
        self._document = freeze(document)

    @classmethod
    def from_json(cls: type[V], raw_json: Union[str, bytes]) -> V:
        """Parse *raw_json* and wrap the result in an instance of *cls*.

        Raises:
            ParseError: If *raw_json* is not valid JSON.
        """
        try:
            data = json.loads(raw_json)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(f"Response body is not valid JSON: {exc}") from exc
        return cls(data)

    @classmethod
    def declared_fields(cls) -> tuple[str, ...]:
        """Names of all declared fields, in declaration order."""
        return tuple(cls._field_registry)

    def original_payload(self) -> Any:
        """Return the frozen document this view projects."""
        return self._document

    # ------------------------------------------------------------------ #
    # Resolution
    # ------------------------------------------------------------------ #

    def _field(self, key_path: Sequence[str], wrapper: Optional[Wrapper] = None) -> Any:
        value = self._document
        for key in key_path:
            if not isinstance(value, Mapping) or key not in value:
                raise MissingFieldError(key_path, key, self._document)
            value = value[key]
        return _wrap(value, wrapper)

    def _optional_field(self, key_path: Sequence[str], wrapper: Optional[Wrapper] = None) -> Any:
        *head, tail = key_path
        parent = self._field(head)
        if not isinstance(parent, Mapping) or tail not in parent:
            return None
        return _wrap(parent[tail], wrapper)

    # ------------------------------------------------------------------ #
    # Value semantics
    # ------------------------------------------------------------------ #

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PayloadView):
            return NotImplemented
        return type(self) is type(other) and self._document == other._document

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        parts = []
        for name, declaration in self._field_registry.items():
            try:
                value = repr(declaration.resolve(self))
            except MissingFieldError:
                value = "<missing>"
            parts.append(f"{name}={value}")
        label = type(self).__qualname__
        if not parts:
            return f"<{label}>"
        return f"<{label} {' '.join(parts)}>"


def _wrap(value: Any, wrapper: Optional[Wrapper]) -> Any:
    if wrapper is None or value is None:
        return value
    if isinstance(value, tuple):
        return tuple(wrapper(item) for item in value)
    return wrapper(value)
