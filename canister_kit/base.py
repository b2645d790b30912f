"""Principals, tagged unions and the plain-value encoding shared by the management types."""

from __future__ import annotations

import ast
import base64
import dataclasses
import enum
import functools
import inspect
import types
import typing
import zlib
from collections.abc import Mapping
from typing import Annotated, Any, ClassVar, Union

_MAX_PRINCIPAL_LEN = 29
_CRC_LEN = 4
_NONE_TYPE = type(None)

_BUILTIN_TYPES: dict[str, Any] = {
    "int": int,
    "str": str,
    "bytes": bytes,
    "bytearray": bytearray,
    "bool": bool,
    "float": float,
    "list": list,
    "dict": dict,
    "tuple": tuple,
    "set": set,
    "frozenset": frozenset,
    "type": type,
    "object": object,
}

_QUALIFIED_TYPES: dict[str, Any] = {
    "typing.Any": Any,
    "typing.Annotated": Annotated,
    "typing.ClassVar": ClassVar,
    "typing.Union": Union,
    "typing.Optional": typing.Optional,
    "typing.List": typing.List,
    "typing.Dict": typing.Dict,
    "typing.Tuple": typing.Tuple,
}


@dataclasses.dataclass(frozen=True, order=True)
class Principal:
    """An Internet Computer principal: up to 29 raw bytes with a checksummed text form."""

    raw: bytes = b""

    def __post_init__(self) -> None:
        raw = self.raw
        if isinstance(raw, (bytearray, memoryview)):
            raw = bytes(raw)
            object.__setattr__(self, "raw", raw)
        elif not isinstance(raw, bytes):
            raise TypeError(f"principal bytes must be bytes, not {type(raw).__name__}")
        if len(raw) > _MAX_PRINCIPAL_LEN:
            raise ValueError(
                f"principal is {len(raw)} bytes long, at most {_MAX_PRINCIPAL_LEN} are allowed"
            )

    @classmethod
    def from_text(cls, text: str) -> Principal:
        """Parse the dashed base32 text form, checking its checksum and layout."""
        if not isinstance(text, str):
            raise TypeError(f"principal text must be str, not {type(text).__name__}")
        lowered = text.lower()
        compact = lowered.replace("-", "")
        try:
            decoded = base64.b32decode(compact.upper() + "=" * (-len(compact) % 8))
        except ValueError as exc:
            raise ValueError(f"invalid principal text {text!r}: {exc}") from exc
        if len(decoded) < _CRC_LEN:
            raise ValueError(f"invalid principal text {text!r}: text is too short")
        checksum, raw = decoded[:_CRC_LEN], decoded[_CRC_LEN:]
        principal = cls(raw)
        if checksum != zlib.crc32(raw).to_bytes(_CRC_LEN, "big"):
            raise ValueError(f"invalid principal text {text!r}: checksum mismatch")
        if principal.to_text() != lowered:
            raise ValueError(f"invalid principal text {text!r}: not in canonical form")
        return principal

    def to_text(self) -> str:
        """The canonical text form: lower-case base32 in dash-separated groups of five."""
        data = zlib.crc32(self.raw).to_bytes(_CRC_LEN, "big") + self.raw
        encoded = base64.b32encode(data).decode("ascii").rstrip("=").lower()
        return "-".join(encoded[i : i + 5] for i in range(0, len(encoded), 5))

    def __str__(self) -> str:
        return self.to_text()


def _freeze(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, Mapping):
        return frozenset((key, _freeze(item)) for key, item in value.items())
    if isinstance(value, (set, frozenset)):
        return frozenset(_freeze(item) for item in value)
    return value


@dataclasses.dataclass(frozen=True)
class Variant:
    """A tagged union value.

    Subclasses list their cases in ``_variants``, mapping each serialized tag to the
    type of its payload, or to ``None`` for a case without payload.
    """

    tag: str
    value: Any = None

    _variants: ClassVar[dict[str, Any]] = {}

    def __post_init__(self) -> None:
        variants = type(self)._variants
        if self.tag not in variants:
            raise ValueError(f"unknown {type(self).__name__} variant {self.tag!r}")
        if variants[self.tag] is None and self.value is not None:
            raise ValueError(
                f"variant {self.tag!r} of {type(self).__name__} carries no value"
            )

    def _key(self) -> tuple:
        rank = list(type(self)._variants).index(self.tag)
        return (rank,) if self.value is None else (rank, self.value)

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._key() < other._key()

    def __le__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._key() <= other._key()

    def __gt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._key() > other._key()

    def __ge__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._key() >= other._key()

    def __hash__(self) -> int:
        return hash((type(self), self.tag, _freeze(self.value)))

    def to_value(self) -> Any:
        """A case without payload becomes its tag; otherwise ``{tag: payload}``."""
        if type(self)._variants[self.tag] is None:
            return self.tag
        return {self.tag: to_value(self.value)}

    @classmethod
    def from_value(cls, value: Any) -> Variant:
        """Build a variant from a bare tag or a single-entry ``{tag: payload}`` mapping."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            if value not in cls._variants:
                raise ValueError(f"unknown {cls.__name__} variant {value!r}")
            if cls._variants[value] is not None:
                raise ValueError(f"variant {value!r} of {cls.__name__} needs a value")
            return cls(value)
        if isinstance(value, Mapping) and len(value) == 1:
            ((tag, payload),) = value.items()
            if tag not in cls._variants:
                raise ValueError(f"unknown {cls.__name__} variant {tag!r}")
            payload_type = cls._variants[tag]
            if payload_type is None:
                if payload is not None:
                    raise ValueError(f"variant {tag!r} of {cls.__name__} carries no value")
                return cls(tag)
            return cls(tag, from_value(payload_type, payload))
        raise TypeError(f"cannot read a {cls.__name__} from {value!r}")


def to_value(obj: Any) -> Any:
    """Turn a management type into plain Python values (dicts, lists, str, int, bytes)."""
    if obj is None:
        return None
    if isinstance(obj, enum.Enum):
        return obj.value
    if isinstance(obj, (bool, str, int, float)):
        return obj
    if isinstance(obj, Principal):
        return obj.to_text()
    if isinstance(obj, Variant):
        return obj.to_value()
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return bytes(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_value(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, Mapping):
        return {key: to_value(item) for key, item in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_value(item) for item in obj]
    raise TypeError(f"cannot convert {type(obj).__name__} to a plain value")


def _dotted_name(node: ast.AST) -> str | None:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        base = _dotted_name(node.value)
        return f"{base}.{node.attr}" if base is not None else None
    return None


def _resolve_node(node: ast.AST, namespace: Mapping[str, Any]) -> Any:
    if isinstance(node, ast.Constant):
        if node.value is None or node.value is Ellipsis:
            return node.value
        if isinstance(node.value, str):
            return _resolve_annotation(node.value, namespace)
        raise TypeError(f"unsupported annotation constant {node.value!r}")
    if isinstance(node, ast.Name):
        if node.id in namespace:
            return namespace[node.id]
        if node.id in _BUILTIN_TYPES:
            return _BUILTIN_TYPES[node.id]
        raise NameError(f"cannot resolve name {node.id!r} in an annotation")
    if isinstance(node, ast.Attribute):
        dotted = _dotted_name(node)
        if dotted is not None and dotted in _QUALIFIED_TYPES:
            return _QUALIFIED_TYPES[dotted]
        raise NameError(f"cannot resolve name {dotted!r} in an annotation")
    if isinstance(node, ast.Subscript):
        base = _resolve_node(node.value, namespace)
        index = node.slice
        if isinstance(index, ast.Tuple):
            args = tuple(_resolve_node(item, namespace) for item in index.elts)
        else:
            args = _resolve_node(index, namespace)
        return base[args]
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        return Union[_resolve_node(node.left, namespace), _resolve_node(node.right, namespace)]
    if isinstance(node, ast.List):
        return [_resolve_node(item, namespace) for item in node.elts]
    raise TypeError(f"unsupported annotation {ast.dump(node)}")


def _resolve_annotation(annotation: Any, namespace: Mapping[str, Any]) -> Any:
    if not isinstance(annotation, str):
        return annotation
    return _resolve_node(ast.parse(annotation, mode="eval").body, namespace)


@functools.lru_cache(maxsize=None)
def _module_namespace(module: types.ModuleType) -> dict[str, Any]:
    return dict(inspect.getmembers(module))


@functools.lru_cache(maxsize=None)
def _hints(tp: type) -> dict[str, Any]:
    """Resolved field annotations of a class and its bases, keeping ``Annotated`` extras."""
    hints: dict[str, Any] = {}
    for klass in reversed(tp.__mro__):
        annotations = klass.__dict__.get("__annotations__", {})
        if not annotations:
            continue
        module = inspect.getmodule(klass)
        namespace = _module_namespace(module) if module is not None else {}
        for name, annotation in annotations.items():
            hints[name] = _resolve_annotation(annotation, namespace)
    return hints


def _is_union(tp: Any) -> bool:
    origin = typing.get_origin(tp)
    return origin is Union or origin is types.UnionType


def _is_optional(tp: Any) -> bool:
    return _is_union(tp) and _NONE_TYPE in typing.get_args(tp)


def _from_union(tp: Any, value: Any) -> Any:
    args = typing.get_args(tp)
    if value is None:
        if _NONE_TYPE in args:
            return None
        raise TypeError(f"None is not a valid {tp}")
    errors = []
    for arg in args:
        if arg is _NONE_TYPE:
            continue
        try:
            return from_value(arg, value)
        except (TypeError, ValueError) as exc:
            errors.append(str(exc))
    raise TypeError(f"cannot read {tp} from {value!r}: {'; '.join(errors)}")


def _from_dataclass(tp: type, value: Any) -> Any:
    if isinstance(value, tp):
        return value
    if not isinstance(value, Mapping):
        raise TypeError(f"cannot read a {tp.__name__} from {value!r}")
    hints = _hints(tp)
    kwargs = {}
    for f in dataclasses.fields(tp):
        if not f.init:
            continue
        hint = hints.get(f.name, Any)
        if f.name in value:
            kwargs[f.name] = from_value(hint, value[f.name])
        elif f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING:
            continue
        elif _is_optional(hint):
            kwargs[f.name] = None
        else:
            raise ValueError(f"missing field {f.name!r} for {tp.__name__}")
    return tp(**kwargs)


def from_value(tp: Any, value: Any) -> Any:
    """Build an instance of ``tp`` from plain values produced by :func:`to_value`."""
    if tp is Any:
        return value
    if tp is None or tp is _NONE_TYPE:
        if value is not None:
            raise TypeError(f"expected None, got {value!r}")
        return None
    if _is_union(tp):
        return _from_union(tp, value)
    origin = typing.get_origin(tp)
    if origin is Annotated:
        return from_value(typing.get_args(tp)[0], value)
    if origin is not None:
        args = typing.get_args(tp)
        if origin is list:
            if not isinstance(value, (list, tuple)):
                raise TypeError(f"expected a list, got {value!r}")
            item_type = args[0] if args else Any
            return [from_value(item_type, item) for item in value]
        if origin is tuple:
            if not isinstance(value, (list, tuple)):
                raise TypeError(f"expected a tuple, got {value!r}")
            if len(args) == 2 and args[1] is Ellipsis:
                return tuple(from_value(args[0], item) for item in value)
            if args and len(args) != len(value):
                raise ValueError(f"expected {len(args)} items, got {len(value)}")
            return tuple(from_value(arg, item) for arg, item in zip(args, value))
        if origin is dict:
            if not isinstance(value, Mapping):
                raise TypeError(f"expected a mapping, got {value!r}")
            key_type, item_type = args if args else (Any, Any)
            return {
                from_value(key_type, key): from_value(item_type, item)
                for key, item in value.items()
            }
        raise TypeError(f"unsupported type {tp}")
    if not isinstance(tp, type):
        raise TypeError(f"unsupported type {tp!r}")
    if issubclass(tp, Principal):
        if isinstance(value, Principal):
            return value
        if isinstance(value, str):
            return tp.from_text(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return tp(bytes(value))
        raise TypeError(f"cannot read a principal from {value!r}")
    if issubclass(tp, Variant):
        return tp.from_value(value)
    if issubclass(tp, enum.Enum):
        return value if isinstance(value, tp) else tp(value)
    if tp is bool:
        if not isinstance(value, bool):
            raise TypeError(f"expected a bool, got {value!r}")
        return value
    if tp is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"expected an integer, got {value!r}")
        return value
    if tp is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"expected a number, got {value!r}")
        return float(value)
    if tp is str:
        if not isinstance(value, str):
            raise TypeError(f"expected a string, got {value!r}")
        return value
    if tp is bytes:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        if isinstance(value, (list, tuple)):
            return bytes(value)
        raise TypeError(f"expected bytes, got {value!r}")
    if dataclasses.is_dataclass(tp):
        return _from_dataclass(tp, value)
    raise TypeError(f"unsupported type {tp.__name__}")