"""
Evernote REST — Thrift-Generated Store Clients
================================================

What:  Describes and decodes operations of Thrift-generated clients such as
       the Evernote SDK's ``NoteStore.Client`` and ``UserStore.Client``.
Why:   Generated clients keep parameter names in their signatures, but the
       declared parameter types only exist in the generated ``<method>_args``
       classes, as ``thrift_spec`` tuples:

           thrift_spec = (
               None,
               (1, TType.STRING, 'authenticationToken', None, None, ),
               (2, TType.STRING, 'guid', None, None, ),
               (3, TType.BOOL, 'withContent', None, None, ),
           )

How:   Each spec entry becomes a TypeTag (LIST → OrderedSequenceOf,
       SET → SetOf, MAP → MapOf, STRUCT → Scalar(struct class), primitives →
       Scalar(python type)). ``authenticationToken`` is never read from the
       request: ThriftStoreClient carries the token and the invoker inserts
       it at its declared position.
"""

import inspect
import sys
from typing import Annotated, Any, Dict, List, Optional

from annotated_types import Interval
from thrift.Thrift import TType

from evernote_rest.dispatch.locator import declared_parameters
from evernote_rest.dispatch.types import (
    MapOf,
    MethodDescriptor,
    OrderedSequenceOf,
    ParameterSpec,
    Scalar,
    SetOf,
    TypeTag,
)
from evernote_rest.exceptions import ParameterNameResolutionError

AUTHENTICATION_TOKEN = "authenticationToken"

_INTEGER_BITS = {TType.BYTE: 8, TType.I16: 16, TType.I32: 32, TType.I64: 64}
_INTEGER_RANGES = {
    ttype: (-(2 ** (bits - 1)), 2 ** (bits - 1) - 1) for ttype, bits in _INTEGER_BITS.items()
}
_INTEGERS = tuple(_INTEGER_BITS)

# Integer parameters and fields must fit their wire width.
INTEGER_TYPES = {
    ttype: Annotated[int, Interval(ge=low, le=high)]
    for ttype, (low, high) in _INTEGER_RANGES.items()
}

_PRIMITIVES = {
    TType.BOOL: bool,
    **INTEGER_TYPES,
    TType.DOUBLE: float,
    TType.STRING: str,
}
_CONTAINERS = {TType.LIST: list, TType.SET: set, TType.MAP: dict}


class ThriftStoreClient:
    """
    Concrete backing instance for a Thrift store: the generated client plus
    the authentication token injected into every call.
    """

    def __init__(self, client: Any, token: Optional[str]):
        self.client = client
        self.token = token

    @property
    def operations_class(self) -> type:
        return type(self.client)

    def __repr__(self) -> str:
        return f"ThriftStoreClient({type(self.client).__module__}.{type(self.client).__name__})"


def is_thrift_client(cls: type) -> bool:
    """True for generated ``Client`` classes (subclasses of their module's ``Iface``)."""
    module = sys.modules.get(cls.__module__)
    iface = getattr(module, "Iface", None)
    return isinstance(iface, type) and cls is not iface and issubclass(cls, iface)


def thrift_client_name(client_class: type) -> str:
    """``NoteStore.Client`` rather than the ambiguous ``Client``."""
    module_name = client_class.__module__.rsplit('.', 1)[-1]
    return f"{module_name}.{client_class.__name__}"


def is_thrift_struct(declared: Any) -> bool:
    return isinstance(declared, type) and isinstance(getattr(declared, "thrift_spec", None), tuple)


def _element_type(ttype: int, type_args: Any) -> Any:
    if ttype == TType.STRUCT:
        return type_args[0]
    if ttype in _CONTAINERS:
        return _CONTAINERS[ttype]
    return _PRIMITIVES.get(ttype, Any)


def thrift_type_tag(ttype: int, type_args: Any) -> TypeTag:
    """Map one ``thrift_spec`` entry's (ttype, type_args) pair to a TypeTag."""
    if ttype == TType.LIST:
        return OrderedSequenceOf(_element_type(type_args[0], type_args[1]))
    if ttype == TType.SET:
        return SetOf(_element_type(type_args[0], type_args[1]))
    if ttype == TType.MAP:
        return MapOf(dict)
    if ttype == TType.STRUCT:
        return Scalar(type_args[0])
    return Scalar(_PRIMITIVES.get(ttype, Any))


def _spec_fields(spec: tuple) -> Dict[str, tuple]:
    return {entry[2]: entry for entry in spec if entry}


def describe_thrift_operation(client_class: type, name: str) -> MethodDescriptor:
    """
    Build the MethodDescriptor of one generated client operation.

    Raises:
        ParameterNameResolutionError: the module has no ``<name>_args``
            class with a ``thrift_spec``.
    """
    module = sys.modules.get(client_class.__module__)
    args_class = getattr(module, f"{name}_args", None)
    spec = getattr(args_class, "thrift_spec", None)
    if spec is None:
        raise ParameterNameResolutionError(name, f"No generated {name}_args.thrift_spec found.")

    fields = _spec_fields(spec)
    specs: List[ParameterSpec] = []
    token_index: Optional[int] = None
    for index, parameter in enumerate(declared_parameters(client_class, name)):
        if parameter.name == AUTHENTICATION_TOKEN:
            token_index = index
            continue
        entry = fields.get(parameter.name)
        tag = thrift_type_tag(entry[1], entry[3]) if entry else Scalar(Any)
        specs.append(ParameterSpec(name=parameter.name, tag=tag))

    def invoker(store_client: ThriftStoreClient, args):
        call_args = list(args)
        if token_index is not None:
            call_args.insert(token_index, store_client.token)
        return getattr(store_client.client, name)(*call_args)

    return MethodDescriptor(
        name=name,
        owner=thrift_client_name(client_class),
        parameters=tuple(specs),
        invoker=invoker,
    )


def thrift_operation_names(client_class: type) -> List[str]:
    names = []
    for name, _ in inspect.getmembers(client_class, inspect.isfunction):
        if name.startswith(("_", "send_", "recv_")):
            continue
        names.append(name)
    return names


# ── Struct decoding ───────────────────────────────────────────────────────


def _require(value: Any, expected: Any, label: str) -> None:
    if not isinstance(value, expected) or (expected is not bool and isinstance(value, bool)):
        raise TypeError(f"Expected {label}, got {type(value).__name__}: {value!r}")


def _require_integer(ttype: int, value: Any) -> int:
    _require(value, int, "an integer")
    low, high = _INTEGER_RANGES[ttype]
    if not low <= value <= high:
        raise ValueError(f"Expected an integer between {low} and {high}, got {value}")
    return value


def _decode_map_key(ttype: int, key: str) -> Any:
    # JSON object keys are always strings.
    if ttype in _INTEGERS:
        try:
            number = int(key)
        except ValueError as exc:
            raise TypeError(f"Expected integer map key, got {key!r}") from exc
        return _require_integer(ttype, number)
    return decode_thrift_value(ttype, None, key)


def decode_thrift_value(ttype: int, type_args: Any, value: Any) -> Any:
    """Decode a JSON value for one Thrift field type."""
    if value is None:
        return None
    if ttype == TType.STRUCT:
        return decode_thrift_struct(type_args[0], value)
    if ttype in (TType.LIST, TType.SET):
        _require(value, list, "a JSON array")
        items = [decode_thrift_value(type_args[0], type_args[1], item) for item in value]
        return items if ttype == TType.LIST else set(items)
    if ttype == TType.MAP:
        _require(value, dict, "a JSON object")
        key_type, key_args, value_type, value_args = type_args[:4]
        return {
            _decode_map_key(key_type, key): decode_thrift_value(value_type, value_args, item)
            for key, item in value.items()
        }
    if ttype == TType.BOOL:
        _require(value, bool, "a boolean")
    elif ttype in _INTEGERS:
        _require_integer(ttype, value)
    elif ttype == TType.DOUBLE:
        _require(value, (int, float), "a number")
        return float(value)
    elif ttype == TType.STRING:
        _require(value, str, "a string")
    return value


def decode_thrift_struct(struct_class: type, value: Any) -> Any:
    """
    Build a Thrift struct from a JSON object, field by field.

    Keys that are not fields of the struct are ignored; absent fields keep
    the struct's own default.
    """
    _require(value, dict, f"a JSON object for {struct_class.__name__}")
    kwargs = {}
    for name, entry in _spec_fields(struct_class.thrift_spec).items():
        if name in value:
            kwargs[name] = decode_thrift_value(entry[1], entry[3], value[name])
    return struct_class(**kwargs)
