"""
Evernote REST — Type Tags & Method Descriptors
================================================

What:  The closed set of parameter shapes the dispatcher knows how to decode,
       and the descriptor that ties an operation's parameters to an invoker.
How:   resolve_type_tag() classifies one declared parameter type:

           declared type                      tag
           ─────────────────────────────────  ─────────────────────────────
           List[X], Sequence[X], Iterable[X]  OrderedSequenceOf(X)
           Set[X], FrozenSet[X], AbstractSet  SetOf(X)
           Dict[K, V], Mapping[K, V]          MapOf(dict)   (V never inspected)
           anything else                      Scalar(declared)

       A bare container with no type argument (``list``, ``List``) cannot be
       resolved to an element type and falls back to Scalar(raw declared type).
"""

import collections.abc
import inspect
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, List, Sequence, Tuple, Union


@dataclass(frozen=True)
class Scalar:
    """Decode the field directly as ``declared``."""

    declared: Any


@dataclass(frozen=True)
class OrderedSequenceOf:
    """Decode the field as a list whose items are ``element``."""

    element: Any


@dataclass(frozen=True)
class SetOf:
    """Decode the field as a set whose items are ``element``."""

    element: Any


@dataclass(frozen=True)
class MapOf:
    """Decode the field with the raw map type; value types are not inspected."""

    raw: Any = dict


TypeTag = Union[Scalar, OrderedSequenceOf, SetOf, MapOf]


@dataclass(frozen=True)
class ParameterSpec:
    name: str
    tag: TypeTag
    keyword_only: bool = False


@dataclass(frozen=True)
class MethodDescriptor:
    """
    Resolved metadata for one operation on a concrete operations class.

    Attributes:
        name:        Operation name as declared on the concrete class.
        owner:       Name of the concrete class (used in error messages).
        parameters:  Request-bound parameters in declaration order.
        invoker:     ``invoker(instance, args)`` calls the operation on a
                     concrete instance with the positional argument list
                     produced by the binder.
    """

    name: str
    owner: str
    parameters: Tuple[ParameterSpec, ...]
    invoker: Callable[[Any, Sequence[Any]], Any] = field(compare=False, repr=False)

    @property
    def parameter_names(self) -> List[str]:
        return [p.name for p in self.parameters]

    def invoke(self, instance: Any, args: Sequence[Any]) -> Any:
        return self.invoker(instance, args)


_UNTYPED = (inspect.Parameter.empty, Any, object)


def _container_kind(origin: Any) -> str:
    # Declared type must accept a list (or set) instance; list is checked first.
    if not isinstance(origin, type):
        return ""
    if issubclass(origin, collections.abc.Mapping):
        return "map"
    if issubclass(list, origin):
        return "sequence"
    if issubclass(set, origin) or issubclass(frozenset, origin):
        return "set"
    return ""


def resolve_type_tag(declared: Any) -> TypeTag:
    """
    Classify a single declared parameter type.

    Args:
        declared: The annotation (or ``inspect.Parameter.empty``).

    Returns:
        The TypeTag used by the binder to decode the matching JSON field.
    """
    if declared in _UNTYPED:
        return Scalar(Any)

    origin = typing.get_origin(declared) or declared
    kind = _container_kind(origin)

    if kind == "map":
        return MapOf(origin)

    if kind in ("sequence", "set"):
        args = typing.get_args(declared)
        if len(args) != 1 or isinstance(args[0], typing.TypeVar):
            # Unbound or erased element type, keep the raw declaration.
            return Scalar(origin)
        if kind == "sequence":
            return OrderedSequenceOf(args[0])
        return SetOf(args[0])

    return Scalar(declared)


def resolve_parameter_types(descriptor: MethodDescriptor) -> List[TypeTag]:
    """One TypeTag per declared parameter, in declaration order."""
    return [p.tag for p in descriptor.parameters]
