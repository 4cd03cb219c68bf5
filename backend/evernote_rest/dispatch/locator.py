"""
Evernote REST — Method Locator
================================

What:  Finds an operation by name on the *concrete* class behind an operation
       target and describes it (parameter names, TypeTags, invoker).
How:   Store handles are accessed through an interface-like wrapper; unwrap()
       recovers the concrete backing instance through its get_store_client()
       capability. Parameter names come from inspect.signature(), declared
       types from typing.get_type_hints().

Matching policy:
    Names are matched exactly (case-sensitive). Python attribute lookup yields
    a single member per name, so there is no overload resolution: whatever
    the class exposes under that name is the operation. Private names
    (leading underscore) are never operations.
"""

import inspect
import logging
import typing
from typing import Any, Dict, List, Optional, Tuple

from evernote_rest.dispatch.types import MethodDescriptor, ParameterSpec, resolve_type_tag
from evernote_rest.exceptions import ParameterNameResolutionError

logger = logging.getLogger(__name__)

_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def unwrap(target: Any) -> Any:
    """
    Return the concrete instance backing an operation target.

    Targets exposing ``get_store_client()`` are handles around the real
    client; anything else is already concrete.
    """
    get_store_client = getattr(target, "get_store_client", None)
    if callable(get_store_client):
        return get_store_client()
    return target


def declared_operations_class(target: Any) -> Optional[type]:
    """
    The concrete operations class a handle will unwrap to, when the handle
    can report it without building the backing instance.
    """
    get_store_client_class = getattr(target, "get_store_client_class", None)
    if callable(get_store_client_class):
        return get_store_client_class()
    return None


def find_operation(cls: type, name: str) -> Optional[Any]:
    """The raw class attribute for operation ``name``, or None."""
    if not name or name.startswith("_"):
        return None
    try:
        member = inspect.getattr_static(cls, name)
    except AttributeError:
        return None
    if isinstance(member, (staticmethod, classmethod)) or inspect.isroutine(member):
        return member
    return None


def operation_names(cls: type) -> List[str]:
    return [name for name in dir(cls) if find_operation(cls, name) is not None]


def declared_parameters(cls: type, name: str) -> List[inspect.Parameter]:
    """
    The request-bindable parameters of ``cls.name`` in declaration order.

    Raises:
        ParameterNameResolutionError: no signature is available, or the
            operation takes ``*args`` / ``**kwargs``.
    """
    member = find_operation(cls, name)
    callable_ = getattr(cls, name)
    try:
        signature = inspect.signature(callable_)
    except (TypeError, ValueError) as exc:
        raise ParameterNameResolutionError(
            name, "No inspectable signature is available.", cause=exc
        ) from exc

    parameters = list(signature.parameters.values())
    # Instance methods looked up on the class still list ``self``.
    bound = inspect.ismethod(callable_) or inspect.isbuiltin(callable_)
    if parameters and not bound and not isinstance(member, (staticmethod, classmethod)):
        parameters = parameters[1:]

    for parameter in parameters:
        if parameter.kind in _VARIADIC:
            raise ParameterNameResolutionError(
                name, f"Variadic parameter [{parameter.name}] has no bindable name."
            )
    return parameters


def _type_hints(cls: type, name: str) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(getattr(cls, name))
    except (NameError, TypeError) as exc:
        logger.warning(
            "Could not resolve annotations of %s.%s, binding raw JSON: %s",
            cls.__name__, name, exc,
        )
        return {}


def _make_invoker(name: str, parameters: Tuple[ParameterSpec, ...]):
    keyword_names = [p.name for p in parameters if p.keyword_only]
    positional_count = len(parameters) - len(keyword_names)

    def invoker(instance: Any, args):
        method = getattr(instance, name)
        keywords = dict(zip(keyword_names, args[positional_count:]))
        return method(*args[:positional_count], **keywords)

    return invoker


def describe_operation(cls: type, name: str) -> MethodDescriptor:
    """
    Build the MethodDescriptor for ``cls.name`` from its annotations.

    The parameter count of the descriptor equals the method's declared
    parameter count (minus ``self``/``cls``).
    """
    hints = _type_hints(cls, name)
    specs = []
    for p in declared_parameters(cls, name):
        declared = hints.get(p.name, p.annotation)
        if isinstance(declared, str):
            # unresolved forward reference
            declared = inspect.Parameter.empty
        specs.append(
            ParameterSpec(
                name=p.name,
                tag=resolve_type_tag(declared),
                keyword_only=p.kind == inspect.Parameter.KEYWORD_ONLY,
            )
        )
    specs = tuple(specs)
    return MethodDescriptor(
        name=name,
        owner=cls.__name__,
        parameters=specs,
        invoker=_make_invoker(name, specs),
    )
