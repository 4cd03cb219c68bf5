# Dispatch package init
"""
Evernote REST — Dynamic Dispatch
==================================

What:  Resolves (operation target, method name, JSON object) into a call.

Module Inventory:
    - types.py:      TypeTags, ParameterSpec, MethodDescriptor, type resolver
    - locator.py:    unwrap to the concrete instance, signature introspection
    - thrift.py:     thrift_spec-based descriptors and struct decoding
    - binder.py:     JSON object → positional arguments
    - registry.py:   precomputed descriptors per concrete class
    - dispatcher.py: the end-to-end invoke()
"""

from evernote_rest.dispatch.binder import bind
from evernote_rest.dispatch.dispatcher import Dispatcher
from evernote_rest.dispatch.registry import OperationRegistry
from evernote_rest.dispatch.types import (
    MapOf,
    MethodDescriptor,
    OrderedSequenceOf,
    Scalar,
    SetOf,
    resolve_parameter_types,
    resolve_type_tag,
)

__all__ = [
    "Dispatcher",
    "OperationRegistry",
    "MethodDescriptor",
    "Scalar",
    "OrderedSequenceOf",
    "SetOf",
    "MapOf",
    "bind",
    "resolve_parameter_types",
    "resolve_type_tag",
]
