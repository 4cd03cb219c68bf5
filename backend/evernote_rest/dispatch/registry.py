"""
Evernote REST — Operation Registry
====================================

What:  Precomputed MethodDescriptors for every operation of each concrete
       operations class, keyed by class and then by method name.
How:   The first time a class is seen (or when it is registered at startup)
       every public operation is described once: Thrift-generated clients
       through their thrift_spec, plain Python classes through their
       annotations. Operations whose parameter names cannot be recovered are
       remembered with their error and raise it when requested.

Lookup:
    locate(target, "getNote")
        → operations class, from the handle when it declares one, otherwise
          from the unwrapped instance (the Thrift client class for
          ThriftStoreClient)
        → unwrap target to its concrete instance
        → descriptor, or MethodNotFoundError(method name, class name)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from evernote_rest.dispatch.locator import (
    declared_operations_class,
    describe_operation,
    operation_names,
    unwrap,
)
from evernote_rest.dispatch.thrift import (
    ThriftStoreClient,
    describe_thrift_operation,
    is_thrift_client,
    thrift_client_name,
    thrift_operation_names,
)
from evernote_rest.dispatch.types import MethodDescriptor
from evernote_rest.exceptions import MethodNotFoundError, ParameterNameResolutionError

logger = logging.getLogger(__name__)


@dataclass
class OperationSet:
    owner: str
    descriptors: Dict[str, MethodDescriptor] = field(default_factory=dict)
    unresolved: Dict[str, ParameterNameResolutionError] = field(default_factory=dict)

    def get(self, method_name: str) -> MethodDescriptor:
        if method_name in self.descriptors:
            return self.descriptors[method_name]
        if method_name in self.unresolved:
            raise self.unresolved[method_name]
        raise MethodNotFoundError(method_name, self.owner)


def describe_class(operations_class: type) -> OperationSet:
    """Describe every public operation of ``operations_class``."""
    if is_thrift_client(operations_class):
        names, describe = thrift_operation_names(operations_class), describe_thrift_operation
        owner = thrift_client_name(operations_class)
    else:
        names, describe = operation_names(operations_class), describe_operation
        owner = operations_class.__name__

    operations = OperationSet(owner=owner)
    for name in names:
        try:
            operations.descriptors[name] = describe(operations_class, name)
        except ParameterNameResolutionError as exc:
            logger.warning("Operation %s.%s is not dispatchable: %s",
                           owner, name, exc.message)
            operations.unresolved[name] = exc
    return operations


def operations_class_of(instance: Any) -> type:
    if isinstance(instance, ThriftStoreClient):
        return instance.operations_class
    return type(instance)


class OperationRegistry:
    """
    Maps concrete operations classes to their described operations.

    Descriptors are immutable once built, so the registry can be shared by
    concurrent requests; two requests racing on an unseen class both build
    the same OperationSet and one of them wins.
    """

    def __init__(self):
        self._operations: Dict[type, OperationSet] = {}

    def register(self, operations_class: type) -> OperationSet:
        operations = self._operations.get(operations_class)
        if operations is None:
            operations = describe_class(operations_class)
            self._operations[operations_class] = operations
            logger.info(
                "Registered %d operations for %s",
                len(operations.descriptors), operations.owner,
            )
        return operations

    def lookup(self, operations_class: type, method_name: str) -> MethodDescriptor:
        return self.register(operations_class).get(method_name)

    def locate(self, target: Any, method_name: str) -> Tuple[Any, MethodDescriptor]:
        """
        Find ``method_name`` on the concrete implementation behind ``target``.

        Returns:
            (concrete instance to invoke on, descriptor)

        Raises:
            MethodNotFoundError: no such operation on the concrete class.
            ParameterNameResolutionError: the operation exists but its
                parameter names are unavailable.
        """
        operations_class = declared_operations_class(target)
        if operations_class is not None:
            # Resolve before unwrapping; building a store client may go remote.
            descriptor = self.lookup(operations_class, method_name)
            return unwrap(target), descriptor

        instance = unwrap(target)
        return instance, self.lookup(operations_class_of(instance), method_name)

    def stats(self) -> Dict[str, int]:
        return {
            operations.owner: len(operations.descriptors)
            for operations in self._operations.values()
        }
