"""
Evernote REST — Dispatcher
============================

What:  Runs one store operation for one request.
How:   locate → resolve parameter types → bind JSON fields → invoke → result.

    ┌──────────┐   ┌──────────────┐   ┌──────────┐   ┌──────────────┐
    │  Locate  │──▶│ Resolve types│──▶│   Bind   │──▶│    Invoke    │
    │ (unwrap) │   │  (TypeTags)  │   │  (JSON)  │   │  (concrete)  │
    └──────────┘   └──────────────┘   └──────────┘   └──────────────┘

Every failure leaves as an EvernoteRestError subclass:
    MethodNotFoundError, ParameterNameResolutionError, DeserializationError
    from the first three steps; InvocationError wrapping whatever the
    underlying operation raised. One attempt, no retries, no timeout here.
"""

import logging
from typing import Any, Mapping, Optional

from evernote_rest.dispatch.binder import bind
from evernote_rest.dispatch.registry import OperationRegistry
from evernote_rest.dispatch.types import resolve_parameter_types
from evernote_rest.exceptions import EvernoteRestError, InvocationError

logger = logging.getLogger(__name__)


class Dispatcher:
    """Stateless apart from the shared, read-only operation registry."""

    def __init__(self, registry: Optional[OperationRegistry] = None):
        self.registry = registry or OperationRegistry()

    def invoke(
        self,
        target: Any,
        method_name: str,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Invoke ``method_name`` on an already-resolved operation target.

        Args:
            target:      Store handle (or concrete instance) for this request.
            method_name: Operation name, matched exactly.
            payload:     JSON object whose keys name the parameters.

        Returns:
            The operation's raw return value.

        Raises:
            EvernoteRestError: any failure, see module docstring.
        """
        instance, descriptor = self.registry.locate(target, method_name)
        type_tags = resolve_parameter_types(descriptor)
        args = bind(descriptor.parameter_names, type_tags, payload)

        logger.debug("Invoking %s.%s with %d parameters",
                     descriptor.owner, method_name, len(args))
        try:
            return descriptor.invoke(instance, args)
        except EvernoteRestError:
            raise
        except Exception as exc:
            logger.warning("%s.%s raised %s: %s",
                           descriptor.owner, method_name, type(exc).__name__, exc)
            raise InvocationError(method_name, exc) from exc
