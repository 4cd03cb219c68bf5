"""
Evernote REST — Custom Exception Hierarchy
============================================

What:  Application-specific exceptions for every way a dispatch can fail.
How:   Each exception carries a human-readable message, the optional causing
       error and a context dict. Global exception handlers (registered in
       main.py) turn them into structured JSON error responses.
Who:   Raised by the dispatcher and the connection layer; caught by handlers.

Exception Hierarchy:
    EvernoteRestError (base)
    ├── MethodNotFoundError            → 404 Not Found
    ├── ParameterNameResolutionError   → 500 Internal Server Error
    ├── DeserializationError           → 400 Bad Request
    ├── InvocationError                → 502 Bad Gateway
    ├── MissingAccessTokenError        → 401 Unauthorized
    └── StoreConnectionError           → 502 Bad Gateway

Dispatch is all-or-nothing: a request either returns the operation's result
or exactly one of these errors.
"""

from typing import Any, Dict, Optional


class EvernoteRestError(Exception):
    """
    Base exception for all Evernote REST errors.

    Attributes:
        message:  Description safe to return in an API response
        cause:    The underlying exception, when there is one
        context:  Extra debug info (parameter names, JSON fragments, ...)
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(self.message)
        if cause is not None:
            self.__cause__ = cause


class MethodNotFoundError(EvernoteRestError):
    """
    Raised when the requested operation does not exist on the concrete
    operations class.

    Example:
        POST /userStore/doesNotExist
        → "Cannot find methodName=[doesNotExist] on [UserStoreClient]."
    """

    status_code = 404
    error_code = "method_not_found"

    def __init__(self, method_name: str, target_type_name: str):
        message = f"Cannot find methodName=[{method_name}] on [{target_type_name}]."
        super().__init__(
            message=message,
            context={"method_name": method_name, "target_type": target_type_name},
        )
        self.method_name = method_name
        self.target_type_name = target_type_name


class ParameterNameResolutionError(EvernoteRestError):
    """
    Raised when parameter names cannot be recovered for an operation.

    When:  The operation is implemented in C (no inspectable signature), takes
           variadic ``*args``/``**kwargs``, or is a Thrift method without its
           generated ``<method>_args`` spec.
    HTTP:  500, this is a server configuration problem, not a client error.
    """

    status_code = 500
    error_code = "configuration_error"

    def __init__(
        self,
        method_name: str,
        reason: str = "",
        cause: Optional[BaseException] = None,
    ):
        message = f"Cannot find parameter names for method=[{method_name}]."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message=message, cause=cause, context={"method_name": method_name})
        self.method_name = method_name


class DeserializationError(EvernoteRestError):
    """
    Raised when one named JSON field cannot be decoded into its parameter type.

    The offending parameter name and the JSON fragment are both reported so
    the client knows exactly which field to fix.
    """

    status_code = 400
    error_code = "deserialization_error"

    def __init__(self, parameter_name: str, fragment: str, cause: Optional[BaseException] = None):
        message = (
            f"Cannot parse part of the json for parameter=[{parameter_name}]. json=[{fragment}]"
        )
        super().__init__(
            message=message,
            cause=cause,
            context={"parameter": parameter_name, "json": fragment},
        )
        self.parameter_name = parameter_name
        self.fragment = fragment


class InvocationError(EvernoteRestError):
    """
    Raised when the underlying store operation itself fails.

    The original exception is attached as ``cause`` and its message is kept
    verbatim; Evernote's EDAM exceptions carry their error code as fields,
    which are copied into ``context``.
    """

    status_code = 502
    error_code = "invocation_error"

    def __init__(self, method_name: str, cause: BaseException):
        detail = str(cause) or repr(cause)
        message = f"Invocation of method=[{method_name}] failed: {type(cause).__name__}: {detail}"
        context: Dict[str, Any] = {
            "method_name": method_name,
            "cause_type": type(cause).__name__,
        }
        for attr in ("errorCode", "parameter", "message", "identifier", "key"):
            value = getattr(cause, attr, None)
            if isinstance(value, (str, int)):
                context[attr] = value
        super().__init__(message=message, cause=cause, context=context)
        self.method_name = method_name


class MissingAccessTokenError(EvernoteRestError):
    """
    Raised when no access token is available for the request.

    When:  No ``evernote-rest-accesstoken`` header and the configuration does
           not allow falling back to the configured token.
    """

    status_code = 401
    error_code = "missing_access_token"

    def __init__(self, message: str = "No Evernote access token was supplied for this request."):
        super().__init__(message=message)


class StoreConnectionError(EvernoteRestError):
    """Raised when a NoteStore/UserStore client cannot be built."""

    status_code = 502
    error_code = "store_connection_error"

    def __init__(
        self,
        message: str = "Could not connect to the Evernote service.",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, cause=cause, context=context)
