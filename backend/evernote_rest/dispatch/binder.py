"""
Evernote REST — Parameter Binder
==================================

What:  Turns a JSON object into the positional argument list of an operation.
How:   For each declared parameter, in order:
           field present → decode its JSON fragment with the parameter's TypeTag
           field absent  → None (no default lookup, no zero values)
           field null    → None
       Keys that match no parameter are ignored.

Decoding:
    A closed table maps each TypeTag class to a decode strategy. Python types
    are decoded with pydantic TypeAdapters in strict JSON mode, so the only
    coercions are the ones JSON itself implies (an integer is a valid float,
    an array is a valid set). Thrift structs are decoded through their
    thrift_spec.

Errors:
    A field that does not decode raises DeserializationError naming the
    parameter and carrying the JSON fragment; the decoder's error is chained.
"""

import functools
import json
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Set

from pydantic import PydanticSchemaGenerationError, TypeAdapter

from evernote_rest.dispatch.thrift import decode_thrift_struct, is_thrift_struct
from evernote_rest.dispatch.types import MapOf, OrderedSequenceOf, Scalar, SetOf, TypeTag
from evernote_rest.exceptions import DeserializationError, EvernoteRestError

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=None)
def _adapter(target_type: Any) -> TypeAdapter:
    return TypeAdapter(target_type)


def _validate(target_type: Any, fragment: str) -> Any:
    return _adapter(target_type).validate_json(fragment, strict=True)


def _decode_scalar(tag: Scalar, value: Any, fragment: str) -> Any:
    if tag.declared is Any:
        return value
    if is_thrift_struct(tag.declared):
        return decode_thrift_struct(tag.declared, value)
    return _validate(tag.declared, fragment)


def _decode_sequence(tag: OrderedSequenceOf, value: Any, fragment: str) -> Any:
    if is_thrift_struct(tag.element):
        if not isinstance(value, list):
            raise TypeError(f"Expected a JSON array, got {type(value).__name__}")
        return [decode_thrift_struct(tag.element, item) for item in value]
    return _validate(List[tag.element], fragment)


def _decode_set(tag: SetOf, value: Any, fragment: str) -> Any:
    if is_thrift_struct(tag.element):
        if not isinstance(value, list):
            raise TypeError(f"Expected a JSON array, got {type(value).__name__}")
        return {decode_thrift_struct(tag.element, item) for item in value}
    return _validate(Set[tag.element], fragment)


def _decode_map(tag: MapOf, value: Any, fragment: str) -> Any:
    return _validate(tag.raw, fragment)


_DECODERS: Dict[type, Callable[[Any, Any, str], Any]] = {
    Scalar: _decode_scalar,
    OrderedSequenceOf: _decode_sequence,
    SetOf: _decode_set,
    MapOf: _decode_map,
}


def decode_field(parameter_name: str, tag: TypeTag, value: Any) -> Any:
    """
    Decode one JSON field for ``parameter_name``.

    Raises:
        DeserializationError: the value does not fit the declared type.
        EvernoteRestError: the declared type cannot be decoded from JSON at all.
    """
    # Explicit null binds None, the same as an absent field.
    if value is None:
        return None
    fragment = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    decoder = _DECODERS[type(tag)]
    try:
        return decoder(tag, value, fragment)
    except PydanticSchemaGenerationError as exc:
        raise EvernoteRestError(
            message=f"Parameter [{parameter_name}] has a type that cannot be decoded from JSON.",
            cause=exc,
            context={"parameter": parameter_name},
        ) from exc
    except (ValueError, TypeError) as exc:
        logger.debug("Failed to decode parameter %s from %s: %s", parameter_name, fragment, exc)
        raise DeserializationError(parameter_name, fragment, cause=exc) from exc


def bind(
    parameter_names: Sequence[str],
    type_tags: Sequence[TypeTag],
    payload: Optional[Mapping[str, Any]],
) -> List[Any]:
    """
    Produce the positional arguments for one invocation.

    Args:
        parameter_names: Declared parameter names, in declaration order.
        type_tags:       One TypeTag per parameter, same order.
        payload:         The request's JSON object (None is treated as {}).

    Returns:
        A list with one entry per parameter; absent fields are None.
    """
    if len(parameter_names) != len(type_tags):
        raise ValueError(
            f"{len(parameter_names)} parameter names but {len(type_tags)} type tags"
        )
    payload = payload or {}

    args: List[Any] = []
    for name, tag in zip(parameter_names, type_tags):
        if name in payload:
            args.append(decode_field(name, tag, payload[name]))
        else:
            args.append(None)
    return args
