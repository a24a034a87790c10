"""Pydantic integration: SerdeMap as a model field type.

Validation accepts a mapping, checks its keys against the strategy's wire
type and its values against ``V``, then lifts each key in order. An
existing instance of the target map type passes through untouched.
Serialization projects every key back to its wire form and emits a dict.

Dicts cannot hold duplicate keys, so this path is lossy for maps with
duplicates; :mod:`serdemap.serialization.json_codec` is the lossless one.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Any, TypeVar, get_args, get_origin

from pydantic_core import PydanticCustomError, core_schema

from serdemap.serialization.protocol import MappingSource, decode_map

if TYPE_CHECKING:
    from pydantic import GetCoreSchemaHandler
    from pydantic_core import CoreSchema
    from pydantic_core.core_schema import ValidatorFunctionWrapHandler

    from serdemap.domain.container import SerdeMap


def _key_error(message: str) -> PydanticCustomError:
    return PydanticCustomError("map_key_decode", "{message}", {"message": message})


def resolve_type_args(cls: type[SerdeMap[Any, Any]], source: Any) -> tuple[Any, Any]:
    """Return the ``(K, V)`` type arguments a field annotation binds.

    Handles ``SerdeMap[int, str]``, bare ``SerdeMap`` and generic or
    concrete subclasses such as ``IdMap[str]`` where
    ``class IdMap[V](SerdeMap[int, V])``. Unbound parameters become ``Any``.
    """
    from serdemap.domain.container import SerdeMap

    origin = get_origin(source) or source
    bound: dict[Any, Any] = dict(
        zip(getattr(origin, "__type_params__", ()), get_args(source), strict=False)
    )
    if origin is SerdeMap:
        args = get_args(source)
        return (args[0], args[1]) if len(args) == 2 else (Any, Any)

    for klass in getattr(origin, "__mro__", (cls,)):
        for base in getattr(klass, "__orig_bases__", ()):
            if get_origin(base) is SerdeMap:
                key, value = get_args(base)
                return _substitute(key, bound), _substitute(value, bound)
    return Any, Any


def _substitute(arg: Any, bound: dict[Any, Any]) -> Any:
    if isinstance(arg, TypeVar):
        return bound.get(arg, Any)
    return arg


def _lift_mapping(cls: type[SerdeMap[Any, Any]], data: dict[Any, Any]) -> SerdeMap[Any, Any]:
    return decode_map(cls, MappingSource(data), error=_key_error)


def _pass_instance(
    cls: type[SerdeMap[Any, Any]], value: Any, handler: ValidatorFunctionWrapHandler
) -> Any:
    if isinstance(value, cls):
        return value
    return handler(value)


def _project_mapping(container: SerdeMap[Any, Any]) -> dict[Any, Any]:
    strategy = container.key_strategy
    return {strategy.project(key): value for key, value in container}


def build_core_schema(
    cls: type[SerdeMap[Any, Any]], source: Any, handler: GetCoreSchemaHandler
) -> CoreSchema:
    """Build the pydantic-core schema for *cls* as annotated by *source*."""
    key_type, value_type = resolve_type_args(cls, source)
    strategy = cls.key_strategy
    wire_type = key_type if strategy.wire_type is None else strategy.wire_type

    wire_schema = handler.generate_schema(wire_type)
    value_schema = handler.generate_schema(value_type)
    mapping_schema = core_schema.dict_schema(keys_schema=wire_schema, values_schema=value_schema)

    from_mapping = core_schema.chain_schema(
        [
            mapping_schema,
            core_schema.no_info_plain_validator_function(partial(_lift_mapping, cls)),
        ]
    )
    return core_schema.json_or_python_schema(
        json_schema=from_mapping,
        python_schema=core_schema.no_info_wrap_validator_function(
            partial(_pass_instance, cls), from_mapping
        ),
        serialization=core_schema.plain_serializer_function_ser_schema(
            _project_mapping,
            info_arg=False,
            return_schema=mapping_schema,
        ),
    )
