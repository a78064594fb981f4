"""Composable field mappers.

A mapper receives the mutable write payload and either returns normally or
raises FieldMapperError. Mappers never see typed FieldValues.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from vent.core.errors import FieldMapperError

if TYPE_CHECKING:
    from vent.auth.types import CredentialGenerator

logger = logging.getLogger(__name__)

# Mapper signature: (data) -> None, raising FieldMapperError on failure
FieldMapper = Callable[[dict[str, Any]], None]
TransformFn = Callable[[Any], Any]


def chain_field_mappers(*mappers: FieldMapper) -> FieldMapper:
    """Compose mappers into one that runs them left to right.

    The chain works on a copy of the payload. The caller's dict is only
    replaced once every mapper succeeded, so a failing stage leaves it
    exactly as it was and later stages never run.
    """

    def mapper(data: dict[str, Any]) -> None:
        working = dict(data)
        for m in mappers:
            m(working)
        data.clear()
        data.update(working)

    return mapper


def map_field(source: str, target: str, transform: TransformFn) -> FieldMapper:
    """Read ``source``, transform it and write the result to ``target``.

    ``source`` is removed when it differs from ``target``. No-op when
    ``source`` is absent. Exceptions raised by ``transform`` become a
    FieldMapperError.
    """

    def mapper(data: dict[str, Any]) -> None:
        if source not in data:
            return
        try:
            result = transform(data[source])
        except FieldMapperError:
            raise
        except Exception as e:
            raise FieldMapperError("map_field", [source], target, type(e).__name__) from e
        if source != target:
            del data[source]
        data[target] = result

    return mapper


def transform_field(name: str, transform: TransformFn) -> FieldMapper:
    """Transform a field's value in place. No-op when absent."""
    return map_field(name, name, transform)


def rename_field(source: str, target: str) -> FieldMapper:
    """Move a value to another key unchanged. No-op when absent."""
    return map_field(source, target, lambda value: value)


def set_default(name: str, value: Any) -> FieldMapper:
    """Set ``name`` to ``value`` only if it is not already present."""

    def mapper(data: dict[str, Any]) -> None:
        data.setdefault(name, value)

    return mapper


def remove_fields(*names: str) -> FieldMapper:
    """Remove the given fields, ignoring ones that are absent."""

    def mapper(data: dict[str, Any]) -> None:
        for name in names:
            data.pop(name, None)

    return mapper


def compute_field(
    inputs: list[str],
    output: str,
    compute: Callable[[dict[str, Any]], Any],
) -> FieldMapper:
    """Compute ``output`` from several input fields.

    No-op unless every input is present. Inputs other than ``output`` are
    removed after a successful compute.
    """

    def mapper(data: dict[str, Any]) -> None:
        if any(name not in data for name in inputs):
            return
        values = {name: data[name] for name in inputs}
        try:
            result = compute(values)
        except Exception as e:
            raise FieldMapperError("compute_field", inputs, output, type(e).__name__) from e
        for name in inputs:
            if name != output:
                del data[name]
        data[output] = result

    return mapper


def hash_password(
    source: str,
    target: str,
    generator: CredentialGenerator,
) -> FieldMapper:
    """Replace a plain-text password field with its hash.

    An empty password removes ``source`` and writes nothing, so edit forms
    can leave the password blank to keep the current one.
    """

    def mapper(data: dict[str, Any]) -> None:
        if source not in data:
            return
        password = data[source]
        if not isinstance(password, str):
            raise FieldMapperError(
                "hash_password", [source], target,
                f"expected string, got {type(password).__name__}",
            )
        if password == "":
            del data[source]
            return
        try:
            hashed = generator.generate(password)
        except Exception as e:
            # The generator's message may echo its input; report the type only
            logger.warning("Password hashing failed for field '%s'", source)
            raise FieldMapperError("hash_password", [source], target, type(e).__name__) from e
        del data[source]
        data[target] = hashed

    return mapper
