"""Shared error taxonomy for scn-workbench."""

from __future__ import annotations

from typing import Any, Mapping, TypeVar


def _normalize_context_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return normalize_context(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_context_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def normalize_context(context: Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-friendly copy of an error context mapping."""
    return {key: _normalize_context_value(val) for key, val in context.items()}


class SCNError(Exception):
    """Base error type for typed failure handling."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.context = normalize_context(context or {})
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.error_type, "message": str(self), "context": self.context}


class NotReadyError(SCNError):
    """Operation invoked before initialization completed or after teardown."""


class BusyError(SCNError):
    """A run was requested while another job is still running."""


class InvalidInputError(SCNError):
    """The file-list payload could not be parsed or validated."""


class AnalyzerError(SCNError):
    """Failure raised inside the isolated analysis context."""


class InitializationError(SCNError):
    """The isolated context or the analyzer failed to initialize."""


class ConfigurationError(SCNError):
    """Failure due to invalid configuration or option data."""


class AnalysisCancelled(SCNError):
    """The job was cancelled before it completed."""


T = TypeVar("T", bound=SCNError)


_ERROR_TYPES: dict[str, type[SCNError]] = {
    cls.__name__: cls
    for cls in (
        NotReadyError,
        BusyError,
        InvalidInputError,
        AnalyzerError,
        InitializationError,
        ConfigurationError,
        AnalysisCancelled,
    )
}


def wrap_error(
    error_cls: type[T],
    message: str,
    *,
    context: Mapping[str, Any] | None = None,
    cause: Exception | None = None,
) -> T:
    """Create a typed SCNError with optional context and cause."""
    return error_cls(message, context=context, cause=cause)


def error_to_payload(error: SCNError) -> dict[str, Any]:
    """Convert an SCNError to a boundary/log payload."""
    return {
        "error_type": error.error_type,
        "error": str(error),
        "error_context": error.context,
    }


def error_from_payload(
    error_type: str,
    message: str,
    context: Mapping[str, Any] | None = None,
) -> SCNError:
    """Rebuild a typed error from its serialized form.

    Unknown error types (plain exceptions raised by the analyzer) are surfaced
    as AnalyzerError, keeping the original type name in the context.
    """
    error_cls = _ERROR_TYPES.get(error_type)
    if error_cls is None:
        merged = dict(context or {})
        merged.setdefault("original_type", error_type)
        return AnalyzerError(message, context=merged)
    return error_cls(message, context=context)
