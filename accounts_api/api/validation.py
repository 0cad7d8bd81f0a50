"""
Request validation error translation.

FastAPI checks path, query and body parameters against the declared schemas
and reports every violation at once. This module turns that report into the
ordered ``{path, message}`` list carried by a VALIDATION ``ApiError``.
"""

from typing import Any, Iterable, Sequence, Union

from fastapi.exceptions import RequestValidationError

from accounts_api.core.errors import ApiError, FieldError

# FastAPI parameter locations -> request part names used in error paths
LOCATION_PREFIXES = {
    "path": "params",
    "query": "query",
    "body": "body",
    "header": "headers",
    "cookie": "cookies",
}

ID_FORMAT_MESSAGE = "Invalid MongoDB ID format"
EMAIL_FORMAT_MESSAGE = "Invalid email format"


def field_path(loc: Sequence[Union[str, int]]) -> str:
    """Render a location tuple such as ``("path", "id")`` as ``params.id``."""
    if not loc:
        return "body"
    head, *rest = loc
    prefix = LOCATION_PREFIXES.get(str(head), str(head))
    return ".".join([prefix, *(str(part) for part in rest)])


def field_message(error: dict[str, Any]) -> str:
    """
    Human-readable message for one violation.

    Length bounds name the field ("Name must be at least 2 characters"), the
    identifier and email checks have fixed texts, and anything else keeps
    pydantic's own message.
    """
    loc = tuple(error.get("loc", ()))
    kind = error.get("type")
    ctx = error.get("ctx") or {}
    field = str(loc[-1]) if len(loc) > 1 else ""
    label = field.capitalize()

    if kind == "string_pattern_mismatch" and loc[:1] == ("path",):
        return ID_FORMAT_MESSAGE
    if kind == "string_too_short" and label:
        return f"{label} must be at least {ctx['min_length']} characters"
    if kind == "string_too_long" and label:
        return f"{label} cannot exceed {ctx['max_length']} characters"
    if kind == "value_error" and field == "email":
        return EMAIL_FORMAT_MESSAGE
    return error.get("msg", "Invalid value")


def field_errors(errors: Iterable[dict[str, Any]]) -> list[FieldError]:
    """Convert raw validation errors, preserving their order."""
    result: list[FieldError] = []
    for error in errors:
        if error.get("type") == "json_invalid":
            # loc carries a character offset into the body, not a field
            path = "body"
        else:
            path = field_path(error.get("loc", ()))
        result.append(FieldError(path=path, message=field_message(error)))
    return result


def to_api_error(exc: RequestValidationError) -> ApiError:
    return ApiError.validation(field_errors(exc.errors()))
