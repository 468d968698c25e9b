"""
Sort Expression Compiler

Turns a caller-supplied sort string such as ``"budget:desc,name"`` into
an ordered list of SortKey pairs, checked against a whitelist of
sortable fields.

Format:
- Comma separated tokens, whitespace around tokens is ignored
- Each token is ``field`` or ``field:direction``
- Direction is ``asc`` or ``desc`` (any case); ``asc`` when omitted
- An empty expression means "no sort" (natural insertion order)

Repeated fields are kept as given. Earlier keys take precedence, so a
repeat can never change the resulting order - the first occurrence
of a field decides its direction.
"""

from enum import Enum
from typing import Any, Iterable, NamedTuple, Optional, Sequence, TypeVar

from pydantic.alias_generators import to_snake

from budget_ledger.errors import InvalidDirectionError, InvalidFieldError


T = TypeVar("T")

SORT_TOKEN_SEPARATOR = ","
SORT_DIRECTION_SEPARATOR = ":"


class SortDirection(str, Enum):
    """Sort direction."""
    ASC = "asc"
    DESC = "desc"


class SortKey(NamedTuple):
    """One (field, direction) pair. ``field`` is the API (camelCase) name."""
    field: str
    direction: SortDirection


def compile_sort(
    expression: Optional[str],
    allowed_fields: Iterable[str],
) -> list[SortKey]:
    """
    Compile a sort expression.

    Args:
        expression: e.g. ``"budget:asc,name"``; None or blank for no sort
        allowed_fields: sortable API field names (snake_case spellings
                        of the same fields are accepted too)

    Returns:
        SortKey list, primary key first

    Raises:
        InvalidFieldError: Field not in allowed_fields
        InvalidDirectionError: Direction present but not asc/desc
    """
    if not expression or not expression.strip():
        return []

    lookup: dict[str, str] = {}
    for name in allowed_fields:
        lookup[name] = name
        lookup[to_snake(name)] = name

    keys = []
    for token in expression.split(SORT_TOKEN_SEPARATOR):
        token = token.strip()
        if not token:
            continue

        field, separator, direction = token.partition(SORT_DIRECTION_SEPARATOR)
        field = field.strip()

        if field not in lookup:
            raise InvalidFieldError(
                f"Specified fieldName '{field}' is not sortable",
                field=field,
                allowed=", ".join(sorted(set(lookup.values()))),
            )

        if separator:
            try:
                parsed = SortDirection(direction.strip().lower())
            except ValueError:
                raise InvalidDirectionError(
                    f"Specified direction '{direction.strip()}' does not exist",
                    field=field,
                    direction=direction,
                )
        else:
            parsed = SortDirection.ASC

        keys.append(SortKey(lookup[field], parsed))

    return keys


def _sort_value(value: Any) -> tuple:
    # None sorts after present values when ascending
    return (value is None, value)


def apply_sort(items: Iterable[T], keys: Sequence[SortKey]) -> list[T]:
    """
    Stable multi-key sort of model instances.

    Keys are applied from the last to the first so the first key ends up
    primary. Items comparing equal on every key keep their input order.
    """
    result = list(items)
    for key in reversed(keys):
        attribute = to_snake(key.field)
        result.sort(
            key=lambda item: _sort_value(getattr(item, attribute)),
            reverse=key.direction == SortDirection.DESC,
        )
    return result


def format_sort(keys: Sequence[SortKey]) -> str:
    """Inverse of compile_sort, used in log lines."""
    return SORT_TOKEN_SEPARATOR.join(
        f"{key.field}{SORT_DIRECTION_SEPARATOR}{key.direction.value}"
        for key in keys
    )
