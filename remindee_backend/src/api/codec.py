"""
JSON codec for the two persisted blobs.

- situations blob: JSON array of Situation records
- past situations blob: JSON array of TemplateEntry records

Instants ('datetime' and 'lastUsed') are written as UTC ISO-8601 strings with
millisecond precision and parsed back into aware datetimes. Validation is
strict: a missing field or a wrong type fails the whole blob with ParseError.
"""
from __future__ import annotations

from typing import List, Sequence, Union

from pydantic import TypeAdapter, ValidationError

from .errors import ParseError
from .models import Situation, TemplateEntry

_SITUATIONS = TypeAdapter(List[Situation])
_TEMPLATES = TypeAdapter(List[TemplateEntry])

RawJSON = Union[str, bytes]


def _parse(adapter: TypeAdapter, raw: RawJSON, what: str) -> list:
    try:
        return adapter.validate_json(raw, strict=True)
    except ValidationError as e:
        raise ParseError(
            f"Stored {what} do not match the expected shape ({e.error_count()} error(s))",
            detail=e.errors(include_url=False, include_context=False),
        ) from e


# PUBLIC_INTERFACE
def parse_situations(raw: RawJSON) -> List[Situation]:
    """
    Parse the situations blob. Raises ParseError on malformed JSON, shape
    mismatch, or two situations sharing an id.
    """
    situations = _parse(_SITUATIONS, raw, "situations")
    seen = set()
    for s in situations:
        if s.id in seen:
            raise ParseError(f"Stored situations contain duplicate id {s.id}", detail={"situationId": s.id})
        seen.add(s.id)
    return situations


# PUBLIC_INTERFACE
def dump_situations(situations: Sequence[Situation]) -> str:
    """Serialize situations with camelCase keys and ISO-8601 instants."""
    return _SITUATIONS.dump_json(list(situations), by_alias=True).decode("utf-8")


# PUBLIC_INTERFACE
def parse_templates(raw: RawJSON) -> List[TemplateEntry]:
    """Parse the past situations blob. Raises ParseError on malformed JSON or shape mismatch."""
    return _parse(_TEMPLATES, raw, "past situations")


# PUBLIC_INTERFACE
def dump_templates(entries: Sequence[TemplateEntry]) -> str:
    return _TEMPLATES.dump_json(list(entries), by_alias=True).decode("utf-8")
