from __future__ import annotations

from typing import Dict, List, Sequence

from .models import Situation, TemplateEntry
from .repositories import sort_descending_by_time

_SITUATION_FIELDS = set(Situation.model_fields)


# PUBLIC_INTERFACE
def synthesize(situations: Sequence[Situation]) -> Dict[str, TemplateEntry]:
    """
    Fold situations into one template per title.

    Situations are visited latest first. The first one seen for a title is
    kept as that title's template (`last_used` is its instant); later, older
    ones only bump `count`. The mapping preserves first-seen order, i.e. most
    recently used titles come first. Pure: the same input always yields the
    same output.
    """
    entries: Dict[str, TemplateEntry] = {}
    for situation in sort_descending_by_time(situations):
        existing = entries.get(situation.title)
        if existing is None:
            entries[situation.title] = TemplateEntry(
                **situation.model_dump(include=_SITUATION_FIELDS),
                count=1,
                last_used=situation.scheduled_at,
            )
        else:
            entries[situation.title] = existing.model_copy(update={"count": existing.count + 1})
    return entries


# PUBLIC_INTERFACE
def template_list(situations: Sequence[Situation]) -> List[TemplateEntry]:
    """Templates as an ordered sequence, most recently used first."""
    return list(synthesize(situations).values())


# PUBLIC_INTERFACE
def quick_picks(situations: Sequence[Situation], limit: int = 4) -> List[TemplateEntry]:
    """The first `limit` templates, offered as one-tap shortcuts when creating a situation."""
    return template_list(situations)[: max(limit, 0)]
