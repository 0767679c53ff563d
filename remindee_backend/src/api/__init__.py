"""
Remindee backend package.

Situations anchored in time, each with a checklist of todos and sub-todos,
plus the derived views built from them: the current situation, the list of
unfinished todos, per-title templates and pinned restore.

The FastAPI app lives in `src.api.main`.
"""
