from datetime import timedelta

from factories import HOUR, T0, make_situation, make_sub, make_todo

from src.api.aggregator import aggregate_unfinished
from src.api.ids import IdGenerator
from src.api.models import TemplateEntry
from src.api.resolver import resolve_current, resolve_current_id
from src.api.restore import restore
from src.api.templates import quick_picks, synthesize, template_list


class TestCurrentSituationResolver:
    def test_latest_started_situation_wins(self):
        situations = [
            make_situation("s1", T0 - HOUR),
            make_situation("s2", T0),
            make_situation("s3", T0 + HOUR),
        ]
        assert resolve_current_id(situations, T0) == "s2"
        assert resolve_current_id(situations, T0 + timedelta(minutes=30)) == "s2"
        assert resolve_current_id(situations, T0 + 2 * HOUR) == "s3"

    def test_none_when_nothing_started(self):
        situations = [make_situation("s1", T0 + HOUR)]
        assert resolve_current(situations, T0) is None
        assert resolve_current_id([], T0) is None

    def test_ties_broken_by_store_order(self):
        situations = [
            make_situation("a", T0),
            make_situation("b", T0),
        ]
        assert resolve_current_id(situations, T0) == "a"
        assert resolve_current_id(list(reversed(situations)), T0) == "b"

    def test_result_bounds_every_started_situation(self):
        situations = [make_situation(f"s{i}", T0 + (i - 5) * HOUR) for i in (3, 9, 1, 5, 7)]
        now = T0 + timedelta(minutes=90)
        current = resolve_current(situations, now)
        assert current.scheduled_at <= now
        assert all(current.scheduled_at >= s.scheduled_at for s in situations if s.scheduled_at <= now)

    def test_naive_now_is_treated_as_utc(self):
        situations = [make_situation("s1", T0)]
        assert resolve_current_id(situations, T0.replace(tzinfo=None)) == "s1"


class TestUnfinishedTodoAggregator:
    def test_scenario_past_situation_lists_open_todo(self):
        s1 = make_situation("s1", T0 - HOUR, todos=[make_todo("t1")])
        s2 = make_situation("s2", T0, todos=[make_todo("t2")])
        situations = [s1, s2]

        assert resolve_current_id(situations, T0) == "s2"
        items = aggregate_unfinished(situations, T0)
        assert [(i.situation_id, i.todo.id) for i in items] == [("s1", "t1")]
        assert items[0].situation_title == "s1"
        assert items[0].is_sub_todo is False

    def test_scenario_before_everything_is_empty(self):
        s1 = make_situation("s1", T0 - HOUR, todos=[make_todo("t1")])
        situations = [s1, make_situation("s2", T0)]
        assert resolve_current_id(situations, T0 - 2 * HOUR) is None
        assert aggregate_unfinished(situations, T0 - 2 * HOUR) == []

    def test_current_situation_is_never_listed(self):
        only = make_situation("s1", T0 - HOUR, todos=[make_todo("t1")])
        assert aggregate_unfinished([only], T0) == []

    def test_situation_sharing_the_current_instant_is_excluded(self):
        situations = [
            make_situation("a", T0, todos=[make_todo("ta")]),
            make_situation("b", T0, todos=[make_todo("tb")]),
        ]
        assert aggregate_unfinished(situations, T0) == []

    def test_future_situations_are_excluded(self):
        situations = [
            make_situation("future", T0 + HOUR, todos=[make_todo("tf")]),
            make_situation("now", T0),
            make_situation("past", T0 - HOUR, todos=[make_todo("tp")]),
        ]
        items = aggregate_unfinished(situations, T0)
        assert [i.situation_id for i in items] == ["past"]

    def test_sub_todos_follow_parent_and_inherit_color(self):
        parent = make_todo(
            "t1",
            color="#e3f2fd",
            subs=[make_sub("st1"), make_sub("st2", completed=True), make_sub("st3")],
        )
        situations = [
            make_situation("s2", T0),
            make_situation("s1", T0 - HOUR, todos=[parent, make_todo("t2", completed=True)]),
        ]
        items = aggregate_unfinished(situations, T0)
        assert [i.todo.id for i in items] == ["t1", "st1", "st3"]
        assert [i.is_sub_todo for i in items] == [False, True, True]
        assert all(i.background_color == "#e3f2fd" for i in items)
        assert items[1].parent_todo_id == "t1"

    def test_open_sub_todo_of_completed_parent_is_listed(self):
        parent = make_todo("t1", completed=True, subs=[make_sub("st1")])
        situations = [make_situation("s2", T0), make_situation("s1", T0 - HOUR, todos=[parent])]
        items = aggregate_unfinished(situations, T0)
        assert [(i.todo.id, i.is_sub_todo) for i in items] == [("st1", True)]

    def test_output_follows_store_order_not_time(self):
        situations = [
            make_situation("older", T0 - 3 * HOUR, todos=[make_todo("t-old")]),
            make_situation("current", T0),
            make_situation("newer", T0 - HOUR, todos=[make_todo("t-new")]),
        ]
        items = aggregate_unfinished(situations, T0)
        assert [i.todo.id for i in items] == ["t-old", "t-new"]

    def test_never_contains_current_id(self):
        situations = [make_situation(f"s{i}", T0 - i * HOUR, todos=[make_todo(f"t{i}")]) for i in range(5)]
        for minutes in range(-300, 120, 30):
            now = T0 + timedelta(minutes=minutes)
            current = resolve_current_id(situations, now)
            assert all(item.situation_id != current for item in aggregate_unfinished(situations, now))


class TestTemplateSynthesizer:
    def test_scenario_same_title_counts_and_keeps_latest(self):
        t1, t2 = T0 - HOUR, T0
        situations = [
            make_situation("s1", t1, title="Office", todos=[make_todo("old")]),
            make_situation("s2", t2, title="Office", todos=[make_todo("new")]),
        ]
        entries = synthesize(situations)
        assert list(entries) == ["Office"]
        office = entries["Office"]
        assert isinstance(office, TemplateEntry)
        assert office.last_used == t2
        assert office.count == 2
        assert office.id == "s2"
        assert [t.id for t in office.todos] == ["new"]

    def test_most_recently_used_titles_first(self):
        situations = [
            make_situation("s1", T0 - 3 * HOUR, title="Gym"),
            make_situation("s2", T0 - HOUR, title="Office"),
            make_situation("s3", T0 - 2 * HOUR, title="Gym"),
            make_situation("s4", T0 + HOUR, title="Home"),
        ]
        entries = template_list(situations)
        assert [e.title for e in entries] == ["Home", "Office", "Gym"]
        assert [e.count for e in entries] == [1, 1, 2]
        assert entries[2].id == "s3"

    def test_pure_and_idempotent(self):
        situations = [
            make_situation("s1", T0 - HOUR, title="Office"),
            make_situation("s2", T0, title="Office"),
        ]
        assert synthesize(situations) == synthesize(situations)

    def test_quick_picks_limit(self):
        situations = [make_situation(f"s{i}", T0 - i * HOUR, title=f"Place {i}") for i in range(6)]
        picks = quick_picks(situations, limit=4)
        assert [p.title for p in picks] == ["Place 0", "Place 1", "Place 2", "Place 3"]
        assert quick_picks(situations, limit=0) == []


class TestPinnedRestore:
    def _template(self):
        return make_situation(
            "s9",
            T0,
            title="Office",
            detail="Weekly sync",
            location="HQ",
            todos=[
                make_todo("t1", pinned=True, completed=True, color="#fff3e0"),
                make_todo("t2", subs=[make_sub("st1", pinned=True, completed=True), make_sub("st2")]),
                make_todo("t3", subs=[make_sub("st3")]),
            ],
        )

    def test_scenario_pinned_todos_and_parents_of_pinned_subs(self):
        restored = restore(self._template(), IdGenerator(start=100))
        assert [t.title for t in restored.todos] == ["t1", "t2"]
        assert restored.todos[0].sub_todos == []
        assert [st.title for st in restored.todos[1].sub_todos] == ["st1"]

    def test_copies_fields_and_resets_state(self):
        restored = restore(self._template(), IdGenerator(start=100))
        assert (restored.title, restored.detail, restored.location) == ("Office", "Weekly sync", "HQ")
        first, second = restored.todos
        assert first.completed is False
        assert first.background_color == "#fff3e0"
        assert second.sub_todos[0].completed is False
        assert second.sub_todos[0].is_pinned is True

    def test_fresh_ids(self):
        template = self._template()
        restored = restore(template, IdGenerator(start=100))
        source_ids = {t.id for t in template.todos} | {st.id for t in template.todos for st in t.sub_todos}
        new_ids = [t.id for t in restored.todos] + [st.id for t in restored.todos for st in t.sub_todos]
        assert len(set(new_ids)) == len(new_ids)
        assert not source_ids & set(new_ids)
        assert new_ids == ["t100", "t101", "st102"]

    def test_restore_law(self):
        cases = [
            (False, [], False),
            (True, [], True),
            (False, [False, False], False),
            (False, [False, True], True),
            (True, [False], True),
        ]
        for pinned, sub_pins, expected in cases:
            todo = make_todo("t1", pinned=pinned, subs=[make_sub(f"st{i}", pinned=p) for i, p in enumerate(sub_pins)])
            restored = restore(make_situation("s1", T0, todos=[todo]), IdGenerator())
            assert (len(restored.todos) == 1) is expected

    def test_nothing_pinned_returns_empty(self):
        template = make_situation("s1", T0, todos=[make_todo("t1"), make_todo("t2", subs=[make_sub("st1")])])
        assert restore(template, IdGenerator()).todos == []

    def test_template_is_not_modified(self):
        template = self._template()
        before = template.model_dump()
        restore(template, IdGenerator())
        assert template.model_dump() == before
