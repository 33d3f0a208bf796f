import uuid

import pytest

from conftest import FIXED_NOW, make_exercise, make_variable

from app.core.enums import ProgressionType
from app.core.exceptions import ConfigurationError, NotFoundError, PersistenceError
from app.schemas.session import SetOutcome
from app.services.progression import RoleSlots

SINGLE, DOUBLE, TRIPLE = ProgressionType.SINGLE, ProgressionType.DOUBLE, ProgressionType.TRIPLE


def reps(exercise, role, **kw):
    # 8, 10, 12, 14
    kw.setdefault("start_value", 8)
    return make_variable(exercise, role=role, variable_type="reps", unit=None, increment_size=2, **kw)


def sets_of(*results):
    return [SetOutcome(set_number=i + 1, success=ok) for i, ok in enumerate(results)]


# ── Single ───────────────────────────────────────────────────────────────

async def test_single_advances_primary_one_step(store, engine):
    ex = make_exercise(SINGLE)
    primary = make_variable(ex, current_value=40)
    store.add(ex, primary)

    outcome = await engine.handle_exercise_progression(ex.id, True)

    assert primary.current_value == 50
    assert primary.current_value_modified_at == FIXED_NOW
    assert primary.should_reset_cycle is False
    assert store.updates == [(primary.id, 50, None)]
    assert outcome.progressed == [ex.id]


async def test_single_at_terminal_stays(store, engine):
    ex = make_exercise(SINGLE)
    primary = make_variable(ex, current_value=60)
    store.add(ex, primary)

    await engine.handle_exercise_progression(ex.id, True)

    assert primary.current_value == 60
    assert store.updates == [(primary.id, 60, None)]


async def test_failed_event_changes_nothing(store, engine):
    ex = make_exercise(SINGLE)
    store.add(ex, make_variable(ex))

    outcome = await engine.handle_exercise_progression(ex.id, False, uuid.uuid4(), sets_of(False))

    assert store.updates == []
    assert store.link_lookups == []
    assert store.set_logs == []
    assert outcome.progressed == []


async def test_failed_event_does_not_load_exercise(engine):
    # Unknown id is not an error when the event failed
    outcome = await engine.handle_exercise_progression(uuid.uuid4(), False)
    assert outcome.progressed == []


# ── Double ───────────────────────────────────────────────────────────────

async def test_double_only_primary_moves_mid_cycle(store, engine):
    ex = make_exercise(DOUBLE)
    primary = make_variable(ex, current_value=30)
    secondary = reps(ex, "secondary")
    store.add(ex, primary, secondary)

    await engine.handle_exercise_progression(ex.id, True)

    assert primary.current_value == 40
    assert secondary.current_value == 8
    assert store.updates == [(primary.id, 40, None)]


async def test_double_cascade_advances_secondary_and_resets_primary(store, engine):
    ex = make_exercise(DOUBLE)
    primary = make_variable(ex, current_value=60)
    secondary = reps(ex, "secondary")
    store.add(ex, primary, secondary)

    await engine.handle_exercise_progression(ex.id, True)

    assert secondary.current_value == 10
    assert primary.current_value == 30
    assert primary.should_reset_cycle is True
    assert secondary.should_reset_cycle is False
    assert store.updates == [
        (primary.id, 60, None),
        (secondary.id, 10, None),
        (primary.id, 30, True),
    ]


async def test_double_both_terminal_secondary_stays_primary_resets(store, engine):
    ex = make_exercise(DOUBLE)
    primary = make_variable(ex, current_value=60)
    secondary = reps(ex, "secondary", current_value=14)
    store.add(ex, primary, secondary)

    await engine.handle_exercise_progression(ex.id, True)

    assert secondary.current_value == 14
    assert primary.current_value == 30


async def test_double_percentage_steps_survive_float_drift(store, engine):
    ex = make_exercise(DOUBLE)
    # 30, 33.000000000000004, 36.300000000000004, 39.93
    primary = make_variable(ex, increment_size=None, percentage_increase=10)
    secondary = reps(ex, "secondary")
    store.add(ex, primary, secondary)

    for expected in (33, 36.3, 39.93):
        await engine.handle_exercise_progression(ex.id, True)
        assert primary.current_value == pytest.approx(expected)
        assert secondary.current_value == 8

    await engine.handle_exercise_progression(ex.id, True)

    assert secondary.current_value == 10
    assert primary.current_value == 30
    assert primary.should_reset_cycle is True


async def test_double_percentage_value_rounded_by_storage_still_found(store, engine):
    ex = make_exercise(DOUBLE)
    primary = make_variable(ex, increment_size=None, percentage_increase=10, current_value=33.0)
    secondary = reps(ex, "secondary")
    store.add(ex, primary, secondary)

    await engine.handle_exercise_progression(ex.id, True)

    assert primary.current_value == pytest.approx(36.3)
    assert secondary.current_value == 8


async def test_double_repeated_floor_value_is_terminal(store, engine):
    ex = make_exercise(DOUBLE)
    # 10, 6, 2, 1, 1: the first 1 already counts as the end of the sequence
    primary = make_variable(ex, start_value=10, increment_size=-4, min_value=1, number_of_increments=4,
                            current_value=1)
    secondary = reps(ex, "secondary")
    store.add(ex, primary, secondary)

    await engine.handle_exercise_progression(ex.id, True)

    assert secondary.current_value == 10
    assert primary.current_value == 10
    assert primary.should_reset_cycle is True
    assert store.updates == [
        (primary.id, 1, None),
        (secondary.id, 10, None),
        (primary.id, 10, True),
    ]


# ── Triple ───────────────────────────────────────────────────────────────

async def test_triple_terminal_cascade(store, engine):
    ex = make_exercise(TRIPLE)
    primary = make_variable(ex, current_value=60)
    secondary = reps(ex, "secondary", current_value=14)
    tertiary = make_variable(ex, role="tertiary", variable_type="weight", unit="kg",
                             start_value=20, increment_size=2.5, number_of_increments=4)
    store.add(ex, primary, secondary, tertiary)

    await engine.handle_exercise_progression(ex.id, True)

    assert tertiary.current_value == 22.5
    assert primary.current_value == 30
    assert secondary.current_value == 8
    assert primary.should_reset_cycle and secondary.should_reset_cycle
    assert not tertiary.should_reset_cycle
    assert [u[0] for u in store.updates] == [primary.id, secondary.id, tertiary.id, primary.id, secondary.id]


async def test_triple_secondary_advance_leaves_primary_at_terminal(store, engine):
    ex = make_exercise(TRIPLE)
    primary = make_variable(ex, current_value=60)
    secondary = reps(ex, "secondary", current_value=10)
    tertiary = make_variable(ex, role="tertiary", variable_type="weight", start_value=20, increment_size=2.5)
    store.add(ex, primary, secondary, tertiary)

    await engine.handle_exercise_progression(ex.id, True)

    assert secondary.current_value == 12
    assert primary.current_value == 60
    assert tertiary.current_value == 20
    assert not primary.should_reset_cycle


async def test_triple_without_tertiary_resets_only_primary(engine):
    """Secondary completes with no tertiary slot: primary resets, secondary keeps its value."""
    ex = make_exercise(TRIPLE)
    primary = make_variable(ex, current_value=60)
    secondary = reps(ex, "secondary", current_value=14)
    engine.store.add(ex, primary, secondary)

    await engine.advance_on_completion(ex, RoleSlots(primary=primary, secondary=secondary))

    assert primary.current_value == 30
    assert primary.should_reset_cycle is True
    assert secondary.current_value == 14
    assert secondary.should_reset_cycle is False


async def test_advance_on_completion_respects_success_and_maintenance(engine):
    ex = make_exercise(SINGLE)
    primary = make_variable(ex)
    engine.store.add(ex, primary)

    await engine.advance_on_completion(ex, RoleSlots(primary=primary), success=False)
    ex.maintenance_mode = True
    await engine.advance_on_completion(ex, RoleSlots(primary=primary))

    assert engine.store.updates == []


# ── Maintenance gate ─────────────────────────────────────────────────────

async def test_maintenance_mode_freezes_everything(store, engine):
    ex = make_exercise(DOUBLE, maintenance_mode=True)
    primary = make_variable(ex, current_value=60)
    secondary = reps(ex, "secondary")
    linked = make_exercise(SINGLE, name="Side plank")
    store.add(ex, primary, secondary)
    store.add(linked, make_variable(linked))
    store.link(ex, linked)

    outcome = await engine.handle_exercise_progression(ex.id, True, uuid.uuid4(), sets_of(True, True))

    assert store.updates == []
    assert store.completion_logs == []
    assert store.set_logs == []
    assert store.link_lookups == []
    assert outcome.skipped == [ex.id]
    assert outcome.progressed == []


async def test_toggle_maintenance_mode(store, engine):
    ex = store.add(make_exercise(SINGLE))

    await engine.toggle_maintenance_mode(ex.id, True)
    assert ex.maintenance_mode is True
    await engine.toggle_maintenance_mode(ex.id, False)
    assert ex.maintenance_mode is False

    with pytest.raises(NotFoundError):
        await engine.toggle_maintenance_mode(uuid.uuid4(), True)


# ── Errors ───────────────────────────────────────────────────────────────

async def test_unknown_exercise(engine):
    with pytest.raises(NotFoundError, match="Exercise not found"):
        await engine.handle_exercise_progression(uuid.uuid4(), True)


async def test_current_value_off_sequence_is_rejected(store, engine):
    ex = make_exercise(SINGLE)
    store.add(ex, make_variable(ex, current_value=45))

    with pytest.raises(ConfigurationError, match="not part of its sequence"):
        await engine.handle_exercise_progression(ex.id, True)
    assert store.updates == []


async def test_variable_without_step_is_rejected(store, engine):
    ex = make_exercise(SINGLE)
    store.add(ex, make_variable(ex, increment_size=None))

    with pytest.raises(ConfigurationError, match="neither increment size nor percentage increase"):
        await engine.handle_exercise_progression(ex.id, True)


async def test_missing_role_for_progression_type(store, engine):
    ex = make_exercise(TRIPLE)
    store.add(ex, make_variable(ex, current_value=60), reps(ex, "secondary", current_value=14))

    with pytest.raises(ConfigurationError, match="triple progression requires roles"):
        await engine.handle_exercise_progression(ex.id, True)
    assert store.updates == []


async def test_extra_role_for_progression_type(store, engine):
    ex = make_exercise(SINGLE)
    store.add(ex, make_variable(ex), reps(ex, "secondary"))

    with pytest.raises(ConfigurationError):
        await engine.handle_exercise_progression(ex.id, True)


async def test_duplicate_role(store, engine):
    ex = make_exercise(SINGLE)
    store.add(ex, make_variable(ex), make_variable(ex))

    with pytest.raises(ConfigurationError, match="more than one primary"):
        await engine.handle_exercise_progression(ex.id, True)


async def test_persistence_failure_aborts_cascade_without_rollback(store, engine):
    ex = make_exercise(DOUBLE)
    primary = make_variable(ex, current_value=60)
    secondary = reps(ex, "secondary")
    store.add(ex, primary, secondary)
    store.fail_on_update = 2

    with pytest.raises(PersistenceError):
        await engine.handle_exercise_progression(ex.id, True)

    # First write stays, the reset never happens, links are never looked up
    assert store.updates == [(primary.id, 60, None)]
    assert primary.should_reset_cycle is False
    assert secondary.current_value == 8
    assert store.link_lookups == []


# ── Linked exercises ─────────────────────────────────────────────────────

def _single(store, name, current_value=30):
    ex = make_exercise(SINGLE, name=name)
    v = make_variable(ex, current_value=current_value)
    store.add(ex, v)
    return ex, v


async def test_link_lookup_runs_without_links(store, engine):
    ex, _ = _single(store, "Plank")
    await engine.handle_exercise_progression(ex.id, True)
    assert store.link_lookups == [ex.id]


async def test_linked_exercise_progresses_with_implicit_success(store, engine):
    a, va = _single(store, "Plank")
    b, vb = _single(store, "Hollow hold", current_value=40)
    store.link(a, b)

    outcome = await engine.handle_exercise_progression(a.id, True)

    assert va.current_value == 40
    assert vb.current_value == 50
    assert outcome.progressed == [a.id, b.id]


async def test_links_are_followed_transitively(store, engine):
    a, _ = _single(store, "A")
    b, _ = _single(store, "B")
    c, vc = _single(store, "C")
    store.link(a, b)
    store.link(b, c)

    outcome = await engine.handle_exercise_progression(a.id, True)

    assert outcome.progressed == [a.id, b.id, c.id]
    assert vc.current_value == 40


async def test_link_cycle_progresses_each_exercise_once(store, engine):
    a, va = _single(store, "A")
    b, vb = _single(store, "B")
    store.link(a, b)
    store.link(b, a)

    outcome = await engine.handle_exercise_progression(a.id, True)

    assert outcome.progressed == [a.id, b.id]
    assert va.current_value == 40
    assert vb.current_value == 40


async def test_self_link_is_ignored(store, engine):
    a, va = _single(store, "A")
    store.link(a, a)

    await engine.handle_exercise_progression(a.id, True)

    assert va.current_value == 40


async def test_diamond_links_progress_shared_exercise_once(store, engine):
    a, _ = _single(store, "A")
    b, _ = _single(store, "B")
    c, _ = _single(store, "C")
    d, vd = _single(store, "D")
    store.link(a, b)
    store.link(a, c)
    store.link(b, d)
    store.link(c, d)

    outcome = await engine.handle_exercise_progression(a.id, True)

    assert outcome.progressed == [a.id, b.id, c.id, d.id]
    assert vd.current_value == 40


async def test_linked_exercise_in_maintenance_is_skipped_with_its_links(store, engine):
    a, _ = _single(store, "A")
    b, vb = _single(store, "B")
    c, vc = _single(store, "C")
    b.maintenance_mode = True
    store.link(a, b)
    store.link(b, c)

    outcome = await engine.handle_exercise_progression(a.id, True)

    assert outcome.progressed == [a.id]
    assert outcome.skipped == [b.id]
    assert vb.current_value == 30
    assert vc.current_value == 30


async def test_dangling_link_raises_not_found(store, engine):
    a, _ = _single(store, "A")
    store.links[a.id] = [uuid.uuid4()]

    with pytest.raises(NotFoundError):
        await engine.handle_exercise_progression(a.id, True)


async def test_propagate_links_directly(store, engine):
    a, va = _single(store, "A")
    b, vb = _single(store, "B")
    store.link(a, b)

    outcome = await engine.propagate_links(a.id)

    assert outcome.progressed == [b.id]
    assert va.current_value == 30
    assert vb.current_value == 40


# ── Completion logs ──────────────────────────────────────────────────────

async def test_completion_logs_record_values_used_and_sets(store, engine):
    ex = make_exercise(DOUBLE)
    primary = make_variable(ex, current_value=60)
    secondary = reps(ex, "secondary")
    linked, _ = _single(store, "Linked")
    store.add(ex, primary, secondary)
    store.link(ex, linked)
    session_id = uuid.uuid4()
    sets = sets_of(True, True, True)

    await engine.handle_exercise_progression(ex.id, True, session_id, sets)

    assert sorted(store.completion_logs, key=lambda r: r[3]) == [
        (session_id, ex.id, secondary.id, 8),
        (session_id, ex.id, primary.id, 60),
    ]
    assert store.set_logs == [(session_id, ex.id, s) for s in sets]


async def test_no_logs_without_session_or_sets(store, engine):
    ex, _ = _single(store, "A")

    await engine.handle_exercise_progression(ex.id, True, uuid.uuid4(), None)
    await engine.handle_exercise_progression(ex.id, True, None, sets_of(True))

    assert store.completion_logs == []
    assert store.set_logs == []


async def test_empty_sets_still_log_variable_values(store, engine):
    ex, v = _single(store, "A")
    session_id = uuid.uuid4()

    await engine.handle_exercise_progression(ex.id, True, session_id, [])

    assert store.completion_logs == [(session_id, ex.id, v.id, 30)]
    assert store.set_logs == []


# ── Session completion ───────────────────────────────────────────────────

async def test_complete_exercise_all_sets_succeeded(store, engine):
    ex, v = _single(store, "A")
    session_id = uuid.uuid4()

    outcome = await engine.complete_exercise(session_id, ex.id, sets_of(True, True, True))

    assert v.current_value == 40
    assert outcome.progressed == [ex.id]
    assert len(store.set_logs) == 3
    assert store.completion_logs == [(session_id, ex.id, v.id, 30)]


async def test_complete_exercise_with_failed_set_records_sets_only(store, engine):
    ex, v = _single(store, "A")
    session_id = uuid.uuid4()

    outcome = await engine.complete_exercise(session_id, ex.id, sets_of(True, False, True))

    assert v.current_value == 30
    assert outcome.progressed == []
    assert len(store.set_logs) == 3
    assert store.completion_logs == []


async def test_complete_exercise_in_maintenance_records_nothing(store, engine):
    ex, v = _single(store, "A")
    ex.maintenance_mode = True

    for results in [(True, True), (True, False)]:
        outcome = await engine.complete_exercise(uuid.uuid4(), ex.id, sets_of(*results))
        assert outcome.skipped == [ex.id]

    assert v.current_value == 30
    assert store.set_logs == []
    assert store.completion_logs == []


def test_progression_status_uses_engine_tolerance(engine):
    ex = make_exercise(SINGLE)
    v = make_variable(ex, current_value=40.00001)
    status = engine.get_progression_status(v)
    assert (status.current, status.next_value) == (2, 50)
