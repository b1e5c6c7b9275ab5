import math

import pytest

from clock import (
    GLOBAL_TUNING,
    LOCAL_TUNING,
    MIGRATION_COMPLETION,
    RESOURCE_PROCESSING,
    advance,
    cancel_pending,
    migration_tag,
    next_due_time,
    now,
    pop_due,
    schedule_at,
    tag_kind,
)


def test_timers_due_together_fire_in_fixed_order(clock):
    schedule_at(clock, 10, GLOBAL_TUNING)
    schedule_at(clock, 10, LOCAL_TUNING)
    schedule_at(clock, 10, migration_tag(3), "record")
    schedule_at(clock, 10, RESOURCE_PROCESSING)
    advance(clock, 10)

    due = pop_due(clock)

    assert [tag_kind(tag) for tag, _ in due] == [
        RESOURCE_PROCESSING,
        MIGRATION_COMPLETION,
        LOCAL_TUNING,
        GLOBAL_TUNING,
    ]
    assert due[1] == (migration_tag(3), "record")
    assert clock["pending"] == {}


def test_rearming_cancels_the_pending_timer(clock):
    schedule_at(clock, 5, LOCAL_TUNING)
    schedule_at(clock, 8, LOCAL_TUNING)

    assert len(clock["pending"]) == 1
    assert next_due_time(clock) == 8


def test_future_timers_are_not_popped(clock):
    schedule_at(clock, 5, RESOURCE_PROCESSING)
    schedule_at(clock, 50, GLOBAL_TUNING)
    advance(clock, 5)

    due = pop_due(clock)

    assert [tag for tag, _ in due] == [RESOURCE_PROCESSING]
    assert next_due_time(clock) == 50


def test_cancel_pending(clock):
    schedule_at(clock, 5, RESOURCE_PROCESSING)

    assert cancel_pending(clock, RESOURCE_PROCESSING)
    assert not cancel_pending(clock, RESOURCE_PROCESSING)
    assert math.isinf(next_due_time(clock))


def test_clock_never_goes_back(clock):
    advance(clock, 100)

    assert now(clock) == 100
    with pytest.raises(ValueError):
        advance(clock, 50)
    with pytest.raises(ValueError):
        schedule_at(clock, 99, LOCAL_TUNING)
