import math

RESOURCE_PROCESSING = "resource_processing"
LOCAL_TUNING = "local_tuning"
GLOBAL_TUNING = "global_tuning"
MIGRATION_COMPLETION = "migration_completion"

# Order in which timers due at the same instant are handed out
TAG_PRIORITY = {
    RESOURCE_PROCESSING: 0,
    MIGRATION_COMPLETION: 1,
    LOCAL_TUNING: 2,
    GLOBAL_TUNING: 3,
}


def create_clock(start_time=0.0):
    return {"now": float(start_time), "pending": {}}


def now(clock):
    return clock["now"]


def migration_tag(vm_id):
    return (MIGRATION_COMPLETION, vm_id)


def tag_kind(tag):
    return tag[0] if isinstance(tag, tuple) else tag


def cancel_pending(clock, tag):
    return clock["pending"].pop(tag, None) is not None


def schedule_at(clock, time, tag, data=None):
    """
    Arm a one-shot timer. A pending timer with the same tag is cancelled first,
    so there is at most one pending firing per tag.
    """
    if time < clock["now"]:
        raise ValueError(
            f"Cannot schedule {tag} at {time}, the clock is already at {clock['now']}."
        )
    cancel_pending(clock, tag)
    clock["pending"][tag] = (float(time), data)


def next_due_time(clock):
    if not clock["pending"]:
        return math.inf
    return min(time for time, _ in clock["pending"].values())


def advance(clock, time):
    if time < clock["now"]:
        raise ValueError(f"Clock cannot go back from {clock['now']} to {time}.")
    clock["now"] = float(time)


def pop_due(clock):
    due = [
        (tag, data)
        for tag, (time, data) in clock["pending"].items()
        if time <= clock["now"]
    ]
    due.sort(key=lambda item: TAG_PRIORITY[tag_kind(item[0])])
    for tag, _ in due:
        del clock["pending"][tag]
    return due
