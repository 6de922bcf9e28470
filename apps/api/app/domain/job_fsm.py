"""Job lifecycle transition rules.

The lifecycle is strictly linear: every status has exactly one successor and
``COMPLETED`` has none. The order is kept as a tuple with an index lookup so
that "is this the next step" is a constant-time comparison.
"""

from collections.abc import Iterable

from app.errors import ApiError
from app.schemas.job import JobStatus, JobTimeline

STATUS_ORDER: tuple[JobStatus, ...] = (
    JobStatus.UNASSIGNED,
    JobStatus.ASSIGNED,
    JobStatus.ACCEPTED,
    JobStatus.WAITING,
    JobStatus.EN_ROUTE,
    JobStatus.DOORSTEP,
    JobStatus.QC_BEFORE,
    JobStatus.JOB_STARTED,
    JobStatus.QC_AFTER,
    JobStatus.INVOICE,
    JobStatus.PAYMENT,
    JobStatus.COMPLETED,
)

INITIAL_STATUS = STATUS_ORDER[0]
TERMINAL_STATUS = STATUS_ORDER[-1]


_STATUS_INDEX: dict[JobStatus, int] = {status: index for index, status in enumerate(STATUS_ORDER)}


def next_status(status: JobStatus) -> JobStatus | None:
    """Return the single legal successor, or ``None`` for the terminal status."""
    index = _STATUS_INDEX[status]
    if index + 1 >= len(STATUS_ORDER):
        return None
    return STATUS_ORDER[index + 1]


def ensure_transition(current_status: JobStatus, requested_status: JobStatus) -> None:
    """Validate that ``requested_status`` is the successor of ``current_status``."""
    if requested_status is next_status(current_status):
        return
    raise invalid_transition_error(current_status, requested_status)


def invalid_transition_error(current_status: JobStatus, requested_status: JobStatus) -> ApiError:
    expected = next_status(current_status)
    details: dict[str, JobStatus] = {
        "current_status": current_status,
        "attempted_status": requested_status,
    }
    if expected is None:
        message = f"Job is {current_status.value}; no further transitions are allowed"
    else:
        details["expected_status"] = expected
        message = (
            f"Invalid transition from {current_status.value} to {requested_status.value}. "
            f"Expected: {expected.value}"
        )
    return ApiError(status_code=400, code="INVALID_TRANSITION", message=message, details=details)


def is_canonical_prefix(statuses: Iterable[JobStatus]) -> bool:
    """True when ``statuses`` is a prefix of the canonical order with no repeats."""
    sequence = list(statuses)
    return tuple(sequence) == STATUS_ORDER[: len(sequence)]


def timeline_drift(timeline: JobTimeline, recorded_statuses: Iterable[JobStatus]) -> list[JobStatus]:
    """Return statuses where the timeline and the history log disagree.

    A status drifts when it has a timeline timestamp but no history entry, or
    the other way round. Timestamps that go backwards in state order are also
    reported, at the later status.
    """
    recorded = set(recorded_statuses)
    drifted: list[JobStatus] = []
    previous_at = None
    for status in STATUS_ORDER:
        entered_at = timeline.entered_at(status)
        if (entered_at is not None) != (status in recorded):
            drifted.append(status)
            continue
        if entered_at is None:
            continue
        if previous_at is not None and entered_at < previous_at:
            drifted.append(status)
        previous_at = entered_at
    return drifted
