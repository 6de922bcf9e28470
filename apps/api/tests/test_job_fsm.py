"""Linear job lifecycle rule tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
import unittest

from app.domain.job_fsm import (
    INITIAL_STATUS,
    STATUS_ORDER,
    TERMINAL_STATUS,
    ensure_transition,
    is_canonical_prefix,
    next_status,
    timeline_drift,
)
from app.errors import ApiError
from app.schemas.job import JobStatus, JobTimeline


class JobFsmUnitTests(unittest.TestCase):
    def test_order_covers_every_status_exactly_once(self) -> None:
        self.assertEqual(len(STATUS_ORDER), 12)
        self.assertEqual(set(STATUS_ORDER), set(JobStatus))
        self.assertIs(INITIAL_STATUS, JobStatus.UNASSIGNED)
        self.assertIs(TERMINAL_STATUS, JobStatus.COMPLETED)

    def test_each_status_has_single_successor(self) -> None:
        for current, expected in zip(STATUS_ORDER, STATUS_ORDER[1:]):
            with self.subTest(current=current):
                self.assertIs(next_status(current), expected)
        self.assertIsNone(next_status(JobStatus.COMPLETED))

    def test_successor_transitions_are_allowed(self) -> None:
        for current, expected in zip(STATUS_ORDER, STATUS_ORDER[1:]):
            with self.subTest(current=current, requested=expected):
                ensure_transition(current, expected)

    def test_skip_regress_and_replay_are_invalid(self) -> None:
        invalid_pairs = [
            (JobStatus.UNASSIGNED, JobStatus.ACCEPTED),
            (JobStatus.ACCEPTED, JobStatus.QC_BEFORE),
            (JobStatus.QC_AFTER, JobStatus.JOB_STARTED),
            (JobStatus.WAITING, JobStatus.UNASSIGNED),
            (JobStatus.ASSIGNED, JobStatus.ASSIGNED),
            (JobStatus.INVOICE, JobStatus.INVOICE),
        ]
        for current, requested in invalid_pairs:
            with self.subTest(current=current, requested=requested):
                with self.assertRaises(ApiError) as context:
                    ensure_transition(current, requested)
                self.assertEqual(context.exception.status_code, 400)
                self.assertEqual(context.exception.payload.code, "INVALID_TRANSITION")
                details = context.exception.payload.details
                self.assertEqual(details["current_status"], current)
                self.assertEqual(details["attempted_status"], requested)
                self.assertEqual(details["expected_status"], next_status(current))

    def test_terminal_status_rejects_everything(self) -> None:
        for requested in STATUS_ORDER:
            with self.subTest(requested=requested):
                with self.assertRaises(ApiError) as context:
                    ensure_transition(JobStatus.COMPLETED, requested)
                self.assertEqual(context.exception.payload.code, "INVALID_TRANSITION")
                self.assertNotIn("expected_status", context.exception.payload.details)

    def test_canonical_prefix_detection(self) -> None:
        self.assertTrue(is_canonical_prefix([]))
        self.assertTrue(is_canonical_prefix([JobStatus.UNASSIGNED, JobStatus.ASSIGNED]))
        self.assertFalse(is_canonical_prefix([JobStatus.ASSIGNED]))
        self.assertFalse(is_canonical_prefix([JobStatus.UNASSIGNED, JobStatus.UNASSIGNED]))
        self.assertFalse(is_canonical_prefix([JobStatus.UNASSIGNED, JobStatus.ACCEPTED]))


class TimelineDriftUnitTests(unittest.TestCase):
    def setUp(self) -> None:
        self.base = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)

    def test_matching_timeline_and_history_have_no_drift(self) -> None:
        timeline = JobTimeline(unassigned=self.base, assigned=self.base + timedelta(minutes=5))

        drift = timeline_drift(timeline, [JobStatus.UNASSIGNED, JobStatus.ASSIGNED])

        self.assertEqual(drift, [])

    def test_missing_history_entry_is_reported(self) -> None:
        timeline = JobTimeline(unassigned=self.base, assigned=self.base + timedelta(minutes=5))

        drift = timeline_drift(timeline, [JobStatus.UNASSIGNED])

        self.assertEqual(drift, [JobStatus.ASSIGNED])

    def test_history_without_timeline_entry_is_reported(self) -> None:
        timeline = JobTimeline(unassigned=self.base)

        drift = timeline_drift(timeline, [JobStatus.UNASSIGNED, JobStatus.ASSIGNED])

        self.assertEqual(drift, [JobStatus.ASSIGNED])

    def test_backwards_timestamp_is_reported(self) -> None:
        timeline = JobTimeline(
            unassigned=self.base,
            assigned=self.base + timedelta(minutes=10),
            accepted=self.base + timedelta(minutes=1),
        )

        drift = timeline_drift(timeline, [JobStatus.UNASSIGNED, JobStatus.ASSIGNED, JobStatus.ACCEPTED])

        self.assertEqual(drift, [JobStatus.ACCEPTED])


if __name__ == "__main__":
    unittest.main()
