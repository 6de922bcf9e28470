"""Role permission matrix tests."""

from __future__ import annotations

import unittest

from app.domain.job_fsm import STATUS_ORDER
from app.domain.permissions import (
    can_view_job,
    ensure_may_invite,
    ensure_may_transition,
    ensure_may_transition_any,
)
from app.errors import ApiError
from app.schemas.auth import Actor, Role
from app.schemas.job import JobStatus

_ADMIN = Actor(user_id="admin-1", role=Role.ADMIN)
_SEMIADMIN = Actor(user_id="semi-1", role=Role.SEMIADMIN)
_TECH = Actor(user_id="tech-1", role=Role.TECHNICIAN)
_VIEWER = Actor(user_id="viewer-1", role=Role.VIEWER)


class TransitionPermissionTests(unittest.TestCase):
    def assertForbidden(self, actor: Actor, status: JobStatus, technician_id: str | None) -> None:
        with self.assertRaises(ApiError) as context:
            ensure_may_transition(actor, current_status=status, technician_id=technician_id)
        self.assertEqual(context.exception.status_code, 403)
        self.assertEqual(context.exception.payload.code, "FORBIDDEN")

    def test_admin_may_transition_from_every_status(self) -> None:
        for status in STATUS_ORDER:
            with self.subTest(status=status):
                ensure_may_transition(_ADMIN, current_status=status, technician_id=None)

    def test_semiadmin_only_from_unassigned(self) -> None:
        ensure_may_transition(_SEMIADMIN, current_status=JobStatus.UNASSIGNED, technician_id=None)
        for status in STATUS_ORDER[1:]:
            with self.subTest(status=status):
                self.assertForbidden(_SEMIADMIN, status, "tech-1")

    def test_technician_only_on_own_jobs_after_assignment(self) -> None:
        for status in STATUS_ORDER[1:]:
            with self.subTest(status=status):
                ensure_may_transition(_TECH, current_status=status, technician_id="tech-1")
                self.assertForbidden(_TECH, status, "tech-2")
        self.assertForbidden(_TECH, JobStatus.UNASSIGNED, None)
        self.assertForbidden(_TECH, JobStatus.UNASSIGNED, "tech-1")

    def test_viewer_never_transitions(self) -> None:
        for status in STATUS_ORDER:
            with self.subTest(status=status):
                self.assertForbidden(_VIEWER, status, None)
        with self.assertRaises(ApiError):
            ensure_may_transition_any(_VIEWER)

    def test_non_viewers_pass_state_independent_gate(self) -> None:
        for actor in (_ADMIN, _SEMIADMIN, _TECH):
            with self.subTest(role=actor.role):
                ensure_may_transition_any(actor)


class VisibilityAndInviteTests(unittest.TestCase):
    def test_technician_sees_only_bound_jobs(self) -> None:
        self.assertTrue(can_view_job(_TECH, technician_id="tech-1"))
        self.assertFalse(can_view_job(_TECH, technician_id="tech-2"))
        self.assertFalse(can_view_job(_TECH, technician_id=None))
        for actor in (_ADMIN, _SEMIADMIN, _VIEWER):
            with self.subTest(role=actor.role):
                self.assertTrue(can_view_job(actor, technician_id=None))

    def test_invite_matrix(self) -> None:
        for role in Role:
            with self.subTest(inviter=Role.ADMIN, role=role):
                ensure_may_invite(_ADMIN, role)

        ensure_may_invite(_SEMIADMIN, Role.TECHNICIAN)
        ensure_may_invite(_SEMIADMIN, Role.VIEWER)
        for role in (Role.ADMIN, Role.SEMIADMIN):
            with self.subTest(inviter=Role.SEMIADMIN, role=role):
                with self.assertRaises(ApiError) as context:
                    ensure_may_invite(_SEMIADMIN, role)
                self.assertEqual(context.exception.status_code, 403)

        for actor in (_TECH, _VIEWER):
            with self.subTest(inviter=actor.role):
                with self.assertRaises(ApiError):
                    ensure_may_invite(actor, Role.VIEWER)


if __name__ == "__main__":
    unittest.main()
