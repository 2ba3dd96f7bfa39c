"""
Adversarial tests for race condition attack prevention.

Verifies that concurrent operations on the same username or request are
handled atomically, preventing attackers (or two busy administrators) from:
- Creating several PENDING requests for one username
- Provisioning the same request twice

Defenses under test:
- Partial unique index on PENDING usernames with ON CONFLICT DO NOTHING
- SELECT FOR UPDATE before the PENDING status check in decide()
"""

import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import pytest
from psycopg_pool import ConnectionPool

from src.domain.registration import RegistrationWorkflow
from src.domain.results import ErrorKind, Result

# Apply adversarial marker to all tests in this module
pytestmark = pytest.mark.adversarial


def run_concurrently(action: Callable[[], Result], count: int) -> list[Result]:
    """Start count actions together and collect their results."""
    barrier = threading.Barrier(count)

    def attempt() -> Result:
        barrier.wait()
        return action()

    with ThreadPoolExecutor(max_workers=count) as executor:
        futures = [executor.submit(attempt) for _ in range(count)]
        return [f.result() for f in futures]


def count_rows(pool: ConnectionPool, sql: str, params: tuple) -> int:
    with pool.connection() as conn, conn.cursor() as cursor:
        cursor.execute(sql, params)
        return cursor.fetchone()[0]


class TestConcurrentSubmissions:
    """Concurrent submissions for one username."""

    @pytest.mark.parametrize("attackers", [5, 20])
    def test_exactly_one_pending_request(
        self,
        pool: ConnectionPool,
        workflow_factory: Callable[[], RegistrationWorkflow],
        attackers: int,
    ) -> None:
        """Exactly one submission wins; the others get AlreadyExistingRequest."""
        results = run_concurrently(
            lambda: workflow_factory().submit("alice", "longpassword", "a@x.com"), attackers
        )

        assert sum(r.ok for r in results) == 1
        losers = [r.error.kind for r in results if not r.ok]
        assert losers == [ErrorKind.ALREADY_EXISTING_REQUEST] * (attackers - 1)
        assert (
            count_rows(
                pool,
                "SELECT COUNT(*) FROM registration_requests WHERE username = %s AND status = 'PENDING'",
                ("alice",),
            )
            == 1
        )


class TestConcurrentDecisions:
    """Concurrent decisions on one request."""

    def test_concurrent_approvals_provision_once(
        self, pool: ConnectionPool, workflow_factory: Callable[[], RegistrationWorkflow]
    ) -> None:
        """Only one of several simultaneous approvals creates an account."""
        workflow = workflow_factory()
        assert workflow.submit("alice", "longpassword", "a@x.com").ok
        request_id = workflow.list_pending()[0].id

        results = run_concurrently(
            lambda: workflow_factory().decide(request_id, "APPROVED", actor_id="admin-id"), 5
        )

        assert sum(r.ok for r in results) == 1
        assert all(r.error.kind is ErrorKind.NOT_FOUND for r in results if not r.ok)
        assert count_rows(pool, "SELECT COUNT(*) FROM users WHERE username = %s", ("alice",)) == 1
        assert count_rows(pool, "SELECT COUNT(*) FROM audit_log", ()) == 1

    def test_approve_and_reject_race(
        self, pool: ConnectionPool, workflow_factory: Callable[[], RegistrationWorkflow]
    ) -> None:
        """Approve and reject at once: one wins and the outcome is consistent."""
        workflow = workflow_factory()
        assert workflow.submit("alice", "longpassword", "a@x.com").ok
        request_id = workflow.list_pending()[0].id
        decisions = iter(["APPROVED", "REJECTED"] * 3)
        lock = threading.Lock()

        def decide() -> Result:
            with lock:
                decision = next(decisions)
            return workflow_factory().decide(request_id, decision, actor_id="admin-id")

        results = run_concurrently(decide, 6)

        assert sum(r.ok for r in results) == 1
        status = workflow.lookup_status("alice")
        accounts = count_rows(pool, "SELECT COUNT(*) FROM users WHERE username = %s", ("alice",))
        assert accounts == (1 if status.value == "APPROVED" else 0)
