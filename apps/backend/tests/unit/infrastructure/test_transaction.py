"""
Name: Transaction Coordinator Tests

Responsibilities:
  - Commit when the unit of work succeeds
  - Roll back and re-raise the ORIGINAL exception when it fails
  - Always hand the connection back to the pool
"""

import pytest
from pizza_service.infrastructure.db.transaction import TransactionCoordinator


@pytest.mark.unit
class TestTransactionCoordinator:
    def test_commits_and_returns_work_result(self, fake_pool, fake_conn):
        coordinator = TransactionCoordinator(fake_pool)

        def work(conn):
            conn.execute("INSERT INTO franchises (name) VALUES (%s)", ("F",))
            conn.execute("INSERT INTO stores (franchise_id, name) VALUES (%s, %s)", (1, "S"))
            return "done"

        assert coordinator.run(work, operation="test") == "done"
        assert fake_conn.events == ["BEGIN", "COMMIT"]
        assert len(fake_conn.statements) == 2
        assert fake_pool.released == 1

    def test_rolls_back_and_reraises_original_error(self, fake_pool, fake_conn):
        coordinator = TransactionCoordinator(fake_pool)
        failure = ValueError("second statement failed")

        def work(conn):
            conn.execute("DELETE FROM stores WHERE id = %s", (1,))
            raise failure

        with pytest.raises(ValueError) as exc_info:
            coordinator.run(work, operation="delete_franchise")

        assert exc_info.value is failure
        assert fake_conn.events == ["BEGIN", "ROLLBACK"]
        assert fake_pool.acquired == fake_pool.released == 1

    def test_statements_run_in_program_order_on_one_connection(
        self, fake_pool, fake_conn
    ):
        coordinator = TransactionCoordinator(fake_pool)

        coordinator.run(
            lambda conn: [conn.execute(f"SELECT {i}") for i in range(3)]
        )

        assert [sql for sql, _ in fake_conn.statements] == [
            "SELECT 0",
            "SELECT 1",
            "SELECT 2",
        ]
        assert fake_pool.acquired == 1
