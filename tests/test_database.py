"""Tests for engine configuration."""

from staffing_payroll.database import engine_options


def test_postgres_pool_options():
    options = engine_options("postgresql+asyncpg://u:p@localhost:5432/staffing_payroll")

    assert options["pool_pre_ping"] is True
    assert options["pool_size"] == 10


def test_sqlite_has_no_pool_options():
    assert engine_options("sqlite+aiosqlite:///:memory:") == {}
