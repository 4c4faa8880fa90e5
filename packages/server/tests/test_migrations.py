"""
The migration chain must build the same tables and columns the models declare.
"""

from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic.runtime.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import SQLModel

import app.models  # noqa: F401

VERSIONS = Path(__file__).resolve().parents[1] / "alembic" / "versions"


def _load(name: str):
    spec = importlib.util.spec_from_file_location(name, VERSIONS / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
async def bare_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'migrate.db'}")
    yield engine
    await engine.dispose()


def _run(connection, step) -> None:
    context = MigrationContext.configure(connection)
    with Operations.context(context):
        step()


def _columns(connection) -> dict[str, set[str]]:
    inspector = sa.inspect(connection)
    return {
        table: {column["name"] for column in inspector.get_columns(table)}
        for table in inspector.get_table_names()
    }


async def test_initial_schema_matches_models(bare_engine):
    migration = _load("0001_initial_schema")
    async with bare_engine.begin() as conn:
        await conn.run_sync(_run, migration.upgrade)
        migrated = await conn.run_sync(_columns)

    expected = {
        name: {column.name for column in table.columns}
        for name, table in SQLModel.metadata.tables.items()
    }
    assert migrated == expected


async def test_downgrade_drops_everything(bare_engine):
    migration = _load("0001_initial_schema")
    async with bare_engine.begin() as conn:
        await conn.run_sync(_run, migration.upgrade)
        await conn.run_sync(_run, migration.downgrade)
        remaining = await conn.run_sync(_columns)
    assert remaining == {}
