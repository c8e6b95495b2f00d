"""Tests for credential store implementations."""

import pytest
import pytest_asyncio

from grammar_api.exceptions import ConflictError
from grammar_api.storage import InMemoryUserRepository, SQLUserRepository, create_repository


class TestCreateRepository:
    """Test repository factory."""

    def test_memory_url(self):
        assert isinstance(create_repository("memory://"), InMemoryUserRepository)

    def test_sqlite_url(self):
        repository = create_repository("sqlite+aiosqlite:///./data/users.db")

        assert isinstance(repository, SQLUserRepository)


class TestInMemoryUserRepository:
    """Test dict-backed repository."""

    @pytest.mark.asyncio
    async def test_create_and_get(self):
        repository = InMemoryUserRepository()
        await repository.startup()

        await repository.create("ann", "hash")
        user = await repository.get("ann")

        assert user["username"] == "ann"
        assert user["password"] == "hash"
        assert "created_at" in user
        assert await repository.get("bob") is None

    @pytest.mark.asyncio
    async def test_duplicate_is_rejected(self):
        repository = InMemoryUserRepository()
        await repository.create("ann", "first")

        with pytest.raises(ConflictError):
            await repository.create("ann", "second")

        assert (await repository.get("ann"))["password"] == "first"

    @pytest.mark.asyncio
    async def test_returned_record_is_a_copy(self):
        repository = InMemoryUserRepository()
        await repository.create("ann", "hash")

        user = await repository.get("ann")
        user["password"] = "changed"

        assert (await repository.get("ann"))["password"] == "hash"


@pytest_asyncio.fixture
async def sql_repository(tmp_path):
    repository = SQLUserRepository(f"sqlite+aiosqlite:///{tmp_path / 'nested' / 'users.db'}")
    await repository.startup()
    yield repository
    await repository.shutdown()


class TestSQLUserRepository:
    """Test SQL repository against a file-backed SQLite database."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, sql_repository: SQLUserRepository):
        await sql_repository.create("ann", "hash")

        user = await sql_repository.get("ann")

        assert user["username"] == "ann"
        assert user["password"] == "hash"
        assert await sql_repository.get("bob") is None

    @pytest.mark.asyncio
    async def test_duplicate_is_rejected(self, sql_repository: SQLUserRepository):
        await sql_repository.create("ann", "first")

        with pytest.raises(ConflictError):
            await sql_repository.create("ann", "second")

        assert (await sql_repository.get("ann"))["password"] == "first"

    @pytest.mark.asyncio
    async def test_startup_is_idempotent(self, sql_repository: SQLUserRepository):
        await sql_repository.create("ann", "hash")
        await sql_repository.shutdown()

        await sql_repository.startup()

        assert (await sql_repository.get("ann"))["username"] == "ann"
