"""Unit tests for the command line entry points."""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import select

from docuvault.core.database.entities.users import Role, User
from docuvault.core.database.utils import create_engine, create_sessionmaker
from docuvault.server import cli
from docuvault.server.services.users import verify_password


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}"


async def test_seed_creates_roles_and_master_admin(database_url):
    created = await cli.seed_database(database_url, "Root@DocuVault.example.com", "s3cret-pass", "Mia", "Master")

    engine = create_engine(database_url)
    try:
        async with create_sessionmaker(engine)() as session:
            roles = (await session.execute(select(Role.name))).scalars().all()
            (user,) = (await session.execute(select(User))).scalars().all()
    finally:
        await engine.dispose()

    assert created is True
    assert sorted(roles) == ["SUPER_ADMIN", "TENANT_ADMIN", "USER"]
    assert user.email == "root@docuvault.example.com"
    assert user.tenant_id is None
    assert verify_password("s3cret-pass", user.password_hash)


async def test_seed_is_idempotent(database_url):
    assert await cli.seed_database(database_url, "root@example.com", "s3cret-pass", "Mia", "Master") is True
    assert await cli.seed_database(database_url, "root@example.com", "other-pass", "Mia", "Master") is False


def test_seed_command_passes_arguments(database_url):
    with patch.object(cli, "seed_database", new=MagicMock()) as seed_database, patch.object(cli, "setup_logging"):
        with patch.object(cli.asyncio, "run") as run:
            cli.seed(["--password", "s3cret-pass", "--email", "root@example.com", "--database-url", database_url])

    seed_database.assert_called_once_with(database_url, "root@example.com", "s3cret-pass", "Master", "Admin")
    run.assert_called_once_with(seed_database.return_value)


def test_seed_command_requires_a_password(capsys):
    with pytest.raises(SystemExit):
        cli.seed([])

    assert "--password" in capsys.readouterr().err


def test_seed_command_exits_on_invalid_input(database_url):
    with patch.object(cli, "setup_logging"), patch.object(cli, "seed_database", new=MagicMock()):
        with patch.object(cli.asyncio, "run", side_effect=ValueError("bad email")):
            with pytest.raises(SystemExit) as exc_info:
                cli.seed(["--password", "s3cret-pass", "--database-url", database_url])

    assert exc_info.value.code == 1


def test_run_server_starts_uvicorn():
    with patch("uvicorn.run") as run:
        cli.run_server(["--host", "127.0.0.1", "--port", "9000"])

    run.assert_called_once()
    assert run.call_args[0][0] == "docuvault.server.main:app"
    assert run.call_args[1]["host"] == "127.0.0.1"
    assert run.call_args[1]["port"] == 9000
    assert run.call_args[1]["reload"] is False
