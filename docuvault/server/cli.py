"""
Command line entry points.

``docuvault-server`` runs the API with uvicorn; ``docuvault-seed`` prepares a
database: tables, the built-in roles and a master admin account.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional, Sequence

from docuvault.core.database.repositories import build_sql_repos_from_session
from docuvault.core.database.utils import create_all, create_engine, create_sessionmaker
from docuvault.core.logging_config import get_logger, setup_logging
from docuvault.core.models.domain.enums import RoleName
from docuvault.core.models.io.users import UserCreate
from docuvault.server.core.config import settings
from docuvault.server.services.email import EmailService
from docuvault.server.services.users import UserService, ensure_builtin_roles

logger = get_logger(__name__)


def run_server(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Run the DocuVault API server")
    parser.add_argument("--host", default=settings.server_host, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.server_port, help="Bind port")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    args = parser.parse_args(argv)

    import uvicorn

    uvicorn.run(
        "docuvault.server.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


async def seed_database(database_url: str, email: str, password: str, first_name: str, last_name: str) -> bool:
    """
    Create tables, built-in roles and a master admin.

    Returns:
        True when the master admin was created, False when it already existed
    """
    engine = create_engine(database_url)
    try:
        await create_all(engine)
        async with create_sessionmaker(engine)() as session:
            repos = build_sql_repos_from_session(session=session)
            roles = await ensure_builtin_roles(repos)
            logger.info(f"Role catalogue ready: {', '.join(role.name for role in roles)}")

            if await repos.users.get_by_email(email, None) is not None:
                logger.info(f"Master admin {email} already exists")
                return False

            super_admin = next(role for role in roles if role.name == RoleName.super_admin.value)
            service = UserService(repos, EmailService(settings.smtp))
            await service.create_user(
                None,
                UserCreate(
                    email=email,
                    first_name=first_name,
                    last_name=last_name,
                    password=password,
                    role_ids=[super_admin.id],
                    send_invite=False,
                ),
            )
            logger.info(f"Master admin {email} created")
            return True
    finally:
        await engine.dispose()


def seed(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Create tables, built-in roles and a master admin")
    parser.add_argument("--email", default=settings.master_admin_email, help="Master admin email")
    parser.add_argument("--password", required=True, help="Master admin password (8-72 characters)")
    parser.add_argument("--first-name", default="Master")
    parser.add_argument("--last-name", default="Admin")
    parser.add_argument("--database-url", default=settings.database_url, help="Overrides DATABASE_URL")
    args = parser.parse_args(argv)

    setup_logging(settings.log_level, enable_file=False)
    try:
        asyncio.run(seed_database(args.database_url, args.email, args.password, args.first_name, args.last_name))
    except ValueError as e:
        logger.error(f"Seeding failed: {e}")
        sys.exit(1)
