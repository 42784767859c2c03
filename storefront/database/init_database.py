"""
Database initialization: tables, built-in roles and the bootstrap admin account

Run directly to prepare a database:
    python -m storefront.database.init_database
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from storefront.config.settings import Settings, get_settings
from storefront.models.db import ROLE_ADMIN, ROLE_USER, Base, Role, User
from storefront.repositories.role_repository import RoleRepository
from storefront.repositories.user_repository import UserRepository
from storefront.services.token_service import TokenService

logger = logging.getLogger(__name__)

BUILTIN_ROLES = (ROLE_ADMIN, ROLE_USER)


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created successfully")


async def seed_roles(session: AsyncSession) -> list[Role]:
    """Make sure ROLE_ADMIN and ROLE_USER exist"""
    repository = RoleRepository(session)
    roles = []
    for name in BUILTIN_ROLES:
        role = await repository.find_by_name(name)
        if role is None:
            role = await repository.save(Role(name=name))
            logger.info(f"Created role {name}")
        roles.append(role)
    return roles


async def bootstrap_admin(session: AsyncSession, settings: Settings | None = None) -> User | None:
    """Create (or promote) the ADMIN_EMAIL account when admin credentials are configured"""
    settings = settings or get_settings()
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return None

    roles = {role.name: role for role in await seed_roles(session)}
    users = UserRepository(session)
    email = settings.ADMIN_EMAIL.strip().lower()

    user = await users.find_by_email(email)
    if user is None:
        user = User(
            first_name="Admin",
            email=email,
            password_hash=TokenService(settings).get_password_hash(settings.ADMIN_PASSWORD),
            roles=[roles[ROLE_ADMIN], roles[ROLE_USER]],
        )
        user = await users.save(user)
        logger.info(f"Admin account created: {email}")
    elif not user.has_authority(ROLE_ADMIN):
        user.roles.append(roles[ROLE_ADMIN])
        user = await users.save(user)
        logger.info(f"Existing account promoted to admin: {email}")
    return user


async def init_db(engine: AsyncEngine, session: AsyncSession, settings: Settings | None = None) -> None:
    """Create tables, seed roles and bootstrap the admin account"""
    await create_tables(engine)
    await seed_roles(session)
    await bootstrap_admin(session, settings)


async def main() -> None:
    from storefront.database.async_db import async_engine, get_async_db_context

    async with get_async_db_context() as session:
        await init_db(async_engine, session)
    await async_engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
