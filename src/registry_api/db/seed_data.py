"""Seed the registry database with the bootstrap administrator."""

from __future__ import annotations

import logging

from registry_api.config.settings import RegistrySettings
from registry_api.db.security import hash_token
from registry_api.errors import ErrorKind
from registry_api.repo.users import UserRepository
from registry_api.result import Err

LOGGER = logging.getLogger(__name__)


async def seed_admin_account(users: UserRepository, settings: RegistrySettings) -> None:
    """Create or refresh the administrator that owns ``settings.admin_token``."""

    if not settings.admin_token:
        return
    existing = await users.get_by_email(settings.admin_email)
    if isinstance(existing, Err):
        if existing.error.kind is not ErrorKind.NOT_FOUND:
            LOGGER.error("Unable to look up admin account %s: %s", settings.admin_email, existing.error)
            return
        created = await users.create(
            email=settings.admin_email,
            token=settings.admin_token,
            display_name="Administrator",
            is_admin=True,
        )
        if isinstance(created, Err):
            LOGGER.error("Unable to seed admin account %s: %s", settings.admin_email, created.error)
            return
        LOGGER.info("Seeded admin account %s", settings.admin_email)
        return
    if existing.value.token_hash != hash_token(settings.admin_token):
        await users.update_token(existing.value.id, settings.admin_token)
        LOGGER.info("Rotated token of admin account %s", settings.admin_email)


__all__ = ["seed_admin_account"]
