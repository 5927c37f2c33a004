"""Admin Bootstrap — ensures a first admin account exists at startup.

Invariants:
    - Runs only when admin_email, admin_username and admin_password are all set
    - Idempotent: an existing user with that email is promoted, never duplicated
    - The password is only applied when the account is created
    - A username already held by another account is never overwritten; startup
      continues with a warning and no admin is created
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.core.domain_types import Role
from app.services.identity_store import SqlIdentityStore
from app.services.security import hash_password

logger = logging.getLogger(__name__)


async def ensure_admin(db: AsyncSession, settings: Settings) -> bool:
    """Create or promote the configured admin. Returns True if anything changed."""
    if not (settings.admin_email and settings.admin_username and settings.admin_password):
        return False
    users = SqlIdentityStore(db)
    existing = await users.find_by_email(settings.admin_email)
    if existing:
        if existing.role == Role.ADMIN.value:
            return False
        existing.role = Role.ADMIN.value
        await users.save(existing)
        await db.commit()
        logger.info("Promoted bootstrap user to admin", extra={"user_id": existing.id})
        return True
    holder = await users.find_by_username(settings.admin_username)
    if holder:
        logger.warning(
            "Bootstrap admin skipped: username belongs to another account",
            extra={"user_id": holder.id},
        )
        return False
    user = await users.create(
        username=settings.admin_username,
        email=settings.admin_email,
        password_hash=hash_password(settings.admin_password),
        role=Role.ADMIN,
    )
    await db.commit()
    logger.info("Created bootstrap admin", extra={"user_id": user.id})
    return True
