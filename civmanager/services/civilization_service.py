"""Civilization lookup and the one-time founding transaction."""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from civmanager.errors import AlreadyFounded, TransientStoreFailure
from civmanager.models.civilization import Civilization
from civmanager.models.civilization_resources import CivilizationResources
from civmanager.models.user import User
from civmanager.services.resource_service import create_civilization_resources, get_resources

logger = logging.getLogger(__name__)


async def get_civilization_for_user(db: AsyncSession, user_id: int) -> Civilization | None:
    """At most one civilization exists per account.

    A store error rolls the session back before it is reported, so the same
    session can retry.
    """
    try:
        result = await db.execute(select(Civilization).where(Civilization.user_id == user_id))
    except SQLAlchemyError as exc:
        await db.rollback()
        raise TransientStoreFailure("Could not look up civilization") from exc
    return result.scalar_one_or_none()


async def get_civilization(db: AsyncSession, civilization_id: int) -> Civilization | None:
    result = await db.execute(select(Civilization).where(Civilization.id == civilization_id))
    return result.scalar_one_or_none()


async def found_civilization(
    db: AsyncSession, user: User, name: str
) -> tuple[Civilization, CivilizationResources]:
    """Create the user's civilization together with its starting resources.

    Both rows are committed in one transaction. A civilization left without
    resources by an earlier partial founding gets its resources seeded and is
    returned as is.
    """
    # Read before any rollback can expire the instance
    user_id = user.id
    try:
        existing = await get_civilization_for_user(db, user_id)
        if existing is not None:
            resources = await get_resources(existing.id, db)
            if resources is not None:
                raise AlreadyFounded()
            logger.warning(
                "Civilization %s of user %s has no resources; completing founding",
                existing.id,
                user_id,
            )
            civilization = existing
        else:
            civilization = Civilization(user_id=user_id, name=name)
            db.add(civilization)

        await db.flush()
        resources = await create_civilization_resources(civilization, db)
        await db.commit()
    except IntegrityError as exc:
        # Lost a race with another founding request for the same account
        await db.rollback()
        raise AlreadyFounded() from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Founding failed for user %s", user_id)
        raise TransientStoreFailure("Could not found civilization, please retry") from exc

    await db.refresh(civilization)
    await db.refresh(resources)
    logger.info("User %s founded civilization %s (%s)", user_id, civilization.id, civilization.name)
    return civilization, resources


async def rename_civilization(db: AsyncSession, civilization: Civilization, name: str) -> Civilization:
    civilization_id = civilization.id
    civilization.name = name
    civilization.updated_at = datetime.now(timezone.utc)
    try:
        await db.commit()
        await db.refresh(civilization)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Rename failed for civilization %s", civilization_id)
        raise TransientStoreFailure("Could not rename civilization, please retry") from exc
    return civilization
