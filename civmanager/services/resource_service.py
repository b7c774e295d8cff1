"""Resource ledger for a civilization's four-counter economy.

Counters never go negative. ``consume_resource`` and ``adjust_resources`` are
single conditional UPDATE statements, so the balance check and the write
happen atomically in the database rather than as a read followed by a write.
The balance row is only read afterwards, to return it or to explain a
rejection.
"""

import logging
from typing import Mapping

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from civmanager.errors import InsufficientResource, InvalidOperation, NotFound, TransientStoreFailure
from civmanager.models.civilization import Civilization
from civmanager.models.civilization_resources import (
    MAX_RESOURCE_VALUE,
    RESOURCE_NAMES,
    STARTING_RESOURCES,
    CivilizationResources,
)

logger = logging.getLogger(__name__)

# Can be raised but never spent
NON_CONSUMABLE: frozenset[str] = frozenset({"military_power"})


def _validate_resource(resource: str) -> None:
    if resource not in RESOURCE_NAMES:
        raise InvalidOperation(f"Unknown resource: '{resource}'")


def _validate_amount(amount: int) -> None:
    if abs(amount) > MAX_RESOURCE_VALUE:
        raise InvalidOperation(f"Amount out of range: {amount}")


async def create_civilization_resources(
    civilization: Civilization, db: AsyncSession
) -> CivilizationResources:
    """Add the starting balance for a newly founded civilization.

    Only flushes; the founding transaction owns the commit.
    """
    resources = CivilizationResources(civilization_id=civilization.id, **STARTING_RESOURCES)
    db.add(resources)
    await db.flush()
    return resources


async def get_resources(civilization_id: int, db: AsyncSession) -> CivilizationResources | None:
    """Fetch the current balance, always re-reading the row from the database."""
    result = await db.execute(
        select(CivilizationResources)
        .where(CivilizationResources.civilization_id == civilization_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _require_resources(civilization_id: int, db: AsyncSession) -> CivilizationResources:
    resources = await get_resources(civilization_id, db)
    if resources is None:
        raise NotFound("Resources for civilization", civilization_id)
    return resources


async def _execute_update(db: AsyncSession, stmt) -> int:
    """Run a guarded UPDATE and commit it. Returns the number of rows matched."""
    try:
        result = await db.execute(stmt.execution_options(synchronize_session=False))
        rowcount = result.rowcount
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Resource update failed")
        raise TransientStoreFailure("Could not update resources, please retry") from exc
    return rowcount


async def add_resource(
    civilization_id: int, resource: str, amount: int, db: AsyncSession
) -> CivilizationResources:
    """Increase a counter by ``amount``.

    A negative ``amount`` that would take the counter below zero clamps it to
    zero instead of failing. The API only accepts positive amounts. A counter
    is never raised past ``MAX_RESOURCE_VALUE``.
    """
    _validate_resource(resource)
    _validate_amount(amount)
    column = getattr(CivilizationResources, resource)
    new_value = case((column + amount < 0, 0), else_=column + amount)
    conditions = [CivilizationResources.civilization_id == civilization_id]
    if amount > 0:
        conditions.append(column <= MAX_RESOURCE_VALUE - amount)
    stmt = (
        update(CivilizationResources)
        .where(*conditions)
        .values({resource: new_value, "updated_at": func.now()})
    )
    if await _execute_update(db, stmt) == 0:
        current = await _require_resources(civilization_id, db)
        raise InvalidOperation(
            f"{resource} cannot exceed {MAX_RESOURCE_VALUE} (has {getattr(current, resource)})"
        )
    return await _require_resources(civilization_id, db)


async def consume_resource(
    civilization_id: int, resource: str, amount: int, db: AsyncSession
) -> CivilizationResources:
    """Spend ``amount`` of a counter, failing without any write if it is short."""
    if resource in NON_CONSUMABLE:
        raise InvalidOperation("Military power can only be increased")
    _validate_resource(resource)
    if amount <= 0:
        raise InvalidOperation("Amount to consume must be positive")
    _validate_amount(amount)

    column = getattr(CivilizationResources, resource)
    stmt = (
        update(CivilizationResources)
        .where(
            CivilizationResources.civilization_id == civilization_id,
            column >= amount,
        )
        .values({resource: column - amount, "updated_at": func.now()})
    )
    if await _execute_update(db, stmt) == 0:
        current = await _require_resources(civilization_id, db)
        available = getattr(current, resource)
        logger.info(
            "Civilization %s cannot consume %s %s (has %s)",
            civilization_id,
            amount,
            resource,
            available,
        )
        raise InsufficientResource(resource, requested=amount, available=available)
    return await _require_resources(civilization_id, db)


async def adjust_resources(
    civilization_id: int, deltas: Mapping[str, int], db: AsyncSession
) -> CivilizationResources:
    """Apply several signed deltas at once, all or nothing.

    If any counter would end up negative, or above ``MAX_RESOURCE_VALUE``,
    nothing is written and the first offending counter, in declaration order,
    is reported.
    """
    unknown = sorted(name for name in deltas if name not in RESOURCE_NAMES)
    if unknown:
        raise InvalidOperation(f"Unknown resource: '{unknown[0]}'")
    for delta in deltas.values():
        _validate_amount(delta)

    changes = {name: deltas[name] for name in RESOURCE_NAMES if deltas.get(name)}
    if not changes:
        return await _require_resources(civilization_id, db)

    guards = [
        getattr(CivilizationResources, name) >= -delta
        if delta < 0
        else getattr(CivilizationResources, name) <= MAX_RESOURCE_VALUE - delta
        for name, delta in changes.items()
    ]
    values = {name: getattr(CivilizationResources, name) + delta for name, delta in changes.items()}
    values["updated_at"] = func.now()
    stmt = (
        update(CivilizationResources)
        .where(CivilizationResources.civilization_id == civilization_id, *guards)
        .values(values)
    )
    if await _execute_update(db, stmt) == 0:
        current = await _require_resources(civilization_id, db)
        for name, delta in changes.items():
            available = getattr(current, name)
            if available + delta < 0:
                logger.info(
                    "Civilization %s adjustment rejected: %s would drop to %s",
                    civilization_id,
                    name,
                    available + delta,
                )
                raise InsufficientResource(name, requested=-delta, available=available)
            if available + delta > MAX_RESOURCE_VALUE:
                raise InvalidOperation(f"{name} cannot exceed {MAX_RESOURCE_VALUE} (has {available})")
        # The guard failed but the re-read balance covers every delta: another
        # writer changed the row between the two statements.
        raise TransientStoreFailure("Resources changed during adjustment, please retry")
    return await _require_resources(civilization_id, db)
