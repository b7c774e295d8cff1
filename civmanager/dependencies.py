from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from civmanager.database import get_db
from civmanager.errors import TransientStoreFailure
from civmanager.models.civilization import Civilization
from civmanager.models.user import User
from civmanager.services.auth_service import ACCESS, RECOVERY, get_user_for_token
from civmanager.services.civilization_service import get_civilization_for_user

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


async def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    credentials_error = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if token is None:
        raise credentials_error
    user = await get_user_for_token(db, token, ACCESS)
    if user is None:
        raise credentials_error
    return user


async def get_session_identity(
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> tuple[User | None, bool]:
    """Who is calling, and whether they hold a recovery token. Never raises."""
    if token is None:
        return None, False
    user = await get_user_for_token(db, token, RECOVERY)
    if user is not None:
        return user, True
    return await get_user_for_token(db, token, ACCESS), False


async def get_current_civilization(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Civilization:
    try:
        civilization = await get_civilization_for_user(db, current_user.id)
    except TransientStoreFailure as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    if civilization is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Civilization not found")
    return civilization
