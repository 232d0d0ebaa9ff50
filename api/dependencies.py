"""API Dependencies - Authentication"""
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from functools import lru_cache
from uuid import UUID

from domain.auth import User, UserInDB
from domain.repositories import UserRepository
from infrastructure.repositories.in_memory_repositories import InMemoryUserRepository
from infrastructure.security import decode_access_token, get_password_hash
from api.schemas import TokenData

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

# Demo accounts; registration lives outside the booking service.
# Passwords are hashed when the directory is first built.
_seed_users = [
    {
        "user_id": UUID("123e4567-e89b-12d3-a456-426614174000"),
        "username": "admin",
        "full_name": "Admin User",
        "email": "admin@example.com",
        "plain_password": "admin123",
    },
    {
        "user_id": UUID("6f1c2a9e-3b7d-4e58-9a21-5c0d8e4b7f10"),
        "username": "guest",
        "full_name": "Guest User",
        "email": "guest@example.com",
        "plain_password": "guest123",
    },
]


def build_user_repository(seed=_seed_users) -> InMemoryUserRepository:
    users = []
    for entry in seed:
        user_dict = dict(entry)
        user_dict["hashed_password"] = get_password_hash(user_dict.pop("plain_password"))
        users.append(UserInDB(**user_dict))
    return InMemoryUserRepository(users)


@lru_cache(maxsize=1)
def get_user_repository() -> UserRepository:
    return build_user_repository()


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    users: UserRepository = Depends(get_user_repository)
) -> UserInDB:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        username: str = payload.get("sub")
        if username is None:
            raise credentials_exception
        token_data = TokenData(username=username)
    except JWTError:
        raise credentials_exception

    user = await users.find_by_username(token_data.username)
    if user is None:
        raise credentials_exception
    return user


async def get_current_active_user(current_user: User = Depends(get_current_user)):
    if current_user.disabled:
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user
