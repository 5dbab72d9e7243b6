import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import jwt
from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import InvalidTokenError
from psycopg import AsyncConnection
from psycopg.errors import UniqueViolation
from pydantic import BaseModel, Field

from .config import settings
from .database import get_db_connection
from .services.goals_service import create_default_goals
from .services.salary_service import create_salary

logger = logging.getLogger(__name__)

http_bearer = HTTPBearer(auto_error=False)
router = APIRouter(tags=["auth"])


class UserOut(BaseModel):
    id: UUID
    email: str


class AuthResponse(BaseModel):
    access_token: str
    user: UserOut


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3, max_length=160)
    password: str = Field(min_length=8, max_length=72)
    salary: Decimal = Field(ge=Decimal("0"), max_digits=14, decimal_places=2)


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=160)
    password: str = Field(min_length=1, max_length=72)


def create_access_token(user_id: UUID, *, now: datetime | None = None) -> str:
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "type": "access",
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(hours=settings.access_token_ttl_hours)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except InvalidTokenError as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc

    if payload.get("type") != "access":
        raise HTTPException(status_code=401, detail="Invalid token type")

    return payload


def _normalize_email(email: str) -> str:
    normalized = email.strip().lower()
    if not normalized or "@" not in normalized:
        raise HTTPException(status_code=422, detail="Invalid email")
    return normalized


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
) -> UUID:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Missing bearer token")

    payload = _decode_access_token(credentials.credentials)

    subject = payload.get("sub")
    try:
        return UUID(subject)
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=401, detail="Invalid token subject") from exc


@router.post("/users", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    connection: AsyncConnection = Depends(get_db_connection),
) -> AuthResponse:
    """
    Create a user with a salary and the default goal split.

    Request example:
    {
      "email": "ana@example.com",
      "password": "s3cret-pass",
      "salary": "10000.00"
    }
    """
    email = _normalize_email(body.email)

    try:
        async with connection.transaction():
            async with connection.cursor() as cursor:
                await cursor.execute(
                    """
                    INSERT INTO users (email, password_hash)
                    VALUES (%s, crypt(%s, gen_salt('bf', 12)))
                    RETURNING id, email
                    """,
                    (email, body.password),
                )
                row = await cursor.fetchone()

            await create_salary(connection, row["id"], body.salary)
            await create_default_goals(connection, row["id"])
    except UniqueViolation as exc:
        raise HTTPException(status_code=409, detail="An account with this email already exists") from exc

    logger.info("Registered user=%s", row["id"])
    return AuthResponse(
        access_token=create_access_token(row["id"]),
        user=UserOut(id=row["id"], email=row["email"]),
    )


@router.post("/sessions", response_model=AuthResponse, status_code=201)
async def login(
    body: LoginRequest,
    connection: AsyncConnection = Depends(get_db_connection),
) -> AuthResponse:
    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            SELECT id, email
            FROM users
            WHERE email = LOWER(%s)
              AND password_hash = crypt(%s, password_hash)
            """,
            (body.email.strip(), body.password),
        )
        row = await cursor.fetchone()

    if row is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return AuthResponse(
        access_token=create_access_token(row["id"]),
        user=UserOut(id=row["id"], email=row["email"]),
    )
