"""Authentication routes and the request identity context."""

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from . import schemas
from .access import Caller
from .core import get_settings
from .database import get_db
from .errors import AuthenticationError, Conflict, GuardedRoute
from .models import Role, User
from .repository import UserRepository

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)
router = APIRouter(prefix="/auth", tags=["auth"], route_class=GuardedRoute)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Compare a plain password with its hashed value."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate a password hash using the configured context."""
    return pwd_context.hash(password)


def create_access_token(
    data: dict, expires_delta: timedelta | None = None, scope: str = "access"
) -> str:
    """Create a signed JWT access token."""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire, "scope": scope})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_refresh_token(data: dict) -> str:
    """Create a JWT refresh token with a longer lifetime."""
    settings = get_settings()
    return create_access_token(
        data,
        expires_delta=timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES),
        scope="refresh",
    )


def token_claims(user: User) -> dict:
    """Claims identifying ``user`` inside issued tokens."""
    return {"sub": str(user.id), "role": user.role}


def issue_tokens(user: User) -> schemas.Token:
    claims = token_claims(user)
    return schemas.Token(
        access_token=create_access_token(claims),
        refresh_token=create_refresh_token(claims),
    )


def decode_token(token: str, scope: str) -> schemas.TokenData:
    """
    Decode a JWT and check its scope.

    Raises:
        AuthenticationError: If the token is invalid, expired or of
            another scope.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise AuthenticationError()
    token_data = schemas.TokenData(
        sub=payload.get("sub"),
        role=payload.get("role"),
        scope=payload.get("scope", "access"),
    )
    if token_data.scope != scope:
        raise AuthenticationError("Invalid token scope")
    return token_data


def caller_from_claims(token_data: schemas.TokenData) -> Caller:
    """
    Build the request identity from decoded token claims.

    Raises:
        AuthenticationError: If the user id is missing or not an integer, or
            the role claim is absent or unknown.
    """
    try:
        user_id = int(token_data.sub)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid user id claim")
    if token_data.role not in {role.value for role in Role}:
        raise AuthenticationError("Invalid role claim")
    return Caller(id=user_id, role=token_data.role)


async def get_current_caller(token: str | None = Depends(oauth2_scheme)) -> Caller:
    """Dependency that returns the caller's id and role from the bearer token."""

    if not token:
        raise AuthenticationError("Not authenticated")
    return caller_from_claims(decode_token(token, scope="access"))


def create_user(
    db: Session,
    user_in: schemas.UserCreate,
    hashed_password: str,
    role: Role = Role.USER,
) -> User:
    """
    Create and persist a new user.

    Raises:
        Conflict: If the username is already taken.
    """
    users = UserRepository(db)
    if users.exists(User.username == user_in.username):
        raise Conflict("User already exists")
    return users.create(
        User(
            username=user_in.username,
            first_name=user_in.first_name,
            last_name=user_in.last_name,
            hashed_password=hashed_password,
            role=role.value,
        )
    )


@router.post(
    "/signup", response_model=schemas.UserOut, status_code=status.HTTP_201_CREATED
)
def signup(user_in: schemas.UserCreate, db: Session = Depends(get_db)):
    """Register a new account with the ``user`` role."""

    logger.info("Signup attempt for username %s", user_in.username)
    return create_user(db, user_in, get_password_hash(user_in.password))


@router.post("/login", response_model=schemas.Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)
):
    """Authenticate user and return access/refresh token pair."""

    users = UserRepository(db)
    user = users.get_by_username(form_data.username)
    if (
        not user
        or user.is_deleted
        or not verify_password(form_data.password, user.hashed_password)
    ):
        logger.info("Failed login attempt for username %s", form_data.username)
        raise AuthenticationError("Invalid credentials")
    user.last_login = datetime.now(timezone.utc)
    users.update(user)
    return issue_tokens(user)


@router.post("/refresh", response_model=schemas.Token)
def refresh_tokens(payload: schemas.TokenRefresh, db: Session = Depends(get_db)):
    """Issue a new pair of tokens based on a refresh token."""

    caller = caller_from_claims(decode_token(payload.refresh_token, scope="refresh"))
    user = UserRepository(db).get(User.id == caller.id)
    if not user or user.is_deleted:
        raise AuthenticationError("User not found")
    return issue_tokens(user)
