import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from ..utils.error_handlers import (
    AuthError,
    ConflictError,
    ValidationError,
    get_error_message,
    handle_database_error,
)
from ..utils.jwt import create_access_token
from ..utils.security import hash_password, verify_password
from ..utils.validation import validate_email, validate_password, validate_role, validate_string_field

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])

DEMO_EMAIL = "demo@gigconnect.com"
DEMO_PASSWORD = "demo123"


class Location(BaseModel):
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str
    role: str  # client / freelancer / both
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    location: Location | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


def _user_to_public(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "firstName": user.first_name,
        "lastName": user.last_name,
    }


@router.post("/auth/register", status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    email = validate_email(payload.email)
    validate_password(payload.password)
    role = validate_role(payload.role)
    first_name = validate_string_field(payload.first_name, "firstName", max_length=100)
    last_name = validate_string_field(payload.last_name, "lastName", max_length=100)

    # Check if email already exists
    try:
        existing = db.query(User.id).filter(User.email == email).first()
    except SQLAlchemyError as e:
        raise handle_database_error(e, "checking existing user") from e
    if existing:
        raise ConflictError(get_error_message("email_exists"))

    try:
        hashed = hash_password(payload.password)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    location = payload.location or Location()
    user = User(
        email=email,
        password_hash=hashed,
        role=role,
        first_name=first_name,
        last_name=last_name,
        latitude=location.lat,
        longitude=location.lng,
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as e:
        # Lost a race with a concurrent registration for the same email.
        db.rollback()
        logger.info("Duplicate registration for %s rejected by unique index", email)
        raise ConflictError(get_error_message("email_exists")) from e
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "creating user") from e

    logger.info("Registered user %s (%s)", user.id, user.role)
    token = create_access_token(user.id, user.role)
    return {"user": _user_to_public(user), "token": token}


@router.post("/auth/login")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    email = validate_email(payload.email)
    if not payload.password:
        raise ValidationError("Password is required")

    try:
        user = db.query(User).filter(User.email == email).first()
    except SQLAlchemyError as e:
        raise handle_database_error(e, "login") from e

    # Same answer for unknown email and wrong password.
    if not user or not verify_password(payload.password, user.password_hash):
        raise AuthError(get_error_message("invalid_credentials"))

    if not user.is_active:
        raise AuthError(get_error_message("invalid_credentials"))

    token = create_access_token(user.id, user.role)
    return {"user": _user_to_public(user), "token": token}


@router.post("/demo-user")
def create_demo_user(db: Session = Depends(get_db)):
    """Seed a demo account (role `both`) if it isn't there yet."""
    if db.query(User.id).filter(User.email == DEMO_EMAIL).first():
        return {"message": "Demo user already exists"}

    user = User(
        email=DEMO_EMAIL,
        password_hash=hash_password(DEMO_PASSWORD),
        role="both",
        first_name="Demo",
        last_name="User",
    )
    try:
        db.add(user)
        db.commit()
    except IntegrityError:
        db.rollback()
        return {"message": "Demo user already exists"}
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "creating demo user") from e

    logger.info("Demo user created")
    return {"message": "Demo user created"}
