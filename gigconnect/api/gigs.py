from datetime import datetime
import json
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.gig import Gig
from ..models.gig_application import GigApplication
from ..models.user import User
from ..utils.error_handlers import (
    ConflictError,
    NotFoundError,
    ValidationError,
    get_error_message,
    handle_database_error,
)
from ..utils.jwt import TokenClaims
from ..utils.roles import client_only, freelancer_only
from ..utils.validation import validate_budget, validate_string_field
from .auth import Location

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Gigs"])

LIST_LIMIT = 50


class GigCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str | None = None
    category: str | None = Field(default=None, max_length=100)
    budget_min: float | None = Field(default=None, alias="budgetMin")
    budget_max: float | None = Field(default=None, alias="budgetMax")
    budget_type: str | None = Field(default=None, alias="budgetType", max_length=20)
    location: Location | None = None
    is_remote: bool = Field(default=False, alias="isRemote")
    deadline: datetime | None = None
    required_skills: list[str] | None = Field(default=None, alias="requiredSkills")


class GigApplicationCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    gig_id: int = Field(alias="gigId", gt=0)
    cover_letter: str | None = Field(default=None, alias="coverLetter")
    proposed_rate: float | None = Field(default=None, alias="proposedRate", ge=0)


def _skills_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except ValueError:
        return []
    if not isinstance(parsed, list):
        return []
    return [str(x).strip() for x in parsed if str(x).strip()]


def _gig_to_public(gig: Gig) -> dict:
    return {
        "id": gig.id,
        "client_id": gig.client_id,
        "title": gig.title,
        "description": gig.description,
        "category": gig.category,
        "budget_min": gig.budget_min,
        "budget_max": gig.budget_max,
        "budget_type": gig.budget_type,
        "latitude": gig.latitude,
        "longitude": gig.longitude,
        "is_remote": bool(gig.is_remote),
        "deadline": gig.deadline.isoformat() if gig.deadline else None,
        "required_skills": _skills_list(gig.required_skills),
        "status": gig.status,
        "created_at": gig.created_at.isoformat() if gig.created_at else None,
    }


@router.get("/gigs")
def list_gigs(db: Session = Depends(get_db)):
    """Open gigs, newest first, with the posting client's name."""
    rows = (
        db.query(Gig, User.first_name, User.last_name)
        .join(User, Gig.client_id == User.id)
        .filter(Gig.status == "open")
        .order_by(Gig.created_at.desc(), Gig.id.desc())
        .limit(LIST_LIMIT)
        .all()
    )
    return [
        {**_gig_to_public(gig), "first_name": first_name, "last_name": last_name}
        for gig, first_name, last_name in rows
    ]


@router.post("/gigs", status_code=201)
def create_gig(
    payload: GigCreate,
    db: Session = Depends(get_db),
    user: TokenClaims = Depends(client_only),
):
    title = validate_string_field(payload.title, "title", max_length=200)
    validate_budget(payload.budget_min, payload.budget_max)

    location = payload.location or Location()
    skills = [s.strip() for s in (payload.required_skills or []) if s and s.strip()]
    gig = Gig(
        client_id=user.user_id,
        title=title,
        description=(payload.description or "").strip() or None,
        category=payload.category,
        budget_min=payload.budget_min,
        budget_max=payload.budget_max,
        budget_type=payload.budget_type,
        latitude=location.lat,
        longitude=location.lng,
        is_remote=payload.is_remote,
        deadline=payload.deadline,
        required_skills=json.dumps(skills),
    )
    try:
        db.add(gig)
        db.commit()
        db.refresh(gig)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "creating gig") from e

    logger.info("User %s posted gig %s", user.user_id, gig.id)
    return _gig_to_public(gig)


@router.post("/gig-applications", status_code=201)
def apply_to_gig(
    payload: GigApplicationCreate,
    db: Session = Depends(get_db),
    user: TokenClaims = Depends(freelancer_only),
):
    gig = db.get(Gig, payload.gig_id)
    if gig is None or gig.status != "open":
        raise NotFoundError(get_error_message("gig_not_found"))
    if gig.client_id == user.user_id:
        raise ValidationError("You cannot apply to your own gig")

    existing = (
        db.query(GigApplication.id)
        .filter(GigApplication.gig_id == gig.id, GigApplication.freelancer_id == user.user_id)
        .first()
    )
    if existing:
        raise ConflictError(get_error_message("already_applied"))

    application = GigApplication(
        gig_id=gig.id,
        freelancer_id=user.user_id,
        cover_letter=(payload.cover_letter or "").strip() or None,
        proposed_rate=payload.proposed_rate,
    )
    try:
        db.add(application)
        db.commit()
        db.refresh(application)
    except IntegrityError as e:
        # The unique (gig_id, freelancer_id) index catches concurrent duplicates
        # that slipped past the check above.
        db.rollback()
        raise ConflictError(get_error_message("already_applied")) from e
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "submitting application") from e

    logger.info("User %s applied to gig %s", user.user_id, gig.id)
    return {"id": application.id, "message": "Application submitted"}
