from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.freelancer_profile import FreelancerProfile
from ..models.user import User

router = APIRouter(prefix="/api", tags=["Freelancers"])

LIST_LIMIT = 50


@router.get("/freelancers")
def list_freelancers(db: Session = Depends(get_db)):
    rows = (
        db.query(User, FreelancerProfile)
        .outerjoin(FreelancerProfile, FreelancerProfile.user_id == User.id)
        .filter(User.is_active.is_(True), User.role.in_(["freelancer", "both"]))
        .order_by(User.created_at.desc(), User.id.desc())
        .limit(LIST_LIMIT)
        .all()
    )

    items = []
    for user, profile in rows:
        items.append({
            "id": user.id,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "profile_image": user.profile_image,
            "title": (profile and profile.title) or "Freelancer",
            "hourly_rate": (profile and profile.hourly_rate) or 0,
            "bio": (profile and profile.bio) or "No bio available",
            "experience_years": (profile and profile.experience_years) or 0,
            # Reviews aren't modelled yet.
            "avg_rating": 0,
            "review_count": 0,
        })
    return items
