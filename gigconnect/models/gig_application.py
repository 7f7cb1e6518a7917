from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class GigApplication(Base):
    __tablename__ = "gig_applications"
    __table_args__ = (
        UniqueConstraint("gig_id", "freelancer_id", name="uq_gig_applications_gig_freelancer"),
    )

    id = Column(Integer, primary_key=True, index=True)
    gig_id = Column(Integer, ForeignKey("gigs.id"), nullable=False)
    freelancer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    cover_letter = Column(Text, nullable=True)
    proposed_rate = Column(Float, nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    gig = relationship("Gig", back_populates="applications")
    freelancer = relationship("User", back_populates="applications")
