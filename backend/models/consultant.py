"""Consultant model definitions."""

from sqlalchemy import Column, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from backend.database import Base


class Consultant(Base):
    """A bookable consultant profile linked to a user account."""
    __tablename__ = "consultants"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    specialty = Column(String)
    contact_email = Column(String)
    contact_phone = Column(String)
    mode_of_training = Column(String, default="online")  # online/offline/hybrid
    price_per_session = Column(Float)
    currency = Column(String, default="INR")

    user = relationship("User")
