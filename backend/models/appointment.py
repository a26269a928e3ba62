"""Appointment model definitions."""

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from backend.database import Base


class Appointment(Base):
    """Represents a consultant appointment held by a booking party."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    consultant_id = Column(Integer, ForeignKey("consultants.id"), nullable=False, index=True)
    start_at = Column(DateTime, nullable=False)
    end_at = Column(DateTime, nullable=False)
    status = Column(String, nullable=False, default="pending")
    mode = Column(String)
    price = Column(Float)
    title = Column(String)
    notes = Column(String)
    location = Column(String)
    last_modified_by = Column(Integer, ForeignKey("users.id"))
    # "metadata" is reserved on declarative classes
    extra_metadata = Column("metadata", JSON)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", foreign_keys=[user_id])
    consultant = relationship("Consultant")
