from sqlalchemy import Column, Integer, String, DateTime

from models.base import Base, utcnow


class Organization(Base):
    """
    Tenant boundary. Every user, request and purchase order belongs to exactly one organization.
    """
    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
