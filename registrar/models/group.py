"""Group and GroupMembership models.

A group is a capacity-bounded registration cohort. ``registered_count`` is the
authoritative slot counter; rows created before the counter existed carry
NULL and fall back to the number of memberships.
"""

import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, UniqueConstraint, Uuid
from registrar.database import Base, utcnow


class Group(Base):
    __tablename__ = "groups"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, unique=True)
    time_from = Column(String(5), nullable=False)
    time_to = Column(String(5), nullable=False)
    date = Column(String(20), nullable=False)
    day = Column(String(20), nullable=False, default="")
    max_companies = Column(Integer, nullable=False, default=0)  # 0 = unlimited
    registered_count = Column(Integer, nullable=True, default=0)
    is_closed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Group {self.name} {self.registered_count}/{self.max_companies or 'inf'}>"


class GroupMembership(Base):
    """Ordered company references of a group (ordering by ``id``)."""

    __tablename__ = "group_memberships"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Uuid, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    company_id = Column(Uuid, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    admitted_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("group_id", "company_id", name="uq_group_membership"),
    )
