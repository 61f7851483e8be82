"""Company model.

A company is the terminal artifact of registration. It is created either by a
direct full registration or materialized from a pre-registration, in which
case ``pre_registration_id`` links back to the reservation.
"""

import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Text, Float, ForeignKey, Index, Uuid, text
from registrar.database import Base, utcnow


class CompanyStatus:
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    ALL = (PENDING, APPROVED, REJECTED)


class Company(Base):
    __tablename__ = "companies"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, index=True)
    # "" when the company has no registry code
    code = Column(String(4), nullable=False, default="")
    registrant_name = Column(String(255), nullable=False, default="")
    email = Column(String(255), nullable=False, default="")
    phone_number = Column(String(50), nullable=False, default="")
    address = Column(Text, nullable=False, default="")
    logo = Column(String(500), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    business_type = Column(String(100), nullable=False, default="")
    registration_number = Column(String(100), nullable=False, default="")
    tax_id = Column(String(50), nullable=False, default="")
    website = Column(String(500), nullable=False, default="")
    registration_fee = Column(Float, nullable=False, default=0)

    group_id = Column(Uuid, ForeignKey("groups.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(String(20), nullable=False, default=CompanyStatus.PENDING)
    payment_status = Column(String(20), nullable=False, default="pending")
    paid = Column(Boolean, nullable=False, default=False)
    spent = Column(Boolean, nullable=False, default=False)
    imported = Column(Boolean, nullable=False, default=False)

    pre_registration_id = Column(
        Uuid,
        ForeignKey("pre_registrations.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )

    rejection_reason = Column(Text, nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        # Uniqueness is enforced here, not by pre-checks: the insert is the gate
        Index(
            "uq_companies_code",
            "code",
            unique=True,
            postgresql_where=text("code <> ''"),
            sqlite_where=text("code <> ''"),
        ),
        Index(
            "uq_companies_name_code",
            "name",
            "code",
            unique=True,
            postgresql_where=text("code <> ''"),
            sqlite_where=text("code <> ''"),
        ),
        Index(
            "uq_companies_name_without_code",
            "name",
            unique=True,
            postgresql_where=text("code = ''"),
            sqlite_where=text("code = ''"),
        ),
    )

    def __repr__(self):
        return f"<Company {self.name} code={self.code or '-'} status={self.status}>"
