"""PreRegistration model: a lightweight identity reservation."""

import uuid
from sqlalchemy import Column, String, DateTime, Index, Uuid, text
from registrar.database import Base, utcnow


class PreRegistration(Base):
    __tablename__ = "pre_registrations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)  # registrant
    mobile_number = Column(String(50), nullable=False)
    company_name = Column(String(255), nullable=False, index=True)
    code = Column(String(4), nullable=False, default="")
    # Not a FK: the reservation outlives a deleted group
    group_id = Column(Uuid, nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index(
            "uq_pre_registrations_identity",
            "company_name",
            "code",
            unique=True,
            postgresql_where=text("code <> ''"),
            sqlite_where=text("code <> ''"),
        ),
        Index(
            "uq_pre_registrations_name_without_code",
            "company_name",
            unique=True,
            postgresql_where=text("code = ''"),
            sqlite_where=text("code = ''"),
        ),
        Index("ix_pre_registrations_mobile_code", "mobile_number", "code"),
    )

    def __repr__(self):
        return f"<PreRegistration {self.company_name} code={self.code or '-'}>"
