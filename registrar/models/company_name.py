"""CompanyName model: the code registry directory."""

import uuid
from sqlalchemy import Column, String, DateTime, Text, Uuid, CheckConstraint
from registrar.database import Base, utcnow


class CompanyName(Base):
    __tablename__ = "company_names"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, unique=True)
    code = Column(String(4), nullable=False, unique=True)
    contact_name = Column(String(255), nullable=False, default="")
    mobile_number = Column(String(50), nullable=False, default="")
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("length(code) = 4", name="ck_company_names_code_length"),
    )

    def __repr__(self):
        return f"<CompanyName {self.code}: {self.name}>"
