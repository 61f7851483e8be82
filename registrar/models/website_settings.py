from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text
from registrar.database import Base, utcnow

WEBSITE_SETTINGS_KEY = "website"


class WebsiteSettings(Base):
    """The global registration schedule.

    A single row keyed by ``WEBSITE_SETTINGS_KEY``. ``version`` is bumped on
    every write so automatic transitions can compare-and-swap.
    """

    __tablename__ = "website_settings"

    key = Column(String(50), primary_key=True, default=WEBSITE_SETTINGS_KEY)
    is_open = Column(Boolean, nullable=False, default=False)
    message = Column(Text, nullable=False, default="")
    open_time = Column(String(5), nullable=False, default="")
    close_time = Column(String(5), nullable=False, default="")
    auto_schedule = Column(Boolean, nullable=False, default=False)
    auto_closed = Column(Boolean, nullable=False, default=False)
    codes_active = Column(Boolean, nullable=False, default=True)
    post_registration_message = Column(Text, nullable=False, default="")
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    updated_by = Column(String(255))

    def __repr__(self):
        return f"<WebsiteSettings open={self.is_open} auto={self.auto_schedule}>"
