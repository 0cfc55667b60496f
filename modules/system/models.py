"""
System Module - Models
========================
Key/value settings table. Holds store-wide counters such as last_order_id.
"""

from sqlalchemy import Column, String
from config.database import Base


class SystemSetting(Base):
    __tablename__ = "system_settings"

    key = Column(String, primary_key=True)
    value = Column(String, nullable=False)
    description = Column(String, nullable=True)

    def __repr__(self):
        return f"<Setting {self.key}={self.value}>"
