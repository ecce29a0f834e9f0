from sqlalchemy import TIMESTAMP, Column, Integer, String, Text, UniqueConstraint, func

from .base import Base


class Preference(Base):
    __tablename__ = "preferences"

    id = Column(Integer, primary_key=True)
    key = Column(String(100), nullable=False)
    value = Column(Text, nullable=False)  # JSON blob
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    __table_args__ = (UniqueConstraint("key"),)
