# backend/qrseat/models.py
from sqlalchemy import BigInteger, Boolean, Column, Integer, String, Text
from .database import Base

class RelaySessionRow(Base):
    __tablename__ = "relay_sessions"
    key = Column(String, primary_key=True)
    schema_version = Column(Integer, nullable=True)
    active = Column(Boolean, nullable=True)
    last_update = Column(BigInteger, nullable=True)
    last_version = Column(Integer, nullable=True)
    # JSON list of {id, version, createdAt, expiresAt}
    messages = Column(Text, nullable=True)
    updated_at = Column(BigInteger, nullable=True, index=True)

class ViewerRow(Base):
    __tablename__ = "viewers"
    device_id = Column(String, primary_key=True)
    operator_name = Column(String, nullable=False)
    operator_id = Column(Integer, nullable=False, index=True)
    last_seen = Column(BigInteger, nullable=False)
