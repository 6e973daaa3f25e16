from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text
from .db import Base


class StoredSetting(Base):
	__tablename__ = "stored_settings"
	# One row per setting key, e.g. "gemini_api_key"
	key = Column(String(128), primary_key=True, index=True)
	value = Column(Text, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
