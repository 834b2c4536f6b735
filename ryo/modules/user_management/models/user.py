from sqlalchemy import Boolean, Column, String, DateTime
from sqlalchemy.sql import func

from ryo.db.session import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    sub = Column(String, unique=True, index=True, nullable=False)
    verified = Column(Boolean, default=False)
    username = Column(String, unique=True, index=True, nullable=True)
    name = Column(String, default="")
    email = Column(String, index=True)
    is_admin = Column(Boolean, default=False)
    profile_picture_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
