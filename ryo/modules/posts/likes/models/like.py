from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.sql import func

from ryo.db.session import Base


class PostLike(Base):
    __tablename__ = "post_likes"

    post_id = Column(String, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime, default=func.now())
