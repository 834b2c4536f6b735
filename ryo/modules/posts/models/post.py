from sqlalchemy import BigInteger, Column, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ryo.db.session import Base


class Post(Base):
    __tablename__ = "posts"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime, default=func.now(), index=True)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    user = relationship("User", lazy="joined")
    media = relationship(
        "PostMedia",
        order_by="PostMedia.created_at",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class PostMedia(Base):
    __tablename__ = "post_media"

    id = Column(String, primary_key=True, index=True)
    post_id = Column(String, ForeignKey("posts.id", ondelete="CASCADE"), index=True, nullable=False)
    file_key = Column(String, nullable=False)
    media_url = Column(String, nullable=False)
    media_type = Column(String, nullable=False)  # image, video
    mime_type = Column(String)
    file_size = Column(BigInteger, default=0)
    created_at = Column(DateTime, default=func.now())
