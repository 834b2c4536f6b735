# Import all models here so Alembic and create_all can see them
from ryo.db.session import Base

from ryo.modules.user_management.models.user import User
from ryo.modules.posts.models.post import Post, PostMedia
from ryo.modules.posts.likes.models.like import PostLike
