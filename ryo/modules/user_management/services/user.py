from datetime import datetime, timezone
from typing import Optional, Protocol
import uuid
import logging

from sqlalchemy.orm import Session

from ryo.db.utils import upstream_errors
from ryo.modules.user_management.models.user import User

logger = logging.getLogger("ryo")


class UserLookup(Protocol):
    def get_by_sub(self, sub: str) -> Optional[User]: ...

    def get_by_id(self, user_id: str) -> Optional[User]: ...

    def get_by_username(self, username: str) -> Optional[User]: ...


class UserWriter(Protocol):
    def create(self, sub: str, verified: bool, username: str, name: str, email: str) -> User: ...

    def update_profile_picture(self, user: User, profile_picture_url: Optional[str]) -> User: ...

    def update_username(self, user: User, username: str) -> User: ...


class UserRepository:
    """SQLAlchemy-backed user storage"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_sub(self, sub: str) -> Optional[User]:
        with upstream_errors(self.db, "fetch user"):
            return self.db.query(User).filter(User.sub == sub).first()

    def get_by_id(self, user_id: str) -> Optional[User]:
        with upstream_errors(self.db, "fetch user"):
            return self.db.query(User).filter(User.id == user_id).first()

    def get_by_username(self, username: str) -> Optional[User]:
        with upstream_errors(self.db, "fetch user"):
            return self.db.query(User).filter(User.username == username).first()

    def username_taken(self, username: str, exclude_user_id: Optional[str] = None) -> bool:
        user = self.get_by_username(username)
        return user is not None and user.id != exclude_user_id

    def picture_in_use(self, profile_picture_url: str, exclude_user_id: Optional[str] = None) -> bool:
        """Whether any other user still points at this picture URL"""
        with upstream_errors(self.db, "fetch user"):
            query = self.db.query(User.id).filter(User.profile_picture_url == profile_picture_url)
            if exclude_user_id:
                query = query.filter(User.id != exclude_user_id)
            return query.first() is not None

    def create(self, sub: str, verified: bool, username: str, name: str, email: str) -> User:
        now = datetime.now(timezone.utc)
        user = User(
            id=str(uuid.uuid4()),
            sub=sub,
            verified=verified,
            username=username,
            name=name,
            email=email,
            is_admin=False,
            created_at=now,
            updated_at=now,
        )
        with upstream_errors(self.db, "create user", conflict="user already exists"):
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        logger.info(f"New user created: {user.username} ({user.id})")
        return user

    def update_profile_picture(self, user: User, profile_picture_url: Optional[str]) -> User:
        with upstream_errors(self.db, "update profile picture"):
            user.profile_picture_url = profile_picture_url
            self.db.commit()
            self.db.refresh(user)
        return user

    def update_username(self, user: User, username: str) -> User:
        with upstream_errors(self.db, "update username", conflict="username is already taken"):
            user.username = username
            self.db.commit()
            self.db.refresh(user)
        return user
