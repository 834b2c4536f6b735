from datetime import datetime, timezone
from typing import Dict, Iterable, Optional, Protocol, Set

from sqlalchemy import func
from sqlalchemy.orm import Session

from ryo.db.utils import upstream_errors
from ryo.modules.posts.likes.models.like import PostLike


class LikeToggler(Protocol):
    def toggle(self, post_id: str, user_id: str) -> bool: ...

    def count(self, post_id: str) -> int: ...


class LikeRepository:
    def __init__(self, db: Session):
        self.db = db

    def _get(self, post_id: str, user_id: str) -> Optional[PostLike]:
        return self.db.get(PostLike, (post_id, user_id))

    def toggle(self, post_id: str, user_id: str) -> bool:
        """Delete the like if it exists, insert it otherwise; returns the resulting state"""
        with upstream_errors(self.db, "toggle like", conflict="like was changed concurrently, try again"):
            existing = self._get(post_id, user_id)
            if existing:
                self.db.delete(existing)
                self.db.commit()
                return False
            self.db.add(PostLike(post_id=post_id, user_id=user_id, created_at=datetime.now(timezone.utc)))
            self.db.commit()
            return True

    def count(self, post_id: str) -> int:
        with upstream_errors(self.db, "count likes"):
            return self.db.query(func.count(PostLike.user_id)).filter(PostLike.post_id == post_id).scalar() or 0

    def counts_for(self, post_ids: Iterable[str]) -> Dict[str, int]:
        post_ids = list(post_ids)
        if not post_ids:
            return {}
        with upstream_errors(self.db, "count likes"):
            rows = (
                self.db.query(PostLike.post_id, func.count(PostLike.user_id))
                .filter(PostLike.post_id.in_(post_ids))
                .group_by(PostLike.post_id)
                .all()
            )
        return {post_id: count for post_id, count in rows}

    def liked_among(self, post_ids: Iterable[str], user_id: Optional[str]) -> Set[str]:
        post_ids = list(post_ids)
        if not post_ids or not user_id:
            return set()
        with upstream_errors(self.db, "fetch likes"):
            rows = (
                self.db.query(PostLike.post_id)
                .filter(PostLike.post_id.in_(post_ids), PostLike.user_id == user_id)
                .all()
            )
        return {row[0] for row in rows}

    def delete_for_post(self, post_id: str) -> None:
        self.db.query(PostLike).filter(PostLike.post_id == post_id).delete(synchronize_session=False)
