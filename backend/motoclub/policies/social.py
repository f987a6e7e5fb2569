from __future__ import annotations

import datetime as dt

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from motoclub.access import Identity
from motoclub.config import story_ttl_hours
from motoclub.db import dialect_insert
from motoclub.errors import InvalidInput, NotFound
from motoclub.models import Follow, Story, User


def create_story(db: Session, identity: Identity, *, media_url: str, caption: str | None = None) -> Story:
    media_url = (media_url or "").strip()
    if not media_url:
        raise InvalidInput("media_url is required")
    now = dt.datetime.now(dt.timezone.utc)
    story = Story(
        user_id=identity.account_id,
        media_url=media_url,
        caption=caption,
        created_at=now,
        expires_at=now + dt.timedelta(hours=story_ttl_hours()),
    )
    db.add(story)
    db.flush()
    return story


def delete_story(db: Session, identity: Identity, story_id: int) -> None:
    story = db.execute(
        select(Story).where((Story.id == int(story_id)) & (Story.user_id == identity.account_id))
    ).scalar_one_or_none()
    if not story:
        raise NotFound("Story not found")
    db.delete(story)
    db.flush()


def _target(db: Session, user_id: int) -> User:
    user = db.get(User, int(user_id))
    if not user:
        raise NotFound("User not found")
    return user


def follow(db: Session, identity: Identity, user_id: int) -> None:
    target = _target(db, user_id)
    if target.id == identity.account_id:
        raise InvalidInput("You cannot follow yourself")
    # Following twice keeps the single existing row.
    stmt = (
        dialect_insert(db, Follow)
        .values(follower_id=identity.account_id, followee_id=target.id)
        .on_conflict_do_nothing(index_elements=["follower_id", "followee_id"])
    )
    db.execute(stmt)


def unfollow(db: Session, identity: Identity, user_id: int) -> None:
    target = _target(db, user_id)
    db.execute(delete(Follow).where((Follow.follower_id == identity.account_id) & (Follow.followee_id == target.id)))


def followed_ids(db: Session, identity: Identity) -> list[int]:
    stmt = select(Follow.followee_id).where(Follow.follower_id == identity.account_id)
    return [int(x) for x in db.execute(stmt).scalars().all()]


def purge_expired_stories(db: Session, *, now: dt.datetime | None = None) -> int:
    cutoff = now or dt.datetime.now(dt.timezone.utc)
    result = db.execute(delete(Story).where(Story.expires_at <= cutoff))
    return int(result.rowcount or 0)
