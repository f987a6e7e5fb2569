from __future__ import annotations

import datetime as dt
from typing import Any

from fastapi import APIRouter
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from motoclub.deps import CurrentIdentity, DbSession
from motoclub.models import Follow, Story, User
from motoclub.policies import social
from motoclub.schemas import StoryCreateIn
from motoclub.serializers import row_out, user_brief, with_author


router = APIRouter()


# -----------------------
# Stories
# -----------------------
@router.get("/stories")
def list_stories(identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    now = dt.datetime.now(dt.timezone.utc)
    stmt = (
        select(Story)
        .options(selectinload(Story.author))
        .where(Story.expires_at > now)
        .order_by(Story.created_at.desc(), Story.id.desc())
    )
    return {"stories": [with_author(row_out(s), s.author) for s in db.execute(stmt).scalars().all()]}


@router.post("/stories", status_code=201)
def create_story(data: StoryCreateIn, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    story = social.create_story(db, identity, media_url=data.media_url, caption=data.caption)
    return {"story": with_author(row_out(story), story.author)}


@router.delete("/stories/{story_id:int}")
def delete_story(story_id: int, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    social.delete_story(db, identity, story_id)
    return {"message": "Story deleted"}


# -----------------------
# Follows
# -----------------------
@router.post("/users/{user_id:int}/follow")
def follow(user_id: int, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    social.follow(db, identity, user_id)
    return {"following": True}


@router.delete("/users/{user_id:int}/follow")
def unfollow(user_id: int, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    social.unfollow(db, identity, user_id)
    return {"following": False}


@router.get("/users/{user_id:int}/followers")
def followers(user_id: int, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    stmt = (
        select(User)
        .join(Follow, Follow.follower_id == User.id)
        .where(Follow.followee_id == int(user_id))
        .order_by(Follow.created_at.desc(), Follow.id.desc())
    )
    return {"users": [user_brief(u) for u in db.execute(stmt).scalars().all()]}


@router.get("/users/{user_id:int}/following")
def following(user_id: int, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    stmt = (
        select(User)
        .join(Follow, Follow.followee_id == User.id)
        .where(Follow.follower_id == int(user_id))
        .order_by(Follow.created_at.desc(), Follow.id.desc())
    )
    return {"users": [user_brief(u) for u in db.execute(stmt).scalars().all()]}
