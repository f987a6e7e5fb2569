from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from motoclub.deps import CurrentIdentity, DbSession
from motoclub.models import Post, PostComment
from motoclub.policies import posts, social
from motoclub.schemas import CommentIn, PostCreateIn
from motoclub.serializers import row_out, with_author


router = APIRouter()


def _comment_counts(db: Session, post_ids: list[int]) -> dict[int, int]:
    if not post_ids:
        return {}
    stmt = (
        select(PostComment.post_id, func.count(PostComment.id))
        .where(PostComment.post_id.in_(post_ids))
        .group_by(PostComment.post_id)
    )
    return {int(pid): int(n) for pid, n in db.execute(stmt).all()}


def _page(db: Session, stmt, *, page: int, limit: int) -> list[dict[str, Any]]:
    stmt = (
        stmt.options(selectinload(Post.author))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .limit(limit)
        .offset((page - 1) * limit)
    )
    items = list(db.execute(stmt).scalars().all())
    counts = _comment_counts(db, [p.id for p in items])
    out = []
    for p in items:
        row = with_author(row_out(p), p.author)
        row["comment_count"] = counts.get(p.id, 0)
        out.append(row)
    return out


@router.get("")
def list_posts(
    identity: CurrentIdentity,
    db: DbSession,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> dict[str, Any]:
    return {"posts": _page(db, select(Post), page=page, limit=limit)}


@router.get("/feed")
def feed(
    identity: CurrentIdentity,
    db: DbSession,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> dict[str, Any]:
    authors = [identity.account_id, *social.followed_ids(db, identity)]
    return {"posts": _page(db, select(Post).where(Post.user_id.in_(authors)), page=page, limit=limit)}


@router.get("/{post_id:int}")
def get_post(post_id: int, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    post = posts.get_post(db, post_id)
    stmt = (
        select(PostComment)
        .options(selectinload(PostComment.author))
        .where(PostComment.post_id == post.id)
        .order_by(PostComment.created_at.asc(), PostComment.id.asc())
    )
    comments = [with_author(row_out(c), c.author) for c in db.execute(stmt).scalars().all()]
    return {"post": with_author(row_out(post), post.author), "comments": comments}


@router.post("", status_code=201)
def create_post(data: PostCreateIn, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    post = posts.create_post(db, identity, content=data.content, image=data.image)
    return {"post": with_author(row_out(post), post.author)}


@router.post("/{post_id:int}/like")
def like_post(post_id: int, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    return {"likes": posts.like_post(db, post_id)}


@router.post("/{post_id:int}/comments", status_code=201)
def add_comment(post_id: int, data: CommentIn, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    comment = posts.add_comment(db, identity, post_id, content=data.content)
    return {"comment": with_author(row_out(comment), comment.author)}


@router.delete("/{post_id:int}")
def delete_post(post_id: int, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    posts.delete_post(db, identity, post_id)
    return {"message": "Post deleted successfully"}
