from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from motoclub.access import Identity
from motoclub.errors import InvalidInput, NotFound
from motoclub.models import Post, PostComment


def get_post(db: Session, post_id: int) -> Post:
    post = db.get(Post, int(post_id))
    if not post:
        raise NotFound("Post not found")
    return post


def create_post(db: Session, identity: Identity, *, content: str, image: str | None = None) -> Post:
    content = (content or "").strip()
    if not content:
        raise InvalidInput("Content is required")
    post = Post(user_id=identity.account_id, content=content, image=image, likes=0)
    db.add(post)
    db.flush()
    return post


def like_post(db: Session, post_id: int) -> int:
    """
    Unconditional +1 done in SQL, so concurrent likes never overwrite each other.
    There is no per-account dedup: liking N times adds N.
    """
    res = db.execute(
        update(Post)
        .where(Post.id == int(post_id))
        .values(likes=Post.likes + 1)
        .execution_options(synchronize_session=False)
    )
    if not res.rowcount:
        raise NotFound("Post not found")
    return int(db.execute(select(Post.likes).where(Post.id == int(post_id))).scalar_one())


def add_comment(db: Session, identity: Identity, post_id: int, *, content: str) -> PostComment:
    content = (content or "").strip()
    if not content:
        raise InvalidInput("Content is required")
    post = get_post(db, post_id)
    comment = PostComment(post_id=post.id, user_id=identity.account_id, content=content)
    db.add(comment)
    db.flush()
    return comment


def delete_post(db: Session, identity: Identity, post_id: int) -> None:
    post = db.execute(
        select(Post).where((Post.id == int(post_id)) & (Post.user_id == identity.account_id))
    ).scalar_one_or_none()
    if not post:
        raise NotFound("Post not found")
    # Comments go with it (relationship cascade).
    db.delete(post)
    db.flush()
