"""Posts, comments, likes, saves and drafts.

A post becomes visible (``is_posted``) exactly once: on creation, when its
draft is published, or when the scheduled-post sweep promotes it. A comment
bumps its parent's ``comment_count`` at that moment and only then, so the
counter tracks visible comments.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_threads.core.errors import AuthorizationDenied, InvalidState, NotFound, ValidationError
from campus_threads.db.time import now_ms
from campus_threads.models import Like, PollVote, Post, SavedPost, User
from campus_threads.schemas.common import MediaRef, Page, PaginationOpts
from campus_threads.schemas.post import (
    CommentNode,
    DeleteResult,
    DraftSave,
    LikeResult,
    PollSpec,
    PostCreate,
    PostView,
    SaveResult,
)
from campus_threads.services.counters import current_value, decrement_floored, increment
from campus_threads.services.media import MediaResolver
from campus_threads.services.pagination import paginate
from campus_threads.services.views import build_post_view, build_post_views

logger = logging.getLogger(__name__)

MIN_POLL_OPTIONS = 2

__all__ = [
    "get_post_or_404",
    "create_post",
    "toggle_like",
    "toggle_save",
    "is_post_saved",
    "get_saved_status",
    "get_thread",
    "get_comments",
    "save_draft",
    "publish_draft",
    "delete_draft",
    "delete_thread",
    "delete_scheduled_post",
    "get_threads",
    "get_user_replies",
    "get_draft_posts",
    "get_scheduled_posts",
    "get_saved_posts",
    "get_liked_posts",
]


def get_post_or_404(db: Session, post_id: int) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise NotFound("Post not found")
    return post


def _media_payload(media: Sequence[MediaRef]) -> list[dict[str, str]]:
    return [ref.model_dump() for ref in media]


def _clean_poll_options(poll: PollSpec) -> list[str]:
    return [option.strip() for option in poll.options if option.strip()]


def _validate_poll(poll: PollSpec | None) -> list[str] | None:
    if poll is None:
        return None
    options = _clean_poll_options(poll)
    if len(options) < MIN_POLL_OPTIONS:
        raise ValidationError(f"A poll needs at least {MIN_POLL_OPTIONS} options")
    return options


def _poll_columns(poll: PollSpec | None, options: list[str] | None) -> dict[str, object]:
    if poll is None:
        return {
            "is_poll": False,
            "poll_question": None,
            "poll_options": None,
            "poll_duration_hours": None,
            "poll_multiple_choice": False,
        }
    return {
        "is_poll": True,
        "poll_question": poll.question,
        "poll_options": options,
        "poll_duration_hours": poll.duration_hours,
        "poll_multiple_choice": poll.multiple_choice,
    }


def _resolve_parents(db: Session, payload: PostCreate) -> tuple[Post | None, int | None]:
    """Return the parent post and the validated reply target, if any."""
    parent_post_id = payload.parent_post_id
    parent_comment_id = payload.parent_comment_id

    if parent_comment_id is not None:
        comment = db.get(Post, parent_comment_id)
        if comment is None:
            raise NotFound("Comment being replied to not found")
        if comment.parent_post_id is None:
            raise ValidationError("Replies must target a comment, not a top-level post")
        if parent_post_id is None:
            parent_post_id = comment.parent_post_id
        elif comment.parent_post_id != parent_post_id:
            raise ValidationError("Comment being replied to belongs to a different post")

    if parent_post_id is None:
        return None, None

    parent = db.get(Post, parent_post_id)
    if parent is None:
        raise NotFound("Parent post not found")
    if not parent.is_posted:
        raise InvalidState("Cannot comment on a post that is not published")
    return parent, parent_comment_id


def create_post(db: Session, actor: User, payload: PostCreate, *, now: int | None = None) -> Post:
    """Create a post, comment or reply.

    A ``scheduled_for`` in the future puts the post in the scheduled state;
    otherwise it is published immediately and a comment increments its
    parent's ``comment_count``.
    """
    now = now if now is not None else now_ms()
    options = _validate_poll(payload.poll)
    parent, parent_comment_id = _resolve_parents(db, payload)
    is_scheduled = payload.scheduled_for is not None and payload.scheduled_for > now

    post = Post(
        user_id=actor.id,
        parent_post_id=parent.id if parent is not None else None,
        parent_comment_id=parent_comment_id,
        content=payload.content,
        media=_media_payload(payload.media),
        website_url=payload.website_url,
        like_count=0,
        comment_count=0,
        retweet_count=0,
        is_draft=False,
        is_scheduled=is_scheduled,
        is_posted=not is_scheduled,
        scheduled_for=payload.scheduled_for,
        created_at=now,
        **_poll_columns(payload.poll, options),
    )
    db.add(post)
    db.flush()

    if parent is not None and not is_scheduled:
        increment(db, Post.comment_count, parent.id)

    db.commit()
    db.refresh(post)
    logger.info(
        "User %s created post %s (scheduled=%s, parent=%s)",
        actor.id,
        post.id,
        is_scheduled,
        post.parent_post_id,
    )
    return post


def toggle_like(db: Session, actor: User, post_id: int) -> LikeResult:
    """Like the post if the actor hasn't, otherwise remove the like."""
    post = get_post_or_404(db, post_id)
    if not post.is_posted:
        raise InvalidState("Only published posts can be liked")

    removed = db.execute(
        delete(Like)
        .where(Like.user_id == actor.id, Like.post_id == post.id)
        .execution_options(synchronize_session=False)
    ).rowcount
    if removed:
        count = decrement_floored(db, Post.like_count, post.id)
        db.commit()
        return LikeResult(action="unlike", like_count=count)

    try:
        with db.begin_nested():
            db.add(Like(user_id=actor.id, post_id=post.id, created_at=now_ms()))
    except IntegrityError:
        # A concurrent toggle inserted the same like first.
        db.commit()
        return LikeResult(action="like", like_count=current_value(db, Post.like_count, post.id))
    count = increment(db, Post.like_count, post.id)
    db.commit()
    return LikeResult(action="like", like_count=count)


def toggle_save(db: Session, actor: User, post_id: int) -> SaveResult:
    """Bookmark or un-bookmark a post."""
    post = get_post_or_404(db, post_id)
    removed = db.execute(
        delete(SavedPost)
        .where(SavedPost.user_id == actor.id, SavedPost.post_id == post.id)
        .execution_options(synchronize_session=False)
    ).rowcount
    if removed:
        db.commit()
        return SaveResult(saved=False)

    try:
        with db.begin_nested():
            db.add(SavedPost(user_id=actor.id, post_id=post.id, saved_at=now_ms()))
    except IntegrityError:
        pass
    db.commit()
    return SaveResult(saved=True)


def is_post_saved(db: Session, actor: User, post_id: int) -> bool:
    return (
        db.query(SavedPost.id)
        .filter(SavedPost.user_id == actor.id, SavedPost.post_id == post_id)
        .first()
        is not None
    )


def get_saved_status(db: Session, actor: User, post_ids: Sequence[int]) -> dict[int, bool]:
    """Saved flag for each requested post id."""
    if not post_ids:
        return {}
    saved = {
        row[0]
        for row in db.query(SavedPost.post_id).filter(
            SavedPost.user_id == actor.id,
            SavedPost.post_id.in_(post_ids),
        )
    }
    return {post_id: post_id in saved for post_id in post_ids}


def get_thread(db: Session, viewer: User | None, post_id: int, resolver: MediaResolver) -> PostView:
    """Single post view. Unpublished posts are only visible to their owner."""
    post = db.get(Post, post_id)
    if post is None or (not post.is_posted and (viewer is None or viewer.id != post.user_id)):
        raise NotFound("Post not found")
    return build_post_view(db, viewer, post, resolver)


def get_comments(
    db: Session,
    viewer: User | None,
    post_id: int,
    resolver: MediaResolver,
) -> list[CommentNode]:
    """Published comments on ``post_id`` assembled into a reply tree.

    Top-level comments come newest first; replies under a comment are sorted
    oldest first. A reply whose target comment is missing from the set is
    shown at the top level rather than dropped.
    """
    get_post_or_404(db, post_id)
    comments = (
        db.query(Post)
        .filter(Post.parent_post_id == post_id, Post.is_posted.is_(True))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .all()
    )
    views = build_post_views(db, viewer, comments, resolver)
    nodes = {view.id: CommentNode(**view.model_dump()) for view in views}

    top_level: list[CommentNode] = []
    for view in views:
        node = nodes[view.id]
        parent = nodes.get(view.parent_comment_id) if view.parent_comment_id else None
        if parent is not None and parent is not node:
            parent.replies.append(node)
        else:
            top_level.append(node)

    def _sort_replies(items: list[CommentNode]) -> None:
        for item in items:
            if item.replies:
                item.replies.sort(key=lambda reply: (reply.created_at, reply.id))
                _sort_replies(item.replies)

    _sort_replies(top_level)
    return top_level


def _owned_post(db: Session, actor: User, post_id: int, message: str) -> Post:
    post = get_post_or_404(db, post_id)
    if post.user_id != actor.id:
        raise AuthorizationDenied(message)
    return post


def save_draft(db: Session, actor: User, payload: DraftSave) -> Post:
    """Insert a new draft, or update the actor's existing draft in place."""
    if payload.parent_post_id is not None and db.get(Post, payload.parent_post_id) is None:
        raise NotFound("Parent post not found")
    options = _clean_poll_options(payload.poll) if payload.poll else None
    fields = {
        "content": payload.content,
        "media": _media_payload(payload.media),
        "website_url": payload.website_url,
        "parent_post_id": payload.parent_post_id,
        **_poll_columns(payload.poll, options),
    }

    if payload.draft_id is not None:
        existing = db.get(Post, payload.draft_id)
        if existing is not None and existing.user_id == actor.id and existing.is_draft:
            for key, value in fields.items():
                setattr(existing, key, value)
            db.commit()
            db.refresh(existing)
            return existing

    draft = Post(
        user_id=actor.id,
        like_count=0,
        comment_count=0,
        retweet_count=0,
        is_draft=True,
        is_posted=False,
        is_scheduled=False,
        created_at=now_ms(),
        **fields,
    )
    db.add(draft)
    db.commit()
    db.refresh(draft)
    logger.debug("User %s saved draft %s", actor.id, draft.id)
    return draft


def publish_draft(db: Session, actor: User, draft_id: int) -> Post:
    """Publish one of the actor's drafts."""
    draft = db.get(Post, draft_id)
    if draft is None:
        raise NotFound("Draft not found")
    if draft.user_id != actor.id:
        raise AuthorizationDenied("Not authorized to publish this draft")
    if not draft.is_draft:
        raise InvalidState("Post is not a draft")
    if draft.is_poll:
        _validate_poll(PollSpec(options=draft.poll_options or []))

    parent = None
    if draft.parent_post_id is not None:
        parent = db.get(Post, draft.parent_post_id)
        if parent is None:
            raise NotFound("Parent post not found")
        if not parent.is_posted:
            raise InvalidState("Cannot comment on a post that is not published")

    result = db.execute(
        update(Post)
        .where(Post.id == draft.id, Post.is_draft.is_(True))
        .values(is_draft=False, is_posted=True, is_scheduled=False)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise InvalidState("Post is not a draft")

    if parent is not None:
        increment(db, Post.comment_count, parent.id)
    db.commit()
    db.refresh(draft)
    logger.info("User %s published draft %s", actor.id, draft.id)
    return draft


def delete_draft(db: Session, actor: User, draft_id: int) -> DeleteResult:
    """Discard one of the actor's drafts. Deleting a missing draft is a no-op."""
    draft = db.get(Post, draft_id)
    if draft is None:
        return DeleteResult(success=True)
    if draft.user_id != actor.id:
        raise AuthorizationDenied("Not authorized to delete this draft")
    if not draft.is_draft:
        raise InvalidState("Post is not a draft")
    db.delete(draft)
    db.commit()
    return DeleteResult(success=True)


def _hard_delete(db: Session, post: Post) -> None:
    """Delete a post with its engagement rows; a top-level post takes its comments along."""
    ids = [post.id]
    if post.parent_post_id is None:
        ids.extend(db.scalars(select(Post.id).where(Post.parent_post_id == post.id)))
    for model, column in ((Like, Like.post_id), (SavedPost, SavedPost.post_id), (PollVote, PollVote.poll_id)):
        db.execute(delete(model).where(column.in_(ids)).execution_options(synchronize_session=False))
    if len(ids) > 1:
        db.execute(
            delete(Post)
            .where(Post.parent_post_id == post.id)
            .execution_options(synchronize_session=False)
        )
    db.delete(post)


def delete_thread(db: Session, actor: User, post_id: int) -> DeleteResult:
    """Delete one of the actor's posts, comments or replies."""
    post = _owned_post(db, actor, post_id, "Not authorized to delete this thread")
    if post.parent_post_id is not None and post.is_posted:
        decrement_floored(db, Post.comment_count, post.parent_post_id)
    _hard_delete(db, post)
    db.commit()
    logger.info("User %s deleted post %s", actor.id, post_id)
    return DeleteResult(success=True)


def delete_scheduled_post(db: Session, actor: User, post_id: int) -> DeleteResult:
    """Delete a scheduled post before the sweep publishes it."""
    post = _owned_post(db, actor, post_id, "Not authorized to delete this post")
    if not post.is_scheduled or post.is_posted:
        raise InvalidState("Can only delete scheduled posts")
    _hard_delete(db, post)
    db.commit()
    return DeleteResult(success=True)


def _page(
    db: Session,
    viewer: User | None,
    query,
    opts: PaginationOpts,
    resolver: MediaResolver,
    *,
    descending: bool = True,
) -> Page[PostView]:
    posts, cursor, is_done = paginate(query, Post.id, opts, descending=descending)
    return Page[PostView](
        page=build_post_views(db, viewer, posts, resolver),
        continue_cursor=cursor,
        is_done=is_done,
    )


def get_threads(
    db: Session,
    viewer: User | None,
    opts: PaginationOpts,
    resolver: MediaResolver,
    user_id: int | None = None,
) -> Page[PostView]:
    """Published top-level posts, newest first, optionally for one author."""
    query = db.query(Post).filter(Post.parent_post_id.is_(None), Post.is_posted.is_(True))
    if user_id is not None:
        query = query.filter(Post.user_id == user_id)
    return _page(db, viewer, query, opts, resolver)


def get_user_replies(
    db: Session,
    viewer: User | None,
    user_id: int,
    opts: PaginationOpts,
    resolver: MediaResolver,
) -> Page[PostView]:
    """Published comments and replies written by ``user_id``."""
    query = db.query(Post).filter(
        Post.user_id == user_id,
        Post.parent_post_id.is_not(None),
        Post.is_posted.is_(True),
    )
    return _page(db, viewer, query, opts, resolver)


def get_draft_posts(
    db: Session,
    actor: User,
    opts: PaginationOpts,
    resolver: MediaResolver,
) -> Page[PostView]:
    query = db.query(Post).filter(Post.user_id == actor.id, Post.is_draft.is_(True))
    return _page(db, actor, query, opts, resolver)


def get_scheduled_posts(
    db: Session,
    actor: User,
    opts: PaginationOpts,
    resolver: MediaResolver,
) -> Page[PostView]:
    """The actor's scheduled posts that have not been published yet."""
    query = db.query(Post).filter(
        Post.user_id == actor.id,
        Post.is_scheduled.is_(True),
        Post.is_posted.is_(False),
    )
    return _page(db, actor, query, opts, resolver, descending=False)


def _bookmarked_page(
    db: Session,
    actor: User,
    model: type[Like] | type[SavedPost],
    opts: PaginationOpts,
    resolver: MediaResolver,
) -> Page[PostView]:
    query = (
        db.query(model, Post)
        .join(Post, Post.id == model.post_id)
        .filter(model.user_id == actor.id, Post.is_posted.is_(True))
    )
    rows, cursor, is_done = paginate(query, model.id, opts)
    posts = [row[1] for row in rows]
    return Page[PostView](
        page=build_post_views(db, actor, posts, resolver, saved=True if model is SavedPost else None),
        continue_cursor=cursor,
        is_done=is_done,
    )


def get_saved_posts(
    db: Session,
    actor: User,
    opts: PaginationOpts,
    resolver: MediaResolver,
) -> Page[PostView]:
    """The actor's bookmarks, most recently saved first."""
    return _bookmarked_page(db, actor, SavedPost, opts, resolver)


def get_liked_posts(
    db: Session,
    actor: User,
    opts: PaginationOpts,
    resolver: MediaResolver,
) -> Page[PostView]:
    """Posts the actor liked, most recent like first."""
    return _bookmarked_page(db, actor, Like, opts, resolver)
