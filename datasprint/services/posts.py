from sqlalchemy import select

from datasprint.clock import utcnow
from datasprint.database import session_scope
from datasprint.errors import NotFoundError
from datasprint.models.post import PostEntry
from datasprint.schemas.posts import PostCreate, PostResponse, PostUpdate


class PostStore:
    def list_published(self) -> list[PostResponse]:
        with session_scope() as session:
            entries = session.execute(
                select(PostEntry)
                .where(PostEntry.published.is_(True))
                .order_by(PostEntry.created_at.desc())
            ).scalars().all()
            return [self._to_response(entry) for entry in entries]

    def get(self, post_id: str) -> PostResponse:
        with session_scope() as session:
            entry = session.get(PostEntry, post_id)
            if entry is None:
                raise NotFoundError("Post not found")
            return self._to_response(entry)

    def create(self, payload: PostCreate) -> PostResponse:
        now = utcnow()
        with session_scope() as session:
            entry = PostEntry(
                title=payload.title,
                content=payload.content,
                published=payload.published,
                created_at=now,
                updated_at=now,
            )
            session.add(entry)
            session.flush()
            return self._to_response(entry)

    def update(self, post_id: str, payload: PostUpdate) -> PostResponse:
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("title") is None:
            changes.pop("title", None)
        if changes.get("published") is None:
            changes.pop("published", None)

        with session_scope() as session:
            entry = session.get(PostEntry, post_id)
            if entry is None:
                raise NotFoundError("Post not found")
            for field, value in changes.items():
                setattr(entry, field, value)
            entry.updated_at = utcnow()
            session.flush()
            return self._to_response(entry)

    def delete(self, post_id: str) -> None:
        with session_scope() as session:
            entry = session.get(PostEntry, post_id)
            if entry is None:
                raise NotFoundError("Post not found")
            session.delete(entry)

    def _to_response(self, entry: PostEntry) -> PostResponse:
        return PostResponse.model_validate(entry, from_attributes=True)


post_store = PostStore()
