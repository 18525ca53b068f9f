from sqlalchemy.exc import SQLAlchemyError
from ..errors import StoreUnavailable
from ..models import db, Memory

MEMORY_TYPES = ('note', 'photo')


def list_memories(tag_id: str) -> list[dict]:
    try:
        rows = (
            Memory.query.filter_by(tag_id=tag_id)
            .order_by(Memory.created_at.desc(), Memory.id.desc())
            .all()
        )
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StoreUnavailable.from_exc(e) from e
    return [m.to_dict() for m in rows]


def add_memory(tag_id: str, content: str, location=None, type='note', images=None) -> dict:
    if not content:
        raise ValueError('content must not be empty')
    if type not in MEMORY_TYPES:
        raise ValueError(f'unknown memory type {type!r}')
    memory = Memory(
        tag_id=tag_id,
        location=location or 'Unknown Location',
        content=content,
        type=type,
        images_urls=list(images or []),
    )
    try:
        db.session.add(memory)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StoreUnavailable.from_exc(e) from e
    return memory.to_dict()
