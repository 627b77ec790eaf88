"""ORM model for catalogue entries."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy import JSON, Column, Integer, Text

from ..db.session import Base


def new_identifier() -> str:
    return uuid4().hex


class Equipment(Base):
    """One catalogue entry.

    ``partial_code`` is indexed but deliberately not unique at the database
    level; uniqueness is a read-then-write check in ``crud.equipment``.
    ``seq`` records insertion order so listings come back the way they went in.
    """

    __tablename__ = "equipment"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(Text, nullable=False, unique=True, index=True, default=new_identifier)
    line_item_numbers = Column(JSON, nullable=False, default=list)
    name = Column(Text, nullable=False)
    partial_code = Column(Text, nullable=False, index=True)
    alternate_name = Column(Text, nullable=False, default="")
    size_label = Column(Text, nullable=False, default="")
    image_reference = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)
