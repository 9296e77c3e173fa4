from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import List

from sqlalchemy.orm import Session

from ..models import Word


@dataclass
class WordFields:
    """Generated columns of a Word, everything except the key and timestamps."""

    definition: str
    example: str
    uk_phonetic: str = ""
    us_phonetic: str = ""


def create_word(db: Session, text: str, fields: WordFields) -> Word:
    w = Word(text=text, **asdict(fields))
    db.add(w)
    db.commit()
    db.refresh(w)
    return w


def upsert_word(db: Session, text: str, fields: WordFields) -> Word:
    """
    Overwrite the newest row with this text, or insert one.
    created_at is left untouched on update.
    """
    existing = (
        db.query(Word)
        .filter(Word.text == text)
        .order_by(Word.created_at.desc(), Word.id.desc())
        .first()
    )
    if existing is None:
        return create_word(db, text, fields)

    for key, value in asdict(fields).items():
        setattr(existing, key, value)

    db.commit()
    db.refresh(existing)
    return existing


def list_words(db: Session) -> List[Word]:
    return db.query(Word).order_by(Word.created_at.desc(), Word.id.desc()).all()


def count_words(db: Session) -> int:
    return db.query(Word).count()
