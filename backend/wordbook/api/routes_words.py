from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, field_serializer, model_validator
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from ..config import settings
from ..core.database import get_db
from ..core.llm_client import get_provider
from ..core.llm_provider import LLMProvider, LLMRateLimitError
from ..core.word_repository import list_words
from ..core.word_service import lookup_and_save

router = APIRouter(prefix="/word", tags=["words"])


# ---------- Schemas ----------

class WordCreate(BaseModel):
    # Older clients send "word" instead of "text"
    text: Optional[str] = None
    word: Optional[str] = None

    @model_validator(mode="after")
    def _require_text(self):
        value = next((v.strip() for v in (self.text, self.word) if v and v.strip()), "")
        if not value:
            raise ValueError("text must not be empty")
        self.text = value
        return self


class WordOut(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: int
    text: str
    definition: str
    example: str
    uk_phonetic: str
    us_phonetic: str
    created_at: datetime

    # Stored naive in UTC; clients parse an offset-less timestamp as local time
    @field_serializer("created_at")
    def _created_at_utc(self, value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()


# ---------- Endpoints ----------

@router.get("", response_model=List[WordOut])
def get_words(db: Session = Depends(get_db)):
    return list_words(db)


@router.post("", response_model=WordOut, status_code=status.HTTP_201_CREATED)
async def create_word(
    payload: WordCreate,
    db: Session = Depends(get_db),
    provider: LLMProvider = Depends(get_provider),
):
    try:
        return await lookup_and_save(db, provider, payload.text, mode=settings.word_write_mode)
    except LLMRateLimitError as exc:
        headers = {"Retry-After": exc.retry_after} if exc.retry_after else None
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="AI provider is rate limiting requests, try again later",
            headers=headers,
        )
