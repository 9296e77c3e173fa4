from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..config import settings
from ..core.database import get_db
from ..core.llm_client import get_provider
from ..core.llm_provider import LLMProvider
from ..core.word_repository import count_words

router = APIRouter(tags=["status"])


class LLMStatus(BaseModel):
    provider: str
    model: str
    available: bool


class StatusResponse(BaseModel):
    app: str
    environment: str
    now: datetime
    llm: LLMStatus
    word_count: int


@router.get("/status", response_model=StatusResponse)
def get_status(
    db: Session = Depends(get_db),
    provider: LLMProvider = Depends(get_provider),
):
    return StatusResponse(
        app=settings.app_name,
        environment=settings.environment,
        now=datetime.utcnow(),
        llm=LLMStatus(
            provider=provider.name,
            model=provider.model,
            available=provider.available,
        ),
        word_count=count_words(db),
    )
