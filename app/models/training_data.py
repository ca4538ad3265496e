from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import uuid4


class TrainingData(SQLModel, table=True):
    __tablename__ = "ai_training_data"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    question: str
    answer: str
    category: Optional[str] = None
    created_by: Optional[str] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
