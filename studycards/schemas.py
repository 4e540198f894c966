from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

class Flashcard(BaseModel):
    question: str
    answer: str

    @field_validator("question", "answer")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("must not be blank")
        return v

class QuizQuestion(BaseModel):
    question: str
    options: List[str]
    correct_answer_index: int

class QuizQuestionOut(BaseModel):
    """A quiz question as shown to the player, without the answer key."""
    question: str
    options: List[str]

class AnswerIn(BaseModel):
    index: int = Field(ge=0)

class RejectIn(BaseModel):
    reason: Optional[str] = None
