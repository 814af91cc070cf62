"""
Question and lesson content schemas for SkillPath.

Defines Pydantic models for:
- The five question types (MCQ, TypeIn, TrueFalse, Order, Match)
- Lesson content (ordered list of questions)

Question is a discriminated union on the "type" field; unknown types fail
validation instead of falling through.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Annotated, Literal, Union


QUESTION_TYPES = ("MCQ", "TypeIn", "TrueFalse", "Order", "Match")


class QuestionBase(BaseModel):
    type: str
    question: str
    correct_feedback: str = ""
    incorrect_feedback: str = ""
    explanation: str = ""


class MCQQuestion(QuestionBase):
    type: Literal["MCQ"] = "MCQ"
    options: list[str] = Field(..., min_length=2)
    answer: str

    @model_validator(mode="after")
    def answer_in_options(self):
        if self.answer not in self.options:
            raise ValueError(f"MCQ answer {self.answer!r} is not one of the options")
        return self


class TypeInQuestion(QuestionBase):
    type: Literal["TypeIn"] = "TypeIn"
    answer: str = Field(..., min_length=1)


class TrueFalseQuestion(QuestionBase):
    type: Literal["TrueFalse"] = "TrueFalse"
    answer: bool


class OrderQuestion(QuestionBase):
    """Items are shown in the given order; answer is the correct ordering."""
    type: Literal["Order"] = "Order"
    items: list[str] = Field(..., min_length=2)
    answer: list[str]

    @model_validator(mode="after")
    def answer_is_permutation(self):
        if sorted(self.answer) != sorted(self.items):
            raise ValueError("Order answer must contain exactly the question items")
        return self


class MatchQuestion(QuestionBase):
    """pairs maps each left item to its right item."""
    type: Literal["Match"] = "Match"
    pairs: dict[str, str] = Field(..., min_length=1)

    @field_validator("pairs")
    @classmethod
    def right_items_unique(cls, v):
        if len(set(v.values())) != len(v):
            raise ValueError("Match right-hand items must be unique")
        return v


Question = Annotated[
    Union[
        MCQQuestion,
        TypeInQuestion,
        TrueFalseQuestion,
        OrderQuestion,
        MatchQuestion,
    ],
    Field(discriminator="type"),
]


class LessonContent(BaseModel):
    lesson_id: str
    questions: list[Question] = Field(..., min_length=1)
