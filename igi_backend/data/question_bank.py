"""
Static contest questions for all three rounds.

Round 1 expected answers and round 2 reference code stay on the server;
routes expose only the public views defined here.
"""
import json
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel

DATA_DIR = Path(__file__).parent

ROUND_IDS = ("round1", "round2", "round3")
ROUND2_LANGUAGES = ("python", "c", "cpp", "java")


class Round1Question(BaseModel):
    question_id: int
    title: str
    question_text: str
    expected_answer: str

    def public_view(self) -> dict:
        return {"question_id": self.question_id, "title": self.title, "question_text": self.question_text}


class Round2Question(BaseModel):
    question_id: int
    title: str
    description: str
    code_snippet: str
    code_snippets: Dict[str, str] = {}

    def snippet_for(self, language: Optional[str]) -> str:
        if language and self.code_snippets.get(language.lower()):
            return self.code_snippets[language.lower()]
        return self.code_snippet

    def public_view(self) -> dict:
        return {
            "question_id": self.question_id,
            "title": self.title,
            "description": self.description,
            "code_snippet": self.code_snippet,
            "code_snippets": self.code_snippets,
        }


class RoundQuestion(BaseModel):
    id: str
    round_id: str
    title: str
    prompt: str
    difficulty: str
    points: int
    time_limit: str
    tags: List[str] = []
    reference_notes: Optional[str] = None


def _load(name: str) -> list:
    with open(DATA_DIR / name, encoding="utf-8") as fh:
        return json.load(fh)


@lru_cache(maxsize=None)
def get_round1_questions() -> List[Round1Question]:
    return [Round1Question(**q) for q in _load("round1_questions.json")]


@lru_cache(maxsize=None)
def get_round2_questions() -> List[Round2Question]:
    return [Round2Question(**q) for q in _load("round2_questions.json")]


@lru_cache(maxsize=None)
def _round3_questions() -> List[RoundQuestion]:
    return [RoundQuestion(**q) for q in _load("round3_questions.json")]


def get_round1_question(question_id: int) -> Optional[Round1Question]:
    return next((q for q in get_round1_questions() if q.question_id == question_id), None)


def get_round2_question(question_id: int) -> Optional[Round2Question]:
    return next((q for q in get_round2_questions() if q.question_id == question_id), None)


def get_round_questions(round_id: str) -> List[RoundQuestion]:
    """Uniform summaries for any round; rounds 1 and 2 are derived from their banks."""
    if round_id == "round1":
        return [
            RoundQuestion(
                id=f"r1-q{q.question_id}", round_id="round1", title=q.title, prompt=q.question_text,
                difficulty="intro", points=10, time_limit="5 min", tags=["reasoning"],
            )
            for q in get_round1_questions()
        ]
    if round_id == "round2":
        return [
            RoundQuestion(
                id=f"r2-q{q.question_id}", round_id="round2", title=q.title, prompt=q.description,
                difficulty="standard", points=10, time_limit="10 min", tags=["debugging"],
            )
            for q in get_round2_questions()
        ]
    if round_id == "round3":
        return list(_round3_questions())
    return []


def get_question_details(round_id: str, question_id: str) -> Optional[RoundQuestion]:
    return next((q for q in get_round_questions(round_id) if q.id == question_id), None)
