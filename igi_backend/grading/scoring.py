"""Plain 0-10 scoring used by the evaluation queue."""
from typing import Optional

from igi_backend.grading.client import GeminiClient, get_gemini_client
from igi_backend.grading.parsing import first_integer

SCORE_PROMPT = """You are an automated evaluator.
Evaluate the user's answer strictly.

Question:
{question}

Expected Answer:
{expected_answer}

User Answer:
{answer}

Scoring rules:
- Score must be an integer between 0 and 10
- 10 = completely correct with clear logic
- Partial correctness should receive proportional score
- Incorrect or irrelevant answer = low score
- Do NOT explain
- Do NOT add text
- Return ONLY the numeric score."""


def parse_numeric_score(text: str) -> int:
    value = first_integer(text.strip())
    if value is None:
        return 0
    return max(0, min(10, value))


async def request_score(
    question: str,
    expected_answer: str,
    answer: str,
    client: Optional[GeminiClient] = None,
) -> int:
    """Ask the model for a 0-10 score, raising grading or transport errors"""
    client = client or get_gemini_client()
    prompt = SCORE_PROMPT.format(
        question=question,
        expected_answer=expected_answer or "(not provided)",
        answer=answer,
    )
    text = await client.generate(prompt)
    return parse_numeric_score(text)
