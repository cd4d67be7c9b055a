"""
Round 1 (algorithmic reasoning) evaluation.

The model judges the method a team describes, not just the final numbers, and
returns a 0-10 score with short second-person feedback.
"""
import json
import logging
import re
from typing import Optional

from pydantic import BaseModel

from igi_backend.grading.client import GeminiClient, get_gemini_client
from igi_backend.grading.errors import GeminiResponseError
from igi_backend.grading.parsing import coerce_int_score, strip_code_fences

logger = logging.getLogger(__name__)

MAX_ANALYSIS_WORDS = 50
THIRD_PERSON_TERMS = ("the user", "the solution", "the answer", "the submission")
THIRD_PERSON_REPLACEMENT = "Please provide your algorithm and approach, not just the answer."
MISSING_ANALYSIS = "Unable to generate analysis."

ROUND1_PROMPT = """CRITICAL: This is an ALGORITHM TESTING round. You are acting as a programming contest judge.

---

STEP 0 - MANDATORY CONTEXT IDENTIFICATION (INTERNAL ONLY)

Before evaluating the player's response, you MUST:

1. Identify what algorithm or algorithmic concept the question is testing, based solely on the question text.
   Examples: arithmetic progression, prime filtering, string reversal, duplicate detection, permutations,
   average calculation, frequency counting, binary-to-decimal conversion, Fibonacci sequence,
   palindrome verification, etc.

2. Keep this identification INTERNAL.

3. DO NOT mention the algorithm name or your internal reasoning in the output.

If the question clearly expects an algorithm and the player does not provide one, score accordingly.

---

STRICT INPUTS

Question:
{question}

Player's Algorithm / Pseudocode / Explanation:
{answer}

---

ACCEPTABLE SUBMISSIONS

The player MAY use:
- Plain English algorithmic steps
- Pseudocode
- Logical explanation of steps

The player MUST explain HOW the solution works.

---

DO NOT ACCEPT

- Final answers only
- Numbers, outputs, or results without explanation
- Pattern guesses without describing the method
- Merely restating the input or output

If only final answers or outputs are provided, assign 0-2 points maximum.

---

SCORING RUBRIC (STRICT - TOTAL 10 MARKS)

Evaluate the player's submission ONLY against the correct algorithm for the question.

1. Algorithm Correctness (0-4 marks)
   - Does the described algorithm logically solve the intended problem?
   - Would it work correctly for valid inputs?

2. Edge Case Handling (0-3 marks)
   - Does the algorithm mention or handle edge cases where applicable?
   - Examples: empty input, single element, duplicates, invalid values, boundary conditions.

3. Algorithm Efficiency (0-3 marks)
   - Is the time and space complexity reasonable for this problem?
   - Is the approach optimal or at least acceptable?

---

FEEDBACK WRITING RULES (CRITICAL)

- Write feedback DIRECTLY to the player using second person
- Always use: "you", "your", "you've"
- NEVER use: "the user", "the answer", "the solution", "the submission"
- Sound like a contest judge giving direct feedback
- Be clear, constructive, and precise

Example CORRECT feedback:
- "You only provided numbers without explaining your algorithm or approach."
- "Your algorithm correctly identifies the pattern but doesn't handle edge cases."
- "You've described a valid approach, but it's inefficient for large inputs."

Example WRONG feedback:
- "The user provided only numbers"
- "The solution does not handle edge cases"
- "The answer is incomplete"

---

LENGTH CONSTRAINT

Feedback must be under 50 words.

---

IMPORTANT FINAL RULE

If the player's approach does NOT match the algorithm the question is testing, reduce Algorithm Correctness
accordingly, even if the final numeric answer is correct.

Judge the METHOD, not the result.

---

OUTPUT FORMAT (STRICT - JSON ONLY)

Return ONLY valid JSON. No markdown. No extra text.

{{
  "score": <integer 0-10>,
  "analysis": "<direct second-person feedback under 50 words>"
}}"""

_SCORE_PATTERN = re.compile(r'"?score"?\s*:\s*(\d+)', re.IGNORECASE)
_ANALYSIS_PATTERN = re.compile(r'"?analysis"?\s*:\s*"([^"]+)"', re.IGNORECASE)


class Round1Evaluation(BaseModel):
    score: int
    analysis: str


def build_prompt(question: str, answer: str) -> str:
    return ROUND1_PROMPT.format(question=question, answer=answer)


def sanitize_analysis(analysis) -> str:
    if not isinstance(analysis, str):
        return MISSING_ANALYSIS
    text = analysis.strip()
    lowered = text.lower()
    for term in THIRD_PERSON_TERMS:
        if term in lowered:
            logger.warning(f"[Round1 Evaluation] Analysis contains third-person term: {term!r}")
            text = THIRD_PERSON_REPLACEMENT
            break
    words = text.split()
    if len(words) > MAX_ANALYSIS_WORDS:
        return " ".join(words[:MAX_ANALYSIS_WORDS]) + "..."
    return text


def parse_round1_response(text: str) -> Round1Evaluation:
    cleaned = strip_code_fences(text)
    try:
        parsed = json.loads(cleaned)
        if not isinstance(parsed, dict):
            raise ValueError("not an object")
    except ValueError:
        logger.warning("[Round1 Evaluation] JSON parse failed, attempting extraction")
        score_match = _SCORE_PATTERN.search(cleaned)
        analysis_match = _ANALYSIS_PATTERN.search(cleaned)
        if not score_match or not analysis_match:
            raise GeminiResponseError("Unable to parse Gemini response")
        parsed = {"score": score_match.group(1), "analysis": analysis_match.group(1)}

    return Round1Evaluation(
        score=coerce_int_score(parsed.get("score")),
        analysis=sanitize_analysis(parsed.get("analysis")),
    )


async def evaluate_answer(question: str, user_answer: str, client: Optional[GeminiClient] = None) -> Round1Evaluation:
    """Grade a round 1 answer; grading errors propagate to the caller"""
    client = client or get_gemini_client()
    logger.info(f"[Round1 Evaluation] Evaluating answer of {len(user_answer)} characters")
    text = await client.generate(build_prompt(question, user_answer))
    logger.debug(f"[Round1 Evaluation] Raw response: {text}")
    result = parse_round1_response(text)
    logger.info(f"[Round1 Evaluation] Score: {result.score}")
    return result
