"""
Round 3 (competitive programming) evaluation.

Score = correctness (0-1) + efficiency (0-4) + code (0-5), clamped to 0-10 and
rounded to one decimal. Plain-English explanations can earn at most 5.
"""
import math
import logging
from typing import Optional, Tuple

import httpx
from pydantic import BaseModel

from igi_backend.grading.client import GeminiClient, get_gemini_client
from igi_backend.grading.errors import GradingError
from igi_backend.grading.parsing import clamp, extract_json_object

logger = logging.getLogger(__name__)

PARSE_FAILURE_ANALYSIS = "Failed to evaluate submission. Please try again."
MAX_ANALYSIS_CHARS = 200

REQUIRED_FIELDS = (
    "algorithm_correctness_score",
    "algorithm_efficiency_score",
    "code_correctness_score",
    "identified_algorithm",
    "time_complexity",
    "analysis",
)

EFFICIENCY_RULES = {
    "r3-q1": """**Question: The Target Coordinates Range**
- **Efficient (4 marks):** Two binary searches for the first and last position O(log n)
- **Inefficient (0 marks):** Linear scan over the whole array O(n)""",
    "r3-q2": """**Question: Container With Most Water**
- **Efficient (4 marks):** Two-pointer technique starting from both ends O(n)
- **Inefficient (0 marks):** Nested loops checking all pairs O(n^2)""",
    "r3-q3": """**Question: Longest Substring Without Repeating Characters**
- **Efficient (4 marks):** Sliding window with hash set/map O(n)
- **Inefficient (0 marks):** Brute force checking all substrings O(n^2) or O(n^3)""",
}

DEFAULT_EFFICIENCY_RULE = """**Efficiency Evaluation:**
- **4 marks:** Optimal time complexity for the problem
- **0 marks:** Suboptimal or brute force approach"""

ROUND3_PROMPT = """You are an automated evaluator for a competitive programming contest (Round 3).

## CONTEXT
QUESTION: {title}

PROBLEM STATEMENT:
{prompt}

USER'S SUBMITTED ANSWER:
{answer}

## ANSWER TYPE DETECTION

The user may submit either:
1. **Code implementation** (Python, JavaScript, C++, etc.)
2. **Plain English algorithm explanation**

- If user provides **plain English explanation only**:
  - Award algorithm correctness marks (0-1) if explanation is correct
  - Award algorithm efficiency marks (0-4) if they describe an efficient approach
  - Set code_correctness_score = 0
  - TOTAL POSSIBLE: 5.0 marks
- If user provides **code**:
  - Award algorithm correctness marks (0-1) based on understanding shown in code
  - Award algorithm efficiency marks (0-4) based on time complexity of the approach
  - Award code correctness marks (0-5) separately for implementation quality
  - TOTAL POSSIBLE: 10.0 marks

## SCORING RUBRIC (TOTAL: 10 MARKS)

### 1. ALGORITHM CORRECTNESS (0-1 mark)
- **1 mark:** Correct algorithm/approach that solves the problem
- **0.5 marks:** Partially correct understanding with logical gaps
- **0 marks:** Wrong approach or doesn't address the problem

### 2. ALGORITHM EFFICIENCY (0-4 marks)
{efficiency_rules}

A brute force approach gets 0 efficiency marks even when its logic is sound.

### 3. CODE CORRECTNESS (0-5.0 marks)
- **5.0 marks:** Syntactically correct, logically sound, handles edge cases
- **3.0-4.5 marks:** Minor bugs (off-by-one errors, missing edge cases)
- **1.0-2.5 marks:** Major errors (incorrect logic, syntax errors, incomplete)
- **0 marks:** Non-functional code or no code provided

## ANALYSIS RULES (PARTICIPANT FEEDBACK)

- Use second-person: "you", "your"; under 50 words (1-2 sentences)
- Focus on PERFORMANCE, do NOT reveal solution details, algorithms or data structures
- Do NOT assume code execution or test case results

## OUTPUT FORMAT (JSON ONLY - NO MARKDOWN)

{{
  "algorithm_correctness_score": <number between 0 and 1>,
  "algorithm_efficiency_score": <number between 0 and 4>,
  "code_correctness_score": <number between 0 and 5.0>,
  "identified_algorithm": "<brief description>",
  "time_complexity": "<O(n), O(n^2), etc.>",
  "analysis": "<max 50 words, second-person, performance-focused>"
}}

Evaluate statically, give partial credit generously for reasonable attempts, and return JSON only."""


class Round3Details(BaseModel):
    algorithm_correctness: float = 0
    algorithm_efficiency: float = 0
    code_correctness: float = 0
    identified_algorithm: str = "Unknown"
    time_complexity: str = "Unknown"


class Round3Evaluation(BaseModel):
    score: float
    analysis: str
    details: Round3Details


def zero_evaluation(analysis: str, identified_algorithm: str, time_complexity: str) -> Round3Evaluation:
    return Round3Evaluation(
        score=0,
        analysis=analysis,
        details=Round3Details(identified_algorithm=identified_algorithm, time_complexity=time_complexity),
    )


def get_efficiency_rules(question_id: str) -> str:
    return EFFICIENCY_RULES.get(question_id, DEFAULT_EFFICIENCY_RULE)


def build_prompt(title: str, prompt: str, answer: str, question_id: str) -> str:
    return ROUND3_PROMPT.format(
        title=title, prompt=prompt, answer=answer, efficiency_rules=get_efficiency_rules(question_id)
    )


def parse_round3_response(text: str) -> Optional[Tuple[Round3Details, str]]:
    """Clamped components plus analysis, or None when the response is malformed"""
    try:
        parsed = extract_json_object(text)
        missing = [f for f in REQUIRED_FIELDS if f not in parsed]
        if missing:
            raise GradingError(f"Missing required field: {missing[0]}")
    except GradingError as e:
        logger.error(f"[Round3 Evaluation] Failed to parse response: {e}")
        return None

    return Round3Details(
        algorithm_correctness=clamp(parsed["algorithm_correctness_score"], 0, 1),
        algorithm_efficiency=clamp(parsed["algorithm_efficiency_score"], 0, 4),
        code_correctness=clamp(parsed["code_correctness_score"], 0, 5),
        identified_algorithm=str(parsed["identified_algorithm"]),
        time_complexity=str(parsed["time_complexity"]),
    ), str(parsed["analysis"])[:MAX_ANALYSIS_CHARS]


def total_score(details: Round3Details) -> float:
    total = clamp(details.algorithm_correctness + details.algorithm_efficiency + details.code_correctness, 0, 10)
    return math.floor(total * 10 + 0.5) / 10


async def evaluate_round3_answer(
    title: str,
    prompt: str,
    user_answer: str,
    question_id: str,
    client: Optional[GeminiClient] = None,
) -> Round3Evaluation:
    if not user_answer or not user_answer.strip():
        return zero_evaluation("No answer provided", "None", "N/A")

    client = client or get_gemini_client()
    if not client.configured:
        return zero_evaluation("Evaluation service unavailable", "Unknown", "Unknown")

    logger.info(f"[Round3 Evaluation] Evaluating {question_id} - {title}")
    try:
        text = await client.generate(build_prompt(title, prompt, user_answer, question_id))
    except (GradingError, httpx.HTTPError) as e:
        logger.error(f"[Round3 Evaluation] Request failed: {e}")
        return zero_evaluation("Evaluation service error. Please retry.", "Error", "Error")

    parsed = parse_round3_response(text)
    if parsed is None:
        return zero_evaluation(PARSE_FAILURE_ANALYSIS, "Parse Error", "Unknown")

    details, analysis = parsed
    score = total_score(details)
    logger.info(
        f"[Round3 Evaluation] Score: {score}/10 (correctness={details.algorithm_correctness}, "
        f"efficiency={details.algorithm_efficiency}, code={details.code_correctness})"
    )
    return Round3Evaluation(score=score, analysis=analysis, details=details)
