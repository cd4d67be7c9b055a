"""
Round 2 (debugging) evaluation.

The model finds the bugs in the snippet itself and compares them with what the
team reported. Failures never raise: the team gets a zero score and an
internal reason is kept for the logs.
"""
import logging
from typing import List, Optional

import httpx
from pydantic import BaseModel, Field

from igi_backend.grading.client import GeminiClient, get_gemini_client
from igi_backend.grading.errors import GeminiConfigurationError, GeminiResponseError, GradingError
from igi_backend.grading.parsing import clamp, extract_json_object

logger = logging.getLogger(__name__)

ROUND2_PROMPT = """You are an automated evaluator for a programming debugging contest (Round 2).

## CONTEXT
QUESTION TITLE: {title}
LANGUAGE: {language}
QUESTION DESCRIPTION: {description}

CODE SNIPPET WITH BUGS:
```{language}
{code}
```

USER'S SUBMITTED ANSWER (Error Identification):
{answer}

## YOUR TASK
1. **Analyze the code** and identify ALL bugs present (there are typically 1-2 bugs per question)
2. **Compare** the user's identified errors with the actual bugs you found
3. **Evaluate** how accurately the user described:
   - What the error is (error identification)
   - How to fix it (fix description)

## SCORING CRITERIA - LIBERAL APPROACH
Each bug can earn a maximum of 10 marks:
- 7 marks for correctly identifying the error (primary focus)
- 3 marks for describing how to fix it (secondary)

If a question has 2 bugs:
- Total possible marks = 20
- Final score normalized to 0-10 scale
- User gets partial credit for identifying only 1 bug correctly

If a question has 1 bug:
- Total possible marks = 10

## EVALUATION GUIDELINES - BE LIBERAL
- Award FULL marks (7/7) for error identification if user identifies the bug correctly, even if wording is imprecise
- Accept variations in how the error is described as long as the core issue is identified
- Award marks (2-3/3) for fix description if the general fix approach is correct
- Give partial credit generously - if user shows understanding of the problem, award marks
- Only award 0 marks if the user completely missed the bug or described something entirely unrelated
- Focus on CORRECTNESS of identification, not formatting, precision, or extra details

## PARTICIPANT FEEDBACK RULES (CRITICAL)

The "analysis" field is shown directly to the participant.

MUST:
- Use second-person only: "you", "your"
- Produce exactly 1-2 short sentences, under 50 words total
- Focus ONLY on evaluation quality, not implementation details

DO NOT:
- Restate or paraphrase the error the user mentioned, or the actual bug
- Mention code, variables, operators, line numbers, or fixes
- Hint at the correct solution or reveal how many errors exist

Score = 10: congratulate and confirm full criteria satisfaction.
Score 5-9.5: partial success with minor gaps leading to reduced marks.
Score < 5: insufficient alignment with the evaluation criteria.

## OUTPUT FORMAT (JSON ONLY)

{{
  "identifiedErrors": [
    {{
      "error_description": "<internal>",
      "fix_description": "<internal>",
      "identification_score": <0-7>,
      "fix_score": <0-3>
    }}
  ],
  "score": <number 0-10>,
  "analysis": "<participant-facing feedback>",
  "reason": "<internal, may be technical>"
}}

CRITICAL REMINDERS:
- Return ONLY the JSON object (no markdown, no code blocks)
- If user identified 0 bugs correctly: identifiedErrors = [], score = 0"""


class IdentifiedError(BaseModel):
    error_description: str = ""
    fix_description: str = ""
    identification_score: float = 0
    fix_score: float = 0


class DebuggingEvaluation(BaseModel):
    identified_errors: List[IdentifiedError] = Field(default_factory=list, serialization_alias="identifiedErrors")
    score: float = 0
    analysis: str = ""
    reason: str = ""


def zero_evaluation(analysis: str, reason: str) -> DebuggingEvaluation:
    return DebuggingEvaluation(identified_errors=[], score=0, analysis=analysis, reason=reason)


def build_prompt(title: str, description: str, code: str, answer: str, language: str) -> str:
    return ROUND2_PROMPT.format(title=title, description=description, code=code, answer=answer, language=language)


def parse_round2_response(text: str) -> DebuggingEvaluation:
    parsed = extract_json_object(text)
    errors = []
    for item in parsed.get("identifiedErrors") or []:
        if not isinstance(item, dict):
            continue
        errors.append(IdentifiedError(
            error_description=str(item.get("error_description", "")),
            fix_description=str(item.get("fix_description", "")),
            identification_score=clamp(item.get("identification_score", 0), 0, 7),
            fix_score=clamp(item.get("fix_score", 0), 0, 3),
        ))
    return DebuggingEvaluation(
        identified_errors=errors,
        score=clamp(parsed.get("score", 0), 0, 10),
        analysis=str(parsed.get("analysis") or ""),
        reason=str(parsed.get("reason") or ""),
    )


async def score_debugging_answer(
    title: str,
    description: str,
    code: str,
    user_answer: str,
    language: str,
    client: Optional[GeminiClient] = None,
) -> DebuggingEvaluation:
    client = client or get_gemini_client()
    if not client.configured:
        return zero_evaluation("Gemini API key not configured", "Missing API key")

    logger.info(f"[Round2 Evaluation] Scoring '{title}' ({language}) with {client.pool.count} key(s)")
    try:
        text = await client.generate(build_prompt(title, description, code, user_answer, language))
        logger.debug(f"[Round2 Evaluation] Raw response: {text}")
        return parse_round2_response(text)
    except GeminiConfigurationError:
        return zero_evaluation("Gemini API key not configured", "Missing API key")
    except GeminiResponseError as e:
        logger.error(f"[Round2 Evaluation] Unusable response: {e}")
        return zero_evaluation("Invalid response format", str(e))
    except (GradingError, httpx.HTTPError) as e:
        logger.error(f"[Round2 Evaluation] Request failed: {e}")
        return zero_evaluation("Evaluation failed", str(e))
