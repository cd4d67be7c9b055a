from typing import Optional


class GradingError(Exception):
    """Base class for failures in the AI grading layer"""


class GeminiConfigurationError(GradingError):
    """No Gemini API keys are configured"""


class GeminiKeysExhaustedError(GradingError):
    """Every configured key was rate limited or forbidden"""

    def __init__(self, attempts: int, last_status: Optional[int] = None):
        self.attempts = attempts
        self.last_status = last_status
        super().__init__(f"All API keys exhausted after {attempts} attempt(s) (last error: {last_status})")


class GeminiRequestError(GradingError):
    """The generative API answered with a non-success status other than 429/403"""

    def __init__(self, status_code: Optional[int], message: str):
        self.status_code = status_code
        super().__init__(f"Gemini request failed with HTTP {status_code}: {message}")


class GeminiResponseError(GradingError):
    """The model answered but the text could not be used"""
