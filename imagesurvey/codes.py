"""
Survey share codes.

A code is six digits written as 3+3 ("123-456"). It is assigned once when a
survey is created and is how respondents join. Anything that does not match
the pattern is treated as a survey id when looking a survey up.
"""

import random
import re
from typing import Callable, Optional

from imagesurvey.errors import CodeGenerationExhausted

CODE_PATTERN = re.compile(r'^\d{3}-\d{3}$')

DEFAULT_CODE_ATTEMPTS = 50


def is_survey_code(value: str) -> bool:
    return bool(CODE_PATTERN.match(value.strip()))


def format_code_input(value: str) -> str:
    """
    Normalize what a respondent types: digits only, at most six,
    with the dash inserted after the third digit.
    """
    digits = re.sub(r'\D', '', value)[:6]
    if len(digits) > 3:
        return f"{digits[:3]}-{digits[3:]}"
    return digits


def random_code(rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    return f"{rng.randint(0, 999):03d}-{rng.randint(0, 999):03d}"


def generate_unique_code(is_taken: Callable[[str], bool],
                         max_attempts: int = DEFAULT_CODE_ATTEMPTS,
                         rng: Optional[random.Random] = None) -> str:
    """
    Draw random codes until one is not taken.

    Args:
        is_taken: Collision oracle, True if the code already belongs to a survey
        max_attempts: Retry budget
        rng: Optional random source (for reproducible tests)

    Raises:
        CodeGenerationExhausted: every attempt collided
    """
    for _ in range(max_attempts):
        code = random_code(rng)
        if not is_taken(code):
            return code
    raise CodeGenerationExhausted(max_attempts)
