"""Prompt classification helpers.

Pure functions, no state:
    - classify(prompt): first matching topic category, "general" otherwise
    - is_trivial(prompt): too short or a bare acknowledgment
    - is_skip_request(prompt): the whole prompt is a skip phrase
    - difficulty_note(difficulty): annotation appended to task text

Categories are data, evaluated in list order; first match wins. To add a
category, insert a `Category` at the right position in CATEGORIES.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

MIN_PROMPT_LENGTH = 10
GENERAL_CATEGORY = "general"

TRIVIAL_PATTERN = re.compile(
    r"^(ok|okay|thanks|thank you|thx|ty|yes|no|sure|got it|understood|perfect|great|good|nice|cool|fine"
    r"|k|y|n|yep|nope|alright|right|correct|done|next)\.?!?$",
    re.IGNORECASE,
)

SKIP_PATTERN = re.compile(
    r"^(skip|/skip|skip this|skip task|skip it|i want to skip|let me skip|can i skip|skippa|salta)$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class Category:
    """A topic category: keyword pattern plus its exercise pool."""

    name: str
    keywords: re.Pattern[str] | None
    tasks: tuple[str, ...]

    def matches(self, prompt: str) -> bool:
        return self.keywords is not None and self.keywords.search(prompt) is not None


def _kw(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


CATEGORIES: tuple[Category, ...] = (
    Category(
        "security",
        _kw(r"auth|login|logout|password|token|jwt|session|security|encrypt|hash|credential|permission|role|oauth|apikey|2fa|mfa"),
        (
            "Write a password validation function that checks security requirements (length, complexity, special characters).",
            "Implement a function to sanitize user input and prevent injection attacks.",
            "Create a helper function to verify user permissions/roles.",
        ),
    ),
    Category(
        "api",
        _kw(r"api|endpoint|route|rest|request|response|http|fetch|axios|graphql|webhook|cors"),
        (
            "Write a validation schema/model for the request body or response of this endpoint.",
            "Implement a middleware function or decorator to handle a cross-cutting concern (logging, timing, error handling).",
            "Create a helper function to format error responses consistently.",
        ),
    ),
    Category(
        "database",
        _kw(r"database|query|sql|model|schema|migration|table|record|repository|orm|prisma|mongoose|postgres|mysql|mongo"),
        (
            "Write a sanitization function to prevent SQL injection or validate data before insertion.",
            "Implement a helper function for paginating query results.",
            "Create a transformation function between the database model and the DTO/response.",
        ),
    ),
    Category(
        "debug",
        _kw(r"bug|debug|error|crash|broken|issue|exception|trace|not working|fails|failing"),
        (
            "Write a test that reproduces the described bug. The test should fail before the fix and pass after.",
            "Implement a logging/debug helper function to trace data flow at this point in the code.",
            "Create a validation function that prevents this type of error in the future.",
        ),
    ),
    Category(
        "test",
        _kw(r"test|spec|assert|pytest|jest|unittest|coverage|mock|stub|spy|vitest|mocha"),
        (
            "Write a test for a non-obvious edge case of this functionality. Think about empty inputs, null, numeric limits.",
            "Implement an integration test that verifies the interaction between multiple components.",
            "Create a fixture or factory function to generate reusable test data.",
        ),
    ),
    Category(
        "architecture",
        _kw(r"refactor|restructure|reorganize|architect|pattern|solid|abstract|interface|decouple|modular"),
        (
            "Extract an interface/protocol that defines the contract for this component.",
            "Implement a factory or builder pattern for creating this object.",
            "Create a base class/module that can be extended for variants of this functionality.",
        ),
    ),
    Category(
        "frontend",
        _kw(r"component|react|vue|angular|svelte|nextjs|nuxt|tailwind|css|scss|sass|html|style|button|form|page"),
        (
            "Write a reusable presentational component (button, input, card) that you could use in this feature.",
            "Implement a custom hook or composable to manage local state for this component.",
            "Create a form validation function for the input fields of this feature.",
        ),
    ),
    Category(
        "function",
        _kw(r"function|implement|create|add|write|build|make|develop"),
        (
            "Write a related helper function that could be useful for this implementation. "
            "Think about input validation, output formatting, or common utilities.",
            "Implement a validation function for the main parameters of this feature. Consider edge cases and input types.",
            "Create a utility function that extracts/transforms the data needed for this operation.",
        ),
    ),
    Category(
        GENERAL_CATEGORY,
        None,
        (
            "Write a utility function that could be useful in the context of this request.",
            "Implement a unit test for an existing related functionality.",
            "Create a data validation or transformation function relevant to this task.",
        ),
    ),
)

CATEGORY_BY_NAME = {category.name: category for category in CATEGORIES}

DIFFICULTY_NOTES = {
    "easy": "(Difficulty: EASY - basic implementation, few lines)",
    "medium": "(Difficulty: MEDIUM - consider edge cases and error handling)",
    "hard": "(Difficulty: HARD - robust implementation with tests, types, documentation)",
    "adaptive": "(Difficulty: adapted to the context of the request)",
}


def classify(prompt: str) -> str:
    """Return the name of the first category whose keywords match."""
    for category in CATEGORIES:
        if category.matches(prompt):
            return category.name
    return GENERAL_CATEGORY


def exercises_for(category: str) -> tuple[str, ...]:
    return CATEGORY_BY_NAME.get(category, CATEGORY_BY_NAME[GENERAL_CATEGORY]).tasks


def is_trivial(prompt: str) -> bool:
    """Check if prompt is too short or a bare acknowledgment."""
    trimmed = prompt.strip()
    return len(trimmed) < MIN_PROMPT_LENGTH or TRIVIAL_PATTERN.match(trimmed) is not None


def is_skip_request(prompt: str) -> bool:
    """Check if the whole prompt is a skip phrase."""
    return SKIP_PATTERN.match(prompt.strip()) is not None


def difficulty_note(difficulty: str) -> str:
    return DIFFICULTY_NOTES.get(difficulty, DIFFICULTY_NOTES["adaptive"])
