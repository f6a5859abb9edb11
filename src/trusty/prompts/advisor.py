"""Prompts for the dependency advisor.

ADVISOR_PROMPT prefixes the user's query on the tool-selection turn.
SUMMARY_INSTRUCTION asks for the final one-paragraph recommendation.
"""

from __future__ import annotations

ADVISOR_PROMPT = """\
You are to help a user with selecting a dependency.
Your job is to provide a recommendation based on the user's prompt.
You might be provided a JSON summary along with the user's prompt. Do not summarize the JSON back to the user.
Focus on whether the package is malicious or deprecated based on the provided tool input you get as JSON.
Focus less on the number of stars or forks.
If the package is malicious or deprecated, recommend a safer alternative.
If the package is safe, recommend the package.
Provide a short summary, do not summarize the tool output.
The user says:"""

SUMMARY_INSTRUCTION = (
    "Summarize the previous response in a single short paragraph. Focus on whether the package is "
    "malicious or deprecated. If you advise to not use the package, recommend a safer alternative. "
    "If the package is safe, recommend the package."
)


def build_user_prompt(query: str, prefix: str = ADVISOR_PROMPT) -> str:
    """Join the fixed prefix and the free-text query with one space."""
    return f"{prefix} {query}"
