"""Prompt templates."""

from trusty.prompts.advisor import ADVISOR_PROMPT, SUMMARY_INSTRUCTION, build_user_prompt

__all__ = ["ADVISOR_PROMPT", "SUMMARY_INSTRUCTION", "build_user_prompt"]
