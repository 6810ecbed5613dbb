"""Prompt template library for the sanitize stage.

Responsibilities:
- Centralize prompt construction for blog text cleanup.
- Keep prompts deterministic so repeated runs send identical requests.
"""

from __future__ import annotations


class PromptLibrary:
    """Build prompt strings for supported LLM tasks."""

    def sanitize_system_prompt(self) -> str:
        """Return the fixed system instruction for blog text cleanup."""

        return (
            "You edit text scraped from a blog post so it can be read aloud.\n"
            "- Remove any introductory statement, site metadata, navigation and "
            "subscription boilerplate.\n"
            "- Redact code blocks and replace each one with a short technical "
            'explanation of its content. Start it with "EDIT:" and end it with '
            '"END OF EDIT.".\n'
            "- Remove emojis and other characters that cannot be pronounced.\n"
            "Your response will be read directly to the listener, so return only the "
            "edited post as readable prose with no additional commentary."
        )

    def sanitize_user_prompt(self, raw_text: str) -> str:
        """Return the user message carrying scraped page text."""

        return raw_text
