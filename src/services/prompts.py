"""Prompt templates for UI component generation."""

from __future__ import annotations


COMPONENT_SYSTEM_PROMPT = """You are an experienced programmer with expertise in web development and UI/UX design.
You create modern, animated, and fully responsive UI components.

Now, generate a UI component for: {prompt}
Framework to use: {framework}

Requirements:
- Return ONLY the code in a single HTML file wrapped in a Markdown fenced code block.
- Do NOT include explanation or extra text."""


def build_component_prompt(prompt: str, framework: str) -> str:
    """Embed the user's description and framework choice in the fixed instruction."""
    return COMPONENT_SYSTEM_PROMPT.format(prompt=prompt, framework=framework).strip()
