"""Prompt composition for generated actor input."""

from __future__ import annotations

GENERATION_SYSTEM_PROMPT = (
    "You write example input for Apify actors. "
    "Reply with exactly one JSON object and nothing else: "
    "no prose, no explanation, no markdown code fences."
)


def make_generation_prompt(actor_id: str) -> str:
    """
    Builds the user prompt for one actor. The wording is fixed so replies stay comparable.
    """
    lines = [
        f"Actor: {actor_id}",
        "",
        "Produce a plausible, minimal input object that this actor would accept when started.",
        "Use the field names the actor most likely expects (for example startUrls, maxItems, queries).",
        "Return only the JSON object.",
    ]
    return "\n".join(lines) + "\n"
