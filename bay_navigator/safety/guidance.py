"""Safety tips shown before a user contacts a sensitive program."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .models import SafetyTip
from .provider import SafetyProvider


@dataclass(frozen=True)
class SafetyTipsPrompt:
    """Content of the "Safety First" prompt."""

    program_name: str
    tips: list[SafetyTip] = field(default_factory=list)
    title: str = "Safety First"

    @property
    def intro(self) -> str:
        return f"Before contacting {self.program_name}, please consider these safety tips:"


def prepare_contact(
    provider: SafetyProvider,
    program_name: str,
    category: str | None,
    eligibility: Sequence[str] | None,
) -> SafetyTipsPrompt | None:
    """Decide whether tips must be shown before contacting a program.

    Returns None when the user turned tips off or the program is not
    sensitive, so the caller can proceed straight to contact.
    """
    if not provider.show_safety_tips:
        return None
    if not provider.is_program_sensitive(category, eligibility):
        return None
    return SafetyTipsPrompt(program_name=program_name, tips=provider.get_safety_tips(category))
