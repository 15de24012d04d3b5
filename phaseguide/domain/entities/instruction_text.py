"""Instruction payloads: plain text or text carrying $TOKEN placeholders."""

import re
from dataclasses import dataclass

TOKEN_RE = re.compile(r"\$[A-Z][A-Z0-9_]*")


@dataclass(frozen=True)
class StaticText:
    """Instruction text with no substitution tokens."""

    text: str

    def render(self, substitutions: dict[str, str]) -> str:
        return self.text


@dataclass(frozen=True)
class TemplatedText:
    """Instruction text with $TOKEN placeholders, in order of first appearance."""

    text: str
    tokens: tuple[str, ...]

    def render(self, substitutions: dict[str, str]) -> str:
        """Replace known tokens. Unknown tokens stay verbatim."""

        def _replace(match: re.Match) -> str:
            return substitutions.get(match.group(0), match.group(0))

        return TOKEN_RE.sub(_replace, self.text)


InstructionText = StaticText | TemplatedText


def parse_instruction_text(raw: str) -> InstructionText:
    """Classify raw instruction text once, recording the tokens it references."""
    tokens = tuple(dict.fromkeys(TOKEN_RE.findall(raw)))
    if not tokens:
        return StaticText(raw)
    return TemplatedText(raw, tokens)
