# Path: core/aggregation/corrections.py
# Purpose: Clean transcripts with deterministic fixes for common OCR character confusions.
# Layer: core/aggregation.
# Details: Rules run per line in a fixed order; they are heuristics and may over-correct real text.

from __future__ import annotations

import re
from typing import List, Pattern, Tuple

WHITESPACE = re.compile(r"\s+")

# Order matters: later rules see the output of earlier ones.
CORRECTION_RULES: Tuple[Tuple[str, Pattern[str], str], ...] = (
    ("pipe_l_to_capital_i", re.compile(r"\|l"), "I"),
    ("zero_before_lowercase_to_o", re.compile(r"[0O](?=[a-z])"), "O"),
    ("l_before_digit_to_one", re.compile(r"l(?=[0-9])"), "1"),
    ("standalone_i_to_one", re.compile(r"(?<![A-Za-z])I(?![A-Za-z])(?!\s*[a-z])"), "1"),
    ("s_before_digit_to_five", re.compile(r"S(?=[0-9])"), "5"),
    ("z_before_digit_to_two", re.compile(r"Z(?=[0-9])"), "2"),
    ("bang_before_digit_to_one", re.compile(r"!(?=[0-9])"), "1"),
    ("rn_to_m", re.compile(r"rn"), "m"),
    ("cl_to_d", re.compile(r"cl"), "d"),
    ("ii_to_n", re.compile(r"ii"), "n"),
)


def collapse_whitespace(line: str) -> str:
    return WHITESPACE.sub(" ", line.strip())


def correct_line(line: str) -> str:
    corrected = collapse_whitespace(line)
    for _, pattern, replacement in CORRECTION_RULES:
        corrected = pattern.sub(replacement, corrected)
    return corrected


def correct_text(text: str) -> str:
    """Apply :data:`CORRECTION_RULES` to every line and drop lines left empty."""

    if not text:
        return ""
    lines: List[str] = [correct_line(line) for line in text.splitlines()]
    return "\n".join(line for line in lines if line)


__all__ = ["CORRECTION_RULES", "collapse_whitespace", "correct_line", "correct_text"]
