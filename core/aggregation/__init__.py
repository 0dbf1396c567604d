# Path: core/aggregation/__init__.py
# Purpose: Package initializer for transcript aggregation.
# Layer: core/aggregation.
# Details: Exposes the aggregator entrypoint, deduplication, and OCR error corrections.

from .aggregator import aggregate, combine_sections, group_region_texts, remove_duplicate_lines, select_best_result
from .corrections import CORRECTION_RULES, correct_line, correct_text

__all__ = [
    "CORRECTION_RULES",
    "aggregate",
    "combine_sections",
    "correct_line",
    "correct_text",
    "group_region_texts",
    "remove_duplicate_lines",
    "select_best_result",
]
