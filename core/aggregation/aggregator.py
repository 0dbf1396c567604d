# Path: core/aggregation/aggregator.py
# Purpose: Reconcile full-image and region transcripts into one cleaned transcript.
# Layer: core/aggregation.
# Details: Picks the best variant by quality, groups regions by vertical position, dedupes, then corrects.

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from core.models.domain import AggregatedTranscript, RecognitionResult, Region
from .corrections import collapse_whitespace, correct_text

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n\n"


def select_best_result(results: Iterable[RecognitionResult]) -> Optional[RecognitionResult]:
    """Return the result with the highest quality; the first one wins ties."""

    best: Optional[RecognitionResult] = None
    for result in results:
        if best is None or result.quality > best.quality:
            best = result
    return best


def group_region_texts(region_results: Sequence[RecognitionResult], image_height: int) -> List[str]:
    """Join region transcripts into a top-half group and a bottom-half group.

    A region belongs to the top half when the vertical midpoint of its box lies
    above the middle of the image.
    """

    top: List[str] = []
    bottom: List[str] = []
    for result in region_results:
        if result.task.region is None or not result.text:
            continue
        if result.task.region.vertical_midpoint < image_height / 2:
            top.append(result.text)
        else:
            bottom.append(result.text)

    groups: List[str] = []
    for texts in (top, bottom):
        joined = " ".join(texts).strip()
        if joined:
            groups.append(joined)
    return groups


def _normalize_for_comparison(line: str) -> str:
    return collapse_whitespace(line).lower()


def remove_duplicate_lines(text: str) -> str:
    """Drop blank lines and near-duplicates, keeping the more complete line.

    Two lines are near-duplicates when one normalised line contains the other.
    A new line that is contained in a kept line is dropped; a new line that
    contains kept lines replaces the first of them and absorbs the rest, so
    running the filter on its own output changes nothing.
    """

    if not text:
        return ""

    kept: List[str] = []
    keys: List[str] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        key = _normalize_for_comparison(line)

        related = [i for i, seen in enumerate(keys) if key in seen or seen in key]
        if not related:
            kept.append(line)
            keys.append(key)
            continue
        if any(key in keys[i] for i in related):
            continue

        first = related[0]
        kept[first] = line
        keys[first] = key
        for i in reversed(related[1:]):
            del kept[i]
            del keys[i]

    return "\n".join(kept)


def combine_sections(region_texts: Sequence[str], full_text: str) -> str:
    """Combine region groups and the full-image transcript into raw text."""

    full_text = full_text.strip()
    if region_texts and full_text:
        return remove_duplicate_lines(SECTION_SEPARATOR.join([*region_texts, full_text]))
    if region_texts:
        return SECTION_SEPARATOR.join(region_texts)
    return full_text


def aggregate(
    variant_results: Sequence[RecognitionResult],
    region_results: Sequence[RecognitionResult],
    image_height: int,
) -> AggregatedTranscript:
    """Produce the final transcript for one extraction."""

    best = select_best_result(variant_results)
    full_text = best.text if best is not None else ""
    region_texts = group_region_texts(region_results, image_height)

    combined = combine_sections(region_texts, full_text)
    text = correct_text(combined)

    contributing: List[Region] = [
        result.task.region for result in region_results if result.task.region is not None and result.text
    ]
    best_variant = best.task.variant.label if best is not None else None
    logger.debug(
        "Aggregated %d variant and %d region transcripts (best variant: %s)",
        len(variant_results),
        len(region_results),
        best_variant,
    )
    return AggregatedTranscript(text=text, regions=contributing, best_variant=best_variant)


__all__ = [
    "aggregate",
    "combine_sections",
    "group_region_texts",
    "remove_duplicate_lines",
    "select_best_result",
]
