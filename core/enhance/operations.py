# Path: core/enhance/operations.py
# Purpose: Provide the pixel operations used to build OCR-friendly image variants.
# Layer: core/enhance.
# Details: Pure numpy functions over (H, W, 3) uint8 rasters; every step is re-quantised to 8 bits.

from __future__ import annotations

from typing import List

import numpy as np

SHARPEN_KERNEL = np.array(
    [
        [0, -1, 0],
        [-1, 5, -1],
        [0, -1, 0],
    ],
    dtype=np.float32,
)


def _quantize(values: np.ndarray) -> np.ndarray:
    """Round to the nearest integer and clamp into the 0..255 range."""

    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def _neighbourhood(pixels: np.ndarray) -> List[np.ndarray]:
    """Return the nine shifted views covering every interior pixel's 3x3 window."""

    height, width = pixels.shape[:2]
    return [
        pixels[dy : height - 2 + dy, dx : width - 2 + dx]
        for dy in range(3)
        for dx in range(3)
    ]


def grayscale(pixels: np.ndarray) -> np.ndarray:
    """Replace each pixel's channels with their mean."""

    mean = pixels.astype(np.float32).mean(axis=2, keepdims=True)
    return np.repeat(_quantize(mean), 3, axis=2)


def adjust_contrast(pixels: np.ndarray, contrast: float = 1.0, brightness: float = 0.0) -> np.ndarray:
    """Scale each channel around mid-grey and shift it by ``brightness``."""

    adjusted = (pixels.astype(np.float32) - 128.0) * contrast + 128.0 + brightness
    return _quantize(adjusted)


def sharpen(pixels: np.ndarray) -> np.ndarray:
    """Convolve with :data:`SHARPEN_KERNEL`; the one-pixel border is left untouched."""

    result = pixels.copy()
    if pixels.shape[0] < 3 or pixels.shape[1] < 3:
        return result

    source = pixels.astype(np.float32)
    accumulated = np.zeros((pixels.shape[0] - 2, pixels.shape[1] - 2, pixels.shape[2]), dtype=np.float32)
    for view, weight in zip(_neighbourhood(source), SHARPEN_KERNEL.flatten()):
        if weight:
            accumulated += view * weight
    result[1:-1, 1:-1] = _quantize(accumulated)
    return result


def binarize(pixels: np.ndarray, threshold: float = 128.0) -> np.ndarray:
    """Map pixels brighter than ``threshold`` to white and everything else to black."""

    mean = pixels.astype(np.float32).mean(axis=2, keepdims=True)
    mask = np.where(mean > threshold, 255, 0).astype(np.uint8)
    return np.repeat(mask, 3, axis=2)


def despeckle(pixels: np.ndarray) -> np.ndarray:
    """Apply a 3x3 median filter per channel; the one-pixel border is left untouched."""

    result = pixels.copy()
    if pixels.shape[0] < 3 or pixels.shape[1] < 3:
        return result

    stacked = np.stack(_neighbourhood(pixels), axis=0)
    # Median of nine values is the fifth after sorting.
    result[1:-1, 1:-1] = np.sort(stacked, axis=0)[4]
    return result


__all__ = ["SHARPEN_KERNEL", "adjust_contrast", "binarize", "despeckle", "grayscale", "sharpen"]
