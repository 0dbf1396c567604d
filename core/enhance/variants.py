# Path: core/enhance/variants.py
# Purpose: Build the fixed catalog of enhanced renditions fed to the OCR engine.
# Layer: core/enhance.
# Details: Recipes are typed pydantic models applied in a fixed operation order; failures are skipped per recipe.

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from core.models.domain import ImageVariant, SourceImage
from . import operations

logger = logging.getLogger(__name__)

ORIGINAL_LABEL = "original"


class EnhancementRecipe(BaseModel):
    """Combination of pixel operations that produces one image variant.

    Operations always run in the order grayscale, contrast/brightness, sharpen,
    binarize, despeckle, whichever subset is enabled.
    """

    model_config = ConfigDict(frozen=True)

    grayscale: bool = Field(default=False, description="Collapse channels to their mean.")
    contrast: Optional[float] = Field(default=None, description="Contrast multiplier around mid-grey; 1.0 is neutral.")
    brightness: Optional[float] = Field(default=None, description="Offset added after the contrast stretch.")
    sharpen: bool = Field(default=False, description="Apply the 3x3 sharpening kernel.")
    binarize: bool = Field(default=False, description="Threshold into pure black and white.")
    threshold: float = Field(default=128.0, ge=0, le=255, description="Binarization threshold.")
    despeckle: bool = Field(default=False, description="Apply a 3x3 median filter.")

    @property
    def label(self) -> str:
        parts: List[str] = []
        if self.grayscale:
            parts.append("grayscale")
        if self.contrast is not None:
            parts.append(f"contrast={self.contrast:g}")
        if self.brightness is not None:
            parts.append(f"brightness={self.brightness:g}")
        if self.sharpen:
            parts.append("sharpen")
        if self.binarize:
            parts.append(f"binarize={self.threshold:g}")
        if self.despeckle:
            parts.append("despeckle")
        return "+".join(parts) or ORIGINAL_LABEL

    def apply(self, pixels: np.ndarray) -> np.ndarray:
        result = pixels
        if self.grayscale:
            result = operations.grayscale(result)
        if self.contrast is not None or self.brightness is not None:
            result = operations.adjust_contrast(
                result,
                contrast=1.0 if self.contrast is None else self.contrast,
                brightness=0.0 if self.brightness is None else self.brightness,
            )
        if self.sharpen:
            result = operations.sharpen(result)
        if self.binarize:
            result = operations.binarize(result, threshold=self.threshold)
        if self.despeckle:
            result = operations.despeckle(result)
        return result


VARIANT_RECIPES: Dict[str, EnhancementRecipe] = {
    "contrast_boost": EnhancementRecipe(grayscale=True, contrast=1.5),
    "sharp_gray": EnhancementRecipe(grayscale=True, sharpen=True, contrast=1.2),
    "binarized": EnhancementRecipe(grayscale=True, binarize=True, threshold=128),
    "despeckled_contrast": EnhancementRecipe(grayscale=True, despeckle=True, contrast=1.7, brightness=10),
    "dark_text": EnhancementRecipe(grayscale=True, contrast=2.0, brightness=-10),
    "light_text": EnhancementRecipe(grayscale=True, contrast=2.0, brightness=30, binarize=True, threshold=180),
    "small_text": EnhancementRecipe(grayscale=True, sharpen=True, contrast=2.5, brightness=0, despeckle=True),
    # Low threshold keeps thin dark strokes on light packaging.
    "dark_on_light": EnhancementRecipe(
        grayscale=True, contrast=3.0, brightness=-5, sharpen=True, binarize=True, threshold=100
    ),
    "light_on_dark": EnhancementRecipe(
        grayscale=True, contrast=3.0, brightness=15, sharpen=True, binarize=True, threshold=150
    ),
    "edge_enhanced": EnhancementRecipe(grayscale=True, sharpen=True, contrast=2.2, brightness=0),
}


def generate_variants(
    image: SourceImage, recipes: Optional[Mapping[str, EnhancementRecipe]] = None
) -> List[ImageVariant]:
    """Return the original image followed by one variant per recipe that succeeded."""

    recipes = VARIANT_RECIPES if recipes is None else recipes
    variants: List[ImageVariant] = [ImageVariant(label=ORIGINAL_LABEL, pixels=image.pixels)]

    for name, recipe in recipes.items():
        try:
            pixels = recipe.apply(image.pixels)
        except Exception as exc:  # noqa: BLE001 - one broken recipe must not cost the others
            logger.warning("Skipping variant %s (%s): %s", name, recipe.label, exc)
            continue
        variants.append(ImageVariant(label=recipe.label, pixels=pixels))

    logger.debug("Generated %d of %d variants", len(variants) - 1, len(recipes))
    return variants


__all__ = ["EnhancementRecipe", "ORIGINAL_LABEL", "VARIANT_RECIPES", "generate_variants"]
