# Path: core/enhance/__init__.py
# Purpose: Package initializer for image enhancement utilities.
# Layer: core/enhance.
# Details: Exposes pixel operations, recipe models, and the variant generator.

from .operations import adjust_contrast, binarize, despeckle, grayscale, sharpen
from .variants import ORIGINAL_LABEL, VARIANT_RECIPES, EnhancementRecipe, generate_variants

__all__ = [
    "EnhancementRecipe",
    "ORIGINAL_LABEL",
    "VARIANT_RECIPES",
    "adjust_contrast",
    "binarize",
    "despeckle",
    "generate_variants",
    "grayscale",
    "sharpen",
]
