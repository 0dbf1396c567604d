from __future__ import annotations

from typing import Callable, Optional

import numpy as np
import pytest

from core.models.domain import SourceImage


@pytest.fixture
def make_image() -> Callable[..., SourceImage]:
    def factory(width: int = 64, height: int = 48, value: int = 200, seed: Optional[int] = None) -> SourceImage:
        if seed is not None:
            rng = np.random.default_rng(seed)
            pixels = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
        else:
            pixels = np.full((height, width, 3), value, dtype=np.uint8)
        return SourceImage(pixels)

    return factory
