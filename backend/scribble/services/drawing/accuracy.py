"""Coverage-based accuracy scoring.

Both rasters are downsampled to a small square grid so the comparison does
not depend on the canvas resolution. A cell is "active" when any RGB
channel is darker than the brightness threshold, i.e. it is not near-white
background. Accuracy is the share of the reference's active cells that are
also active in the user's drawing, amplified because hand-drawn strokes
rarely overlap a generated reference pixel for pixel.
"""

import asyncio
import io
import logging

import numpy as np
from PIL import Image

from .raster import RasterBuffer


logger = logging.getLogger(__name__)

GRID_SIZE = 64
ACTIVE_THRESHOLD = 240
AMPLIFICATION = 2.0
FALLBACK_ACCURACY = 50.0


def active_mask(image: Image.Image, grid_size: int = GRID_SIZE,
                threshold: int = ACTIVE_THRESHOLD) -> np.ndarray:
    small = image.resize((grid_size, grid_size), Image.Resampling.BILINEAR)
    rgb = np.asarray(small, dtype=np.uint8)[..., :3]
    return np.any(rgb < threshold, axis=-1)


class AccuracyScorer:
    def __init__(self, provider, grid_size: int = GRID_SIZE, threshold: int = ACTIVE_THRESHOLD,
                 amplification: float = AMPLIFICATION, fallback: float = FALLBACK_ACCURACY):
        self.provider = provider
        self.grid_size = grid_size
        self.threshold = threshold
        self.amplification = amplification
        self.fallback = fallback

    def reference_url(self, seed: str):
        url_for = getattr(self.provider, 'url_for', None)
        return url_for(seed) if url_for else None

    def compare(self, user: RasterBuffer, reference: RasterBuffer) -> float:
        """Return the amplified coverage percentage, clamped to [0, 100]."""
        user_active = active_mask(user.to_image(), self.grid_size, self.threshold)
        reference_active = active_mask(reference.to_image(), self.grid_size, self.threshold)

        total = int(reference_active.sum())
        if total == 0:
            return 0.0
        matched = int(np.logical_and(user_active, reference_active).sum())
        coverage = matched / total * 100.0
        return max(0.0, min(100.0, coverage * self.amplification))

    def decode(self, data: bytes) -> RasterBuffer:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return RasterBuffer.from_image(image)

    async def score(self, user: RasterBuffer, seed: str) -> float:
        """Score a user raster against the reference image for ``seed``.

        Never raises for reference problems: fetch or decode failures
        resolve to the fallback score so scoring cannot stall a session.
        """
        try:
            data = await asyncio.to_thread(self.provider.fetch, seed)
            reference = self.decode(data)
        except Exception as exc:
            logger.warning(f"[reference-fallback] seed={seed} error={exc!r} score={self.fallback}")
            return self.fallback
        return self.compare(user, reference)
