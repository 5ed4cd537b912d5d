"""Scanner-style filter: pure white paper, darkened ink."""

import numpy as np

from shared.config import BACKGROUND_RATIO, FOREGROUND_SCALE

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])


def compute_luma(pixels: np.ndarray) -> np.ndarray:
    """Per-pixel luma of an H x W x C array (C >= 3)."""
    return pixels[..., :3].astype(np.float64) @ LUMA_WEIGHTS


def apply_document_filter(pixels: np.ndarray) -> np.ndarray:
    """
    Binarize-like enhancement of a photographed document.

    The brightest luma in the image is taken as the paper level. Every pixel
    brighter than 70% of it becomes pure white; the rest are normalized
    against that threshold, squared and scaled into the dark range so mid
    tones collapse toward black.

    A single bright artifact (glare) raises the paper level for the whole
    image and can push real background into the foreground branch.

    Args:
        pixels: H x W x 3 (RGB) or H x W x 4 (RGBA) uint8 array

    Returns:
        New uint8 array of the same shape; the input is not modified.
        Alpha, when present, is copied unchanged.
    """
    luma = compute_luma(pixels)
    bg_level = float(luma.max()) if luma.size else 0.0
    threshold = bg_level * BACKGROUND_RATIO

    if threshold > 0:
        normalized = luma / threshold
    else:
        normalized = np.zeros_like(luma)

    foreground = np.clip(normalized * normalized * FOREGROUND_SCALE, 0, 255)
    value = np.where(luma > threshold, 255.0, foreground)
    value = np.rint(value).astype(np.uint8)

    output = np.array(pixels, dtype=np.uint8, copy=True)
    output[..., 0] = value
    output[..., 1] = value
    output[..., 2] = value
    return output
