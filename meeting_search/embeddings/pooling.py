"""Token pooling and normalization for feature-extraction output."""

from typing import Any

import numpy as np


def to_array(values: Any) -> np.ndarray:
    """Convert model output (torch tensor or array-like) to a float32 array."""
    if hasattr(values, "detach"):
        values = values.detach().cpu().float().numpy()
    return np.asarray(values, dtype=np.float32)


def mean_pool(
    token_embeddings: np.ndarray,
    attention_mask: np.ndarray | None = None,
) -> np.ndarray:
    """Average token vectors into one sentence vector.

    Args:
        token_embeddings: Array of shape ``(tokens, dim)``.
        attention_mask: Optional array of shape ``(tokens,)``; padding
            positions (mask 0) are excluded from the average.

    Returns:
        Array of shape ``(dim,)``.
    """
    if token_embeddings.ndim != 2:
        raise ValueError(
            f"expected token embeddings of shape (tokens, dim), got {token_embeddings.shape}"
        )

    if attention_mask is None:
        return token_embeddings.mean(axis=0)

    mask = np.asarray(attention_mask, dtype=token_embeddings.dtype).reshape(-1, 1)
    summed = (token_embeddings * mask).sum(axis=0)
    count = max(float(mask.sum()), 1e-9)
    return summed / count


def l2_normalize(vector: np.ndarray) -> np.ndarray:
    """Scale a vector to unit length. Zero vectors are returned unchanged."""
    norm = float(np.linalg.norm(vector))
    if norm == 0.0:
        return vector
    return vector / norm
