"""
In-memory nearest-neighbor index over content vectors.

FAISS inner-product index over L2-normalized float32 vectors, so search
scores are cosine similarities. Keyed by chunk row id.

Dependencies: faiss-cpu, numpy
System role: Secondary index serving VectorIndexStore.nearest
"""

import logging

import faiss
import numpy as np

logger = logging.getLogger(__name__)


class NearestNeighborIndex:
    """Exact cosine search keyed by integer ids."""

    def __init__(self, dimension: int) -> None:
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self.dimension = dimension
        self._index = faiss.IndexIDMap(faiss.IndexFlatIP(dimension))
        logger.debug(f"{__name__}:__init__ - Created IndexFlatIP with dimension={dimension}")

    @property
    def size(self) -> int:
        return int(self._index.ntotal)

    def _prepare(self, vectors: list[list[float]]) -> np.ndarray:
        matrix = np.asarray(vectors, dtype=np.float32)
        if matrix.ndim != 2 or matrix.shape[1] != self.dimension:
            raise ValueError(
                f"Expected vectors of dimension {self.dimension}, got shape {matrix.shape}"
            )
        matrix = np.ascontiguousarray(matrix)
        faiss.normalize_L2(matrix)
        return matrix

    def add(self, ids: list[int], vectors: list[list[float]]) -> None:
        """
        Add vectors under their row ids.

        Args:
            ids: Row ids, same length as vectors
            vectors: Content vectors of this index's dimension

        Raises:
            ValueError: On length or dimension mismatch
        """
        if not ids:
            return
        if len(ids) != len(vectors):
            raise ValueError("ids and vectors must have the same length")
        self._index.add_with_ids(self._prepare(vectors), np.asarray(ids, dtype=np.int64))

    def search(self, query_vector: list[float], k: int) -> list[tuple[int, float]]:
        """
        Return up to k (id, cosine) pairs, most similar first.

        Args:
            query_vector: Query vector of this index's dimension
            k: Maximum number of neighbours

        Returns:
            list[tuple[int, float]]: Ids with cosine similarity
        """
        if k <= 0 or self.size == 0:
            return []
        query = self._prepare([query_vector])
        scores, ids = self._index.search(query, min(k, self.size))
        return [
            (int(row_id), float(score))
            for row_id, score in zip(ids[0], scores[0])
            if row_id != -1
        ]

    def reset(self) -> None:
        self._index.reset()
