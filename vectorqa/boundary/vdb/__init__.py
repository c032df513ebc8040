"""
Vector database boundary: chunk record store and its FAISS secondary index.
"""

from vectorqa.boundary.vdb.nearest_neighbor_index import NearestNeighborIndex
from vectorqa.boundary.vdb.vector_index_store import VectorIndexStore

__all__ = ["NearestNeighborIndex", "VectorIndexStore"]
