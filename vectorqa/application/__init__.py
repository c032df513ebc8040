"""Application layer: orchestration services over the core."""
