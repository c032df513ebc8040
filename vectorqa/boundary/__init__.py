"""
Boundary layer for external system integrations.

Handles all interactions with external systems (database, FAISS index,
embedding and chat models). Provides adapters for infrastructure dependencies.
"""
