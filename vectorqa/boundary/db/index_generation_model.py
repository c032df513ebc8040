"""
Index generation ORM model.

A single row recording which embedding model and dimension the current
index generation was built with. Cleared together with the chunks.

Dependencies: sqlalchemy
System role: Store-wide embedding consistency record
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from vectorqa.boundary.db.base import Base, CreatedAtMixin

GENERATION_ROW_ID = 1


class IndexGenerationModel(CreatedAtMixin, Base):
    """Embedding model and dimension of the live index generation."""

    __tablename__ = "index_generation"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=GENERATION_ROW_ID)
    embedding_model: Mapped[str] = mapped_column(String(255), nullable=False)
    dimension: Mapped[int] = mapped_column(Integer, nullable=False)
