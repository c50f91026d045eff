"""Adapters for integrating LearnMet with storage backends."""

from .sqlalchemy_repo import SQLAlchemyLearningRepository

__all__ = ["SQLAlchemyLearningRepository"]
