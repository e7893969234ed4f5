"""
Database package - Infrastructure Layer

This package contains the MongoDB client wrapper used by the records
gateway and the prediction and risk score repositories.
"""

from src.infrastructure.database.mongo_database import MongoDatabase

__all__ = ["MongoDatabase"]
