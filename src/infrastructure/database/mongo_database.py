"""
MongoDB Database - Infrastructure Layer

This module provides a MongoDB database client for interacting with MongoDB.
It handles connection, collections, basic CRUD operations and the
transactional batch insert used by the prediction log.

pymongo is blocking, so every driver call runs in a worker thread. A read
that outlives its ``asyncio.wait_for`` deadline is abandoned by the caller
without stalling the event loop.
"""

import asyncio
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pymongo.errors
import structlog
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

logger = structlog.get_logger(__name__)

SortSpec = Sequence[Tuple[str, int]]


class MongoDatabase:
    """MongoDB database client."""

    def __init__(self, mongo_uri: str, db_name: str):
        """
        Initialize the MongoDB database client.

        Args:
            mongo_uri: MongoDB connection URI
            db_name: Name of the database to use
        """
        self.client: MongoClient = MongoClient(mongo_uri, tz_aware=True)
        self.db: Database = self.client[db_name]

    def get_collection(self, collection_name: str) -> Collection:
        return self.db[collection_name]

    async def find_one(
        self,
        collection_name: str,
        query: Dict[str, Any],
        sort: Optional[SortSpec] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Find a single document in a collection.

        Args:
            collection_name: Name of the collection
            query: Query to match documents
            sort: Optional (field, direction) pairs deciding which match wins

        Returns:
            The document if found, None otherwise
        """
        collection = self.db[collection_name]
        if sort:
            return await asyncio.to_thread(collection.find_one, query, sort=list(sort))
        return await asyncio.to_thread(collection.find_one, query)

    async def find_many(
        self,
        collection_name: str,
        query: Dict[str, Any],
        sort_by: Optional[str] = None,
        sort_direction: int = 1,
        skip: int = 0,
        limit: int = 100,
        sort: Optional[SortSpec] = None,
    ) -> List[Dict[str, Any]]:
        """
        Find multiple documents in a collection.

        Args:
            collection_name: Name of the collection
            query: Query to match documents
            sort_by: Field to sort by
            sort_direction: Sort direction (1 for ascending, -1 for descending)
            skip: Number of documents to skip
            limit: Maximum number of documents to return, 0 for no limit
            sort: Compound sort as (field, direction) pairs, overrides sort_by

        Returns:
            List of documents
        """

        def _fetch() -> List[Dict[str, Any]]:
            cursor = self.db[collection_name].find(query)
            if sort:
                cursor = cursor.sort(list(sort))
            elif sort_by:
                cursor = cursor.sort(sort_by, sort_direction)
            return list(cursor.skip(skip).limit(limit))

        return await asyncio.to_thread(_fetch)

    async def count_documents(
        self, collection_name: str, query: Dict[str, Any]
    ) -> int:
        return await asyncio.to_thread(
            self.db[collection_name].count_documents, query
        )

    async def insert_one(
        self, collection_name: str, document: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Insert a document into a collection.

        Raises:
            Exception: If the insert fails
        """
        result = await asyncio.to_thread(
            self.db[collection_name].insert_one, document
        )
        if not result.acknowledged:
            raise Exception(f"Failed to insert document in {collection_name}")
        return document

    async def insert_many_atomic(
        self, collection_name: str, documents: List[Dict[str, Any]]
    ) -> int:
        """
        Insert documents inside one multi-document transaction.

        Either every document is committed or the transaction is aborted.
        Transactions require a replica set or sharded cluster.

        Args:
            collection_name: Name of the collection
            documents: Documents to insert

        Returns:
            Number of inserted documents

        Raises:
            pymongo.errors.PyMongoError: If the transaction was aborted
        """

        def _insert() -> int:
            with self.client.start_session() as session:
                with session.start_transaction():
                    result = self.db[collection_name].insert_many(
                        documents, ordered=True, session=session
                    )
            return len(result.inserted_ids)

        return await asyncio.to_thread(_insert)

    async def upsert_one(
        self, collection_name: str, query: Dict[str, Any], document: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Replace the matching document or insert it when absent."""
        result = await asyncio.to_thread(
            self.db[collection_name].replace_one, query, document, upsert=True
        )
        if not result.acknowledged:
            raise Exception(f"Failed to upsert document in {collection_name}")
        return document

    def close(self) -> None:
        """Close the database connection."""
        self.client.close()

    async def create_indexes(self) -> None:
        """
        Ensure the indexes the engine relies on exist.

        ``create_index`` is a no-op for an index that already exists with the
        same keys and options, so this runs on every process start without
        rebuilding or dropping anything.
        """
        await asyncio.to_thread(self._ensure_indexes)

    def _ensure_indexes(self) -> None:
        predictions = "predictions"
        try:
            self.db[predictions].create_index(
                [
                    ("generation_id", ASCENDING),
                    ("population_id", ASCENDING),
                    ("horizon_days", ASCENDING),
                ],
                name="generation_population_horizon_idx",
                unique=True,
            )
            self.db[predictions].create_index(
                [("horizon_days", ASCENDING), ("generated_at", DESCENDING)],
                name="horizon_generated_at_idx",
                background=True,
            )
            self.db[predictions].create_index(
                [("population_id", ASCENDING), ("generated_at", DESCENDING)],
                name="population_generated_at_idx",
                background=True,
            )
            self.db[predictions].create_index(
                [("severity_rank", ASCENDING), ("predicted_value", DESCENDING)],
                name="severity_predicted_idx",
                background=True,
            )
        except pymongo.errors.OperationFailure as e:
            logger.warning(
                "mongo.indexes.failed", collection=predictions, error=str(e)
            )

        try:
            self.db["risk_scores"].create_index(
                [("population_id", ASCENDING), ("computed_at", DESCENDING)],
                name="population_computed_at_idx",
                background=True,
            )
            self.db["risk_scores_current"].create_index(
                "population_id", name="population_id_idx", unique=True
            )
        except pymongo.errors.OperationFailure as e:
            logger.warning(
                "mongo.indexes.failed", collection="risk_scores", error=str(e)
            )

        try:
            self.db["lice_samples"].create_index(
                [("population_id", ASCENDING), ("sampled_at", ASCENDING)],
                name="population_sampled_at_idx",
                background=True,
            )
            self.db["environment_readings"].create_index(
                [("population_id", ASCENDING), ("timestamp", DESCENDING)],
                name="population_timestamp_idx",
                background=True,
            )
            self.db["treatments"].create_index(
                [
                    ("population_id", ASCENDING),
                    ("status", ASCENDING),
                    ("completed_at", DESCENDING),
                ],
                name="population_status_completed_idx",
                background=True,
            )
        except pymongo.errors.OperationFailure as e:
            logger.warning("mongo.indexes.failed", collection="records", error=str(e))
