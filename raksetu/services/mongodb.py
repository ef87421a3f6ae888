# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Read-only MongoDB access to emergency blood requests.
"""

import os
import logging
from typing import Any, Dict, List, Optional
from pymongo import MongoClient, DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError
from pydantic import ValidationError
from bson import ObjectId
from bson.errors import InvalidId
from opentelemetry import trace

from ..models.entities import EmergencyRequest

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

EMERGENCY_COLLECTION = "emergencyRequests"
ACTIVE_STATUS = "active"
SERVICE_APP_NAME = "raksetu-api"



class MongoDBService:
    """
    Lazily connected, read-only MongoDB client.

    The first access to `client` connects and pings; a failed ping is
    raised to the caller and retried on the next access.
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        database_name: Optional[str] = None,
        max_pool_size: int = 10,
        server_selection_timeout_ms: int = 5000
    ):
        self.connection_string = connection_string or os.getenv('MONGODB_URI', 'mongodb://localhost:27017/raksetu_dev')
        self.database_name = database_name or os.getenv('MONGODB_DATABASE', 'raksetu_dev')
        self.max_pool_size = max_pool_size
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self._client: Optional[MongoClient] = None

    @property
    def client(self) -> MongoClient:
        if self._client is not None:
            return self._client

        client = MongoClient(
            self.connection_string,
            appname=SERVICE_APP_NAME,
            maxPoolSize=self.max_pool_size,
            serverSelectionTimeoutMS=self.server_selection_timeout_ms,
            readPreference="secondaryPreferred",
            retryReads=True
        )
        try:
            client.admin.command('ping')
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error("MongoDB unreachable", extra={"database": self.database_name, "error": str(e)})
            client.close()
            raise

        logger.info("Connected to MongoDB", extra={"database": self.database_name})
        self._client = client
        return client

    @property
    def database(self) -> Database:
        return self.client[self.database_name]

    def get_collection(self, name: str) -> Collection:
        return self.database[name]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def health_check(self) -> Dict[str, Any]:
        """Ping the server for the health endpoint."""
        status = {"database": self.database_name}
        try:
            reply = self.client.admin.command('ping')
        except PyMongoError as e:
            logger.error("MongoDB health check failed", extra={"error": str(e)})
            return {"status": "unhealthy", "error": str(e), **status}
        return {"status": "healthy", "ping": reply.get('ok') == 1, **status}


class EmergencyRepository:
    """
    Emergency requests as written by the reporting clients.

    This service never writes to the collection. Documents that fail
    validation are skipped with a warning rather than failing the listing.
    """

    def __init__(self, mongodb_service: MongoDBService, collection_name: str = EMERGENCY_COLLECTION):
        self.mongodb_service = mongodb_service
        self.collection_name = collection_name

    @property
    def collection(self) -> Collection:
        return self.mongodb_service.get_collection(self.collection_name)

    def _to_entity(self, document: Dict[str, Any]) -> Optional[EmergencyRequest]:
        try:
            return EmergencyRequest.from_document(document)
        except ValidationError as e:
            logger.warning(
                "Skipping malformed emergency document",
                extra={"document_id": str(document.get("_id")), "errors": e.error_count()}
            )
            return None

    def list_active(self, limit: int = 50) -> List[EmergencyRequest]:
        """
        Active requests, most urgent and most recent first.

        Args:
            limit: Maximum number of documents to read
        """
        with tracer.start_as_current_span("mongodb.emergencies.list_active") as span:
            span.set_attribute("db.limit", limit)

            cursor = (
                self.collection
                .find({"status": ACTIVE_STATUS})
                .sort([("urgencyLevel", DESCENDING), ("timestamp", DESCENDING)])
                .limit(limit)
            )
            records = [record for record in map(self._to_entity, cursor) if record is not None]

            span.set_attribute("db.result_count", len(records))
            return records

    def get(self, emergency_id: str) -> Optional[EmergencyRequest]:
        """
        Fetch a single request by id.

        Returns:
            The request, or None when the id is malformed or unknown
        """
        try:
            object_id = ObjectId(emergency_id)
        except (InvalidId, TypeError):
            return None

        with tracer.start_as_current_span("mongodb.emergencies.get") as span:
            span.set_attribute("db.document_id", emergency_id)
            document = self.collection.find_one({"_id": object_id})
            return self._to_entity(document) if document else None
