"""
Gateways Package - Infrastructure Layer

This package contains concrete implementations of the gateway
interfaces defined in the domain layer. These implementations
handle the details of reading the husbandry records.
"""

from .mongo_records_gateway import MongoRecordsGateway

__all__ = ["MongoRecordsGateway"]
