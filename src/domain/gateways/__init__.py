"""
Gateway interfaces package - Domain Layer

Read-only access to the husbandry records owned by the record-keeping system.
"""

from src.domain.gateways.records_gateway import IRecordsGateway

__all__ = ["IRecordsGateway"]
