"""
Application Services Package

Per-population building blocks shared by the forecast and risk score
use cases.
"""

from .forecaster import PopulationForecaster
from .records_reader import HistoricalDataReader, SourceRead

__all__ = ["HistoricalDataReader", "PopulationForecaster", "SourceRead"]
