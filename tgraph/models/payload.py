"""API models for the web dashboard."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SeriesPoint(BaseModel):
    """A compressed chart point as sent to the browser."""

    timestamp: int
    value: float
    time: str = Field(description="Local wall-clock time (HH:MM:SS) of the sample")


class StatsModel(BaseModel):
    """Aggregate statistics over the uncompressed series, 2 decimals."""

    current: str = "0.00"
    average: str = "0.00"
    min: str = "0.00"
    max: str = "0.00"


class DataPayload(BaseModel):
    """Payload served by /data and pushed over /sse."""

    type: str = "update"
    dataPoints: List[SeriesPoint] = Field(default_factory=list)
    allMetricsData: Dict[str, List[SeriesPoint]] = Field(default_factory=dict)
    metric: str
    metricLabel: str
    accumulate: bool
    maxDataPoints: int
    resolution: int
    style: str
    totalPoints: int = 0
    stats: StatsModel = Field(default_factory=StatsModel)
    allStats: Dict[str, StatsModel] = Field(default_factory=dict)


class ConfigResponse(BaseModel):
    """Current viewer configuration."""

    metric: str
    metricLabel: str
    accumulate: bool
    maxDataPoints: int
    refreshRate: int
    style: str
    logFile: str
    resolution: int


class ResolutionRequest(BaseModel):
    """Resolution change request; the value is validated by the session."""

    resolution: Optional[Any] = None


class ResolutionResponse(BaseModel):
    """Successful resolution change."""

    success: bool = True
    resolution: int
