from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MonthlyRevenue(_ReportModel):
    month: str
    revenue: float = 0
    bookings: int = 0


class LocationPerformance(_ReportModel):
    location: str
    hoardings: int = 0
    revenue: float = 0


class BookingTrend(_ReportModel):
    week: str
    bookings: int = 0


class StatusSlice(_ReportModel):
    name: str
    value: int = 0
    color: str


class ReportData(_ReportModel):
    monthly_revenue: List[MonthlyRevenue] = Field(default_factory=list)
    location_performance: List[LocationPerformance] = Field(default_factory=list)
    booking_trends: List[BookingTrend] = Field(default_factory=list)
    status_distribution: List[StatusSlice] = Field(default_factory=list)
