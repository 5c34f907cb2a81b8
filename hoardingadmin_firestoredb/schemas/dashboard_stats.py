from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DashboardStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_hoardings: int = 0
    total_customers: int = 0
    total_users: int = 0
    total_bookings: int = 0
    active_bookings: int = 0
    pending_bookings: int = 0
    rejected_bookings: int = 0
    monthly_revenue: float = 0
    total_categories: int = 0
    active_categories: int = 0
    total_messages: int = 0
    unread_messages: int = 0
    generated_at: Optional[datetime] = None
