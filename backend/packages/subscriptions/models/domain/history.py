from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from packages.subscriptions.models.domain.enums import SubscriptionAction


class SubscriptionHistory(BaseModel):
    id: str
    subscription_id: str
    user_id: str
    action: SubscriptionAction
    details: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SubscriptionHistoryCreateModel(BaseModel):
    subscription_id: str
    user_id: str
    action: SubscriptionAction
    details: Dict[str, Any] = Field(default_factory=dict)
