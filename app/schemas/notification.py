from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional, Union

class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    # Synthetic notifications use string ids, stored ones integers
    id: Union[int, str]
    user_id: int
    title: str
    message: str
    type: str
    is_read: bool = False
    related_type: Optional[str] = None
    related_id: Optional[int] = None
    created_at: Optional[datetime] = None

class NotificationInbox(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int
