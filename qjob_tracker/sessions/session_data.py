# qjob_tracker/sessions/session_data.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, timezone


class RealtimeSession(BaseModel):
    """
    Binding between one live realtime connection and a user.

    user_id is None while the connection has not sent an `auth` event.
    """

    connection_id: str = Field(
        description="Identifier generated by the server when the connection is accepted."
    )
    user_id: Optional[str] = Field(
        default=None,
        description="User the connection claimed in its last `auth` event."
    )
    connected_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None
