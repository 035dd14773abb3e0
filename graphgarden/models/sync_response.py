from typing import List, Literal

from pydantic import BaseModel


class FriendStatus(BaseModel):
    friend: str
    url: str
    status: Literal["fresh", "cached", "error"]
    detail: str = ""
    """``generated_at`` of the friend's graph, or the error message when ``status`` is ``"error"``."""


class SyncResponse(BaseModel):
    compiled_at: str
    friends_synced: int
    friends: List[FriendStatus]
