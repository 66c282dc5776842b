"""
API Request / Response schemas
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt


# ============ Flip ============

class FlipRequest(BaseModel):
    # 0 = Heads, 1 = Tails；StrictInt 拒絕 true / "1" / 1.0（422），範圍由 TransitionEngine 驗證（400）
    prediction: StrictInt


class FlippedResponse(BaseModel):
    player: str
    game_id: int
    prediction: int
    outcome: int
    won: bool


# ============ Player / Game ============

class PlayerResponse(BaseModel):
    address: str
    total_flips: int
    wins: int
    losses: int
    win_rate: float


class GameResponse(BaseModel):
    player: str
    game_id: int
    prediction: int
    outcome: int
    won: bool


# ============ Events ============

class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_type: str
    player: str
    game_id: int
    data: Dict[str, Any]
    created_at: Optional[datetime] = None


class EventListResponse(BaseModel):
    events: List[EventResponse]
    next_after: int = Field(description="下一次查詢要帶的 after 值")
