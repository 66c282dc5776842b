"""
Event API Endpoints

外部 indexer 以 after 游標輪詢 outbox，依 id 順序消費 Flipped 事件
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
import logging

from database import get_db
from schemas import EventListResponse, EventResponse
from core.flip_manager import FlipManager

router = APIRouter(prefix="/api/events", tags=["events"])
logger = logging.getLogger(__name__)


@router.get("", response_model=EventListResponse)
def list_events(
    after: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    """
    取得 id > after 的事件

    返回：
        - events: 依 id 遞增排序
        - next_after: 最後一筆事件的 id（沒有新事件時等於 after）
    """
    try:
        rows = FlipManager.list_events(db, after=after, limit=limit)
        events = [EventResponse.model_validate(row) for row in rows]
        next_after = events[-1].id if events else after

        return EventListResponse(events=events, next_after=next_after)

    except Exception as e:
        logger.error(f"Failed to list events: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
