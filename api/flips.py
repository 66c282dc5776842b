"""
Flip API Endpoints

職責：
1. 接收 flip（唯一會改變狀態的 endpoint）

呼叫者身份由執行環境注入（X-Caller-Address header），
不是 request body 的一部分；驗證身份是外層平台的責任
"""
from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session
import logging

from database import get_db
from schemas import FlipRequest, FlippedResponse
from core.flip_manager import FlipManager
from core.exceptions import InvalidArgument

router = APIRouter(prefix="/api", tags=["flips"])
logger = logging.getLogger(__name__)


def get_caller_address(x_caller_address: str = Header(...)) -> str:
    """FastAPI dependency：取得執行環境注入的呼叫者 address"""
    return x_caller_address


@router.post("/flip", response_model=FlippedResponse)
def flip(
    flip_data: FlipRequest,
    caller: str = Depends(get_caller_address),
    db: Session = Depends(get_db)
):
    """
    擲硬幣

    前置條件：
    - prediction 必須是 0 或 1
    - X-Caller-Address 必須是合法 hex address

    流程：
    1. FlipManager.flip()：驗證 → 鎖定 → 寫入 Player/Game/事件 → commit
    2. 返回 Flipped 事件內容

    返回：
        - player / game_id / prediction / outcome / won
    """
    try:
        event = FlipManager.flip(db, caller, flip_data.prediction)

        return FlippedResponse(
            player=event.player,
            game_id=event.game_id,
            prediction=event.prediction,
            outcome=event.outcome,
            won=event.won
        )

    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to flip: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
