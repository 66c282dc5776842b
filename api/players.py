"""
Player API Endpoints

職責：
1. 以 address 查詢 Player
2. 以 (address, game_id) 查詢 Game

只提供點查詢；排序、篩選、分頁屬於外部 indexer
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from database import get_db
from schemas import PlayerResponse, GameResponse
from core.flip_manager import FlipManager
from core.exceptions import InvalidArgument, PlayerNotFound, GameNotFound

router = APIRouter(prefix="/api/players", tags=["players"])
logger = logging.getLogger(__name__)


@router.get("/{address}", response_model=PlayerResponse)
def get_player(address: str, db: Session = Depends(get_db)):
    """
    取得玩家統計

    返回：
        - address: 標準化後的 address
        - total_flips / wins / losses
        - win_rate: 勝率（%）
    """
    try:
        player = FlipManager.get_player(db, address)

        return PlayerResponse(
            address=player.address,
            total_flips=player.total_flips,
            wins=player.wins,
            losses=player.losses,
            win_rate=player.win_rate
        )

    except PlayerNotFound:
        raise HTTPException(status_code=404, detail="Player not found")
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to get player: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{address}/games/{game_id}", response_model=GameResponse)
def get_game(address: str, game_id: int, db: Session = Depends(get_db)):
    """
    取得某一局的結果

    參數：
        address: 玩家 address
        game_id: 第幾局（從 1 開始）
    """
    try:
        game = FlipManager.get_game(db, address, game_id)

        return GameResponse(
            player=game.player,
            game_id=game.game_id,
            prediction=game.prediction,
            outcome=game.outcome,
            won=game.won
        )

    except GameNotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to get game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
