"""
紀錄型別

Record Store 只認得兩種紀錄：
- PlayerRecord：聚合紀錄，key 為單一 address
- GameRecord：明細紀錄，key 為 (address, game_id)

Flipped 是事件，不存進 Record Store，只交給 EventSink
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class RecordKind(str, Enum):
    """Record Store 支援的紀錄種類"""

    PLAYER = "Player"
    GAME = "Game"


@dataclass(frozen=True, slots=True)
class PlayerRecord:
    address: str
    total_flips: int = 0
    wins: int = 0
    losses: int = 0

    @classmethod
    def default(cls, address: str) -> PlayerRecord:
        return cls(address=address)

    @property
    def win_rate(self) -> float:
        """勝率（百分比，小數一位）；沒有 flip 過則為 0.0"""
        if self.total_flips == 0:
            return 0.0
        return round(self.wins / self.total_flips * 100, 1)


@dataclass(frozen=True, slots=True)
class GameRecord:
    player: str
    game_id: int
    prediction: int
    outcome: int
    won: bool


@dataclass(frozen=True, slots=True)
class Flipped:
    """
    一次成功的 flip 所產生的通知事件

    欄位與 GameRecord 完全相同（key + 內容），供外部 indexer 建立索引
    """

    player: str
    game_id: int
    prediction: int
    outcome: int
    won: bool

    EVENT_TYPE = "Flipped"

    @classmethod
    def from_game(cls, game: GameRecord) -> Flipped:
        return cls(
            player=game.player,
            game_id=game.game_id,
            prediction=game.prediction,
            outcome=game.outcome,
            won=game.won,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
