"""
Record Store：兩種紀錄的 keyed 儲存

職責：
1. 點查詢 get(kind, key)，不存在時明確回傳 None
2. get_or_default(kind, key)，不存在時回傳該 kind 的零值紀錄
3. 點寫入 put(kind, key, record)，無條件 upsert 整筆紀錄

不提供任何鎖；同一 identity 的序列化由 FlipManager 負責
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from sqlalchemy.orm import Session

from core.exceptions import InvalidArgument
from core.records import GameRecord, PlayerRecord, RecordKind
import models

GameKey = Tuple[str, int]
RecordKey = Union[str, GameKey]
Record = Union[PlayerRecord, GameRecord]

# games.game_id 是 BigInteger（64 位元有號）
MAX_GAME_ID = 2**63 - 1


def check_key(kind: RecordKind, key) -> None:
    """
    檢查 key 是否符合 kind 的 key 形狀

    - Player：單一 address 字串
    - Game：(address, game_id) tuple，1 <= game_id <= MAX_GAME_ID

    異常：
        InvalidArgument: key 形狀不符
    """
    if kind == RecordKind.PLAYER:
        if not isinstance(key, str):
            raise InvalidArgument(f"Player key must be an address, got {key!r}")
    elif kind == RecordKind.GAME:
        if not (isinstance(key, tuple) and len(key) == 2):
            raise InvalidArgument(f"Game key must be (address, game_id), got {key!r}")
        address, game_id = key
        if not isinstance(address, str):
            raise InvalidArgument(f"Game key address must be a string, got {address!r}")
        if isinstance(game_id, bool) or not isinstance(game_id, int) or not 1 <= game_id <= MAX_GAME_ID:
            raise InvalidArgument(f"Game key game_id must be in 1..{MAX_GAME_ID}, got {game_id!r}")
    else:
        raise InvalidArgument(f"Unknown record kind {kind!r}")


def check_record(kind: RecordKind, key, record) -> None:
    """檢查紀錄型別與紀錄本身的 key 欄位是否和 key 一致"""
    if kind == RecordKind.PLAYER:
        if not isinstance(record, PlayerRecord) or record.address != key:
            raise InvalidArgument(f"Player record does not match key {key!r}")
    else:
        if not isinstance(record, GameRecord) or (record.player, record.game_id) != key:
            raise InvalidArgument(f"Game record does not match key {key!r}")


def default_record(kind: RecordKind, key) -> Optional[Record]:
    """kind 的零值紀錄；Game 沒有零值（明細紀錄只會由 flip 建立）"""
    if kind == RecordKind.PLAYER:
        return PlayerRecord.default(key)
    return None


class RecordStore(ABC):
    """Record Store 介面"""

    def get(self, kind: RecordKind, key: RecordKey) -> Optional[Record]:
        check_key(kind, key)
        return self._load(kind, key)

    def get_or_default(self, kind: RecordKind, key: RecordKey) -> Optional[Record]:
        """
        取得紀錄，不存在時回傳零值紀錄

        這是新 identity 的隱式初始化方式：第一次 flip 時讀到的是
        {address, 0, 0, 0}，而不是錯誤
        """
        record = self.get(kind, key)
        if record is None:
            return default_record(kind, key)
        return record

    def put(self, kind: RecordKind, key: RecordKey, record: Record) -> None:
        check_key(kind, key)
        check_record(kind, key, record)
        self._save(kind, key, record)

    @abstractmethod
    def _load(self, kind: RecordKind, key: RecordKey) -> Optional[Record]: ...

    @abstractmethod
    def _save(self, kind: RecordKind, key: RecordKey, record: Record) -> None: ...


@dataclass
class InMemoryRecordStore(RecordStore):
    """
    以 dict 儲存的 Record Store

    測試與示範用；沒有持久化
    """

    players: dict[str, PlayerRecord] = field(default_factory=dict)
    games: dict[GameKey, GameRecord] = field(default_factory=dict)

    def _load(self, kind, key):
        if kind == RecordKind.PLAYER:
            return self.players.get(key)
        return self.games.get(key)

    def _save(self, kind, key, record):
        if kind == RecordKind.PLAYER:
            self.players[key] = record
        else:
            self.games[key] = record


class SqlRecordStore(RecordStore):
    """
    以 SQLAlchemy Session 為後端的 Record Store

    注意：
        - 只 flush 不 commit，commit 交給外層 @transactional
        - put 使用 session.merge()，相同主鍵會覆寫
    """

    def __init__(self, db: Session):
        self.db = db

    def _load(self, kind, key):
        if kind == RecordKind.PLAYER:
            row = self.db.get(models.Player, key)
            if row is None:
                return None
            return PlayerRecord(
                address=row.address,
                total_flips=row.total_flips,
                wins=row.wins,
                losses=row.losses,
            )

        row = self.db.get(models.Game, key)
        if row is None:
            return None
        return GameRecord(
            player=row.player,
            game_id=row.game_id,
            prediction=row.prediction,
            outcome=row.outcome,
            won=row.won,
        )

    def _save(self, kind, key, record):
        if kind == RecordKind.PLAYER:
            self.db.merge(models.Player(
                address=record.address,
                total_flips=record.total_flips,
                wins=record.wins,
                losses=record.losses,
            ))
        else:
            self.db.merge(models.Game(
                player=record.player,
                game_id=record.game_id,
                prediction=record.prediction,
                outcome=record.outcome,
                won=record.won,
            ))
        self.db.flush()
