"""
並發控制工具

flip 需要「同一個 address 一次只有一個 transition 在跑」的保證：
- IdentityLocks：process 內以 address 分片的互斥鎖
- with_player_lock：Database-level 的行級鎖（PostgreSQL SELECT ... FOR UPDATE），
  多個 process 共用同一個資料庫時仍然成立

SQLite 不支援 FOR UPDATE（SQLAlchemy 會直接省略），此時只靠 IdentityLocks
"""
from contextlib import contextmanager
import threading
import zlib

from sqlalchemy import text
from sqlalchemy.orm import Session, Query

from models import Player


def with_player_lock(address: str, db: Session) -> Query:
    """
    鎖定一個 Player（行級鎖）

    使用場景：
    - flip 讀取 Player 之前，確保在 commit 前沒有其他 transaction 修改它

    範例：
        with_player_lock(address, db).first()
        event = engine.flip(address, prediction)

    參數：
        address: 標準化後的 address
        db: SQLAlchemy Session

    返回：
        Query object（需要呼叫 .first() 來取得結果）

    注意：
        - 新玩家還沒有資料列，鎖不到任何東西；第一次 flip 的序列化
          由 IdentityLocks 與 players 的主鍵唯一性保證
        - 必須在 transaction 內使用（確保有 commit 或 rollback）
    """
    return db.query(Player).filter(
        Player.address == address
    ).with_for_update(nowait=False)


# pg_advisory_xact_lock 的 key；整個資料庫只有一把 outbox 鎖
OUTBOX_LOCK_KEY = 0x636F696E666C6970


def lock_outbox(db: Session) -> None:
    """
    在寫入 event_log 之前取得全域 outbox 鎖，持有到 transaction 結束

    event_log.id 在 flush 時就分配，不是在 commit 時；
    若兩個 transaction 拿到 id 5 與 6，而 6 先 commit，
    以 after=6 輪詢的 indexer 就永遠看不到 5。
    持有這把鎖直到 commit，id 的分配順序就等於 commit 順序。

    - PostgreSQL：pg_advisory_xact_lock，commit / rollback 時自動釋放
    - SQLite：同一時間只有一個寫入 transaction，本身就保證順序，不需額外處理

    參數：
        db: SQLAlchemy Session（必須在 transaction 內）
    """
    if db.get_bind().dialect.name == "postgresql":
        db.execute(
            text("SELECT pg_advisory_xact_lock(:key)"),
            {"key": OUTBOX_LOCK_KEY},
        )


class IdentityLocks:
    """
    以 key 分片的互斥鎖

    不同 key 可能落在同一個分片（只會多等，不會錯）；
    相同 key 一定落在同一個分片
    """

    def __init__(self, shards: int = 64):
        if shards < 1:
            raise ValueError(f"shards must be >= 1, got {shards}")
        self._locks = [threading.Lock() for _ in range(shards)]

    def __len__(self):
        return len(self._locks)

    def shard_for(self, key: str) -> int:
        return zlib.crc32(key.encode("utf-8")) % len(self._locks)

    @contextmanager
    def hold(self, key: str):
        lock = self._locks[self.shard_for(key)]
        with lock:
            yield
