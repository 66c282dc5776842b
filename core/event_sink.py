"""
EventSink：Flipped 事件的接收端

- OutboxEventSink：寫入 event_log 表，與紀錄寫入同一個 transaction
  commit，外部 indexer 再依 id 順序讀取
- InMemoryEventSink：測試用
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from core.locks import lock_outbox
from core.records import Flipped
from models import EventLog


class EventSink(ABC):
    @abstractmethod
    def emit(self, event: Flipped) -> None: ...


class OutboxEventSink(EventSink):
    """
    Transactional outbox

    只 add/flush 不 commit；transaction rollback 時事件一起消失。
    寫入前先取得 outbox 鎖，讓 event_log.id 的順序與 commit 順序一致
    """

    def __init__(self, db: Session):
        self.db = db

    def emit(self, event: Flipped) -> None:
        lock_outbox(self.db)
        self.db.add(EventLog(
            event_type=Flipped.EVENT_TYPE,
            player=event.player,
            game_id=event.game_id,
            data=event.to_dict(),
        ))
        self.db.flush()


@dataclass
class InMemoryEventSink(EventSink):
    events: list[Flipped] = field(default_factory=list)

    def emit(self, event: Flipped) -> None:
        self.events.append(event)
