"""
資料庫模型

- Player：每個 address 一筆的聚合紀錄（total_flips / wins / losses）
- Game：append-only 的明細紀錄，複合主鍵 (player, game_id)
- EventLog：事件 outbox，與紀錄寫入在同一個 transaction 內 commit，
  供外部 indexer 依 id 順序消費
"""
from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
)

from database import Base


def utcnow():
    return datetime.now(timezone.utc)


class Player(Base):
    __tablename__ = "players"
    __table_args__ = (
        CheckConstraint("wins + losses = total_flips", name="ck_players_flip_count"),
    )

    address = Column(String(66), primary_key=True)
    total_flips = Column(BigInteger, nullable=False, default=0)
    wins = Column(BigInteger, nullable=False, default=0)
    losses = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class Game(Base):
    __tablename__ = "games"
    __table_args__ = (
        CheckConstraint("prediction IN (0, 1)", name="ck_games_prediction"),
        CheckConstraint("outcome IN (0, 1)", name="ck_games_outcome"),
    )

    player = Column(String(66), ForeignKey("players.address"), primary_key=True)
    game_id = Column(BigInteger, primary_key=True, autoincrement=False)
    prediction = Column(Integer, nullable=False)
    outcome = Column(Integer, nullable=False)
    won = Column(Boolean, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class EventLog(Base):
    __tablename__ = "event_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_type = Column(String(32), nullable=False)
    player = Column(String(66), nullable=False, index=True)
    game_id = Column(BigInteger, nullable=False)
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
