"""
Flip Manager：flip 的執行環境

職責：
1. 驗證輸入（prediction、address），失敗時不開 transaction
2. 依 address 序列化 transition（IdentityLocks + 行級鎖）
3. 在同一個 transaction 內寫入 Player、Game 與 outbox 事件

TransitionEngine 本身不知道這些；它只是 store 上的純函式
"""
from sqlalchemy.orm import Session
from typing import List
import logging

from core.engine import TransitionEngine, validate_prediction
from core.event_sink import OutboxEventSink
from core.exceptions import GameNotFound, InvalidArgument, PlayerNotFound
from core.locks import IdentityLocks, with_player_lock
from core.record_store import SqlRecordStore
from core.records import Flipped, GameRecord, PlayerRecord, RecordKind
from database import get_settings, transactional
from models import EventLog
from services.address_service import standardize_address
from services.entropy_service import EntropySource, get_entropy_source

logger = logging.getLogger(__name__)

identity_locks = IdentityLocks(get_settings().lock_shards)


def default_entropy_source() -> EntropySource:
    return get_entropy_source(get_settings().entropy_source)


class FlipManager:
    """flip 生命週期管理器"""

    @staticmethod
    def flip(
        db: Session,
        caller: str,
        prediction: int,
        entropy_source: EntropySource = None,
        locks: IdentityLocks = None,
    ) -> Flipped:
        """
        執行一次 flip

        流程：
        1. 標準化 address、驗證 prediction（Rejected：不寫入、不發事件）
        2. 取得該 address 的 process 內鎖
        3. 在 transaction 內：鎖定 Player 列 → TransitionEngine.flip → commit

        參數：
            db: SQLAlchemy Session
            caller: 呼叫者 address（由執行環境注入）
            prediction: 0 或 1
            entropy_source: 預設依 Settings.entropy_source
            locks: 預設為 module-level 的 identity_locks

        返回：
            Flipped 事件（已 commit）

        異常：
            InvalidArgument: prediction 或 address 不合法
        """
        try:
            address = standardize_address(caller)
            validate_prediction(prediction)
        except InvalidArgument as e:
            logger.warning(f"Rejected flip from {caller!r}: {e}")
            raise

        if entropy_source is None:
            entropy_source = default_entropy_source()
        if locks is None:
            locks = identity_locks

        with locks.hold(address):
            return FlipManager._apply(db, address, prediction, entropy_source)

    @staticmethod
    @transactional
    def _apply(
        db: Session,
        address: str,
        prediction: int,
        entropy_source: EntropySource,
    ) -> Flipped:
        with_player_lock(address, db).first()

        engine = TransitionEngine(
            store=SqlRecordStore(db),
            sink=OutboxEventSink(db),
            entropy_source=entropy_source,
        )
        # transactional decorator 會自動 commit
        return engine.flip(address, prediction)

    @staticmethod
    def get_player(db: Session, address: str) -> PlayerRecord:
        """
        透過 address 取得 Player

        參數：
            db: SQLAlchemy Session
            address: 玩家 address（會先標準化）

        返回：
            PlayerRecord

        異常：
            InvalidAddress: address 格式錯誤
            PlayerNotFound: 從未 flip 過
        """
        address = standardize_address(address)
        player = SqlRecordStore(db).get(RecordKind.PLAYER, address)
        if player is None:
            raise PlayerNotFound(address)
        return player

    @staticmethod
    def get_game(db: Session, address: str, game_id: int) -> GameRecord:
        """
        透過 (address, game_id) 取得 Game

        異常：
            InvalidArgument: address 或 game_id 不合法
            GameNotFound: Game 不存在
        """
        address = standardize_address(address)
        game = SqlRecordStore(db).get(RecordKind.GAME, (address, game_id))
        if game is None:
            raise GameNotFound(address, game_id)
        return game

    @staticmethod
    def list_events(db: Session, after: int = 0, limit: int = 100) -> List[EventLog]:
        """
        依 id 順序讀取 outbox 事件（給外部 indexer 用）

        參數：
            db: SQLAlchemy Session
            after: 只回傳 id > after 的事件
            limit: 最多回傳幾筆

        返回：
            EventLog 列表（id 遞增）

        注意：
            OutboxEventSink 寫入前會取得 outbox 鎖（見 core.locks.lock_outbox），
            已 commit 的事件 id 不會小於之後才 commit 的事件，
            indexer 以最後看到的 id 當游標不會漏掉事件
        """
        return (
            db.query(EventLog)
            .filter(EventLog.id > after)
            .order_by(EventLog.id)
            .limit(limit)
            .all()
        )
