"""
Transition Engine：唯一會改變狀態的操作 flip

apply_flip 是 (store, caller, prediction, entropy) 上的純函式：
讀 Player、算結果、寫 Player 與 Game、回傳 Flipped 事件。
不持有鎖、不重試、不 commit；原子性與序列化由 FlipManager 提供。
"""
import logging

from core.event_sink import EventSink
from core.exceptions import InvalidArgument, InvalidPrediction
from core.record_store import RecordStore
from core.records import Flipped, GameRecord, PlayerRecord, RecordKind
from services.entropy_service import EntropySource

logger = logging.getLogger(__name__)

PREDICTIONS = (0, 1)


def validate_prediction(prediction) -> int:
    """
    檢查 prediction 是否為 0 或 1

    bool 不視為合法輸入（True == 1 在 Python 中成立，但不是呼叫者想表達的值）

    異常：
        InvalidPrediction: prediction 不在 {0, 1}
    """
    if isinstance(prediction, bool) or not isinstance(prediction, int):
        raise InvalidPrediction(prediction)
    if prediction not in PREDICTIONS:
        raise InvalidPrediction(prediction)
    return prediction


def derive_outcome(entropy: int) -> int:
    """outcome = entropy mod 2"""
    if isinstance(entropy, bool) or not isinstance(entropy, int) or entropy < 0:
        raise InvalidArgument(f"Entropy must be a non-negative integer, got {entropy!r}")
    return entropy % 2


def apply_flip(store: RecordStore, caller: str, prediction: int, entropy: int) -> Flipped:
    """
    執行一次 flip 狀態轉換

    流程：
    1. 驗證 prediction（失敗時不讀也不寫）
    2. 讀取 Player（不存在則為零值紀錄）
    3. outcome = entropy mod 2，won = prediction == outcome
    4. new_game_id = total_flips + 1
    5. 寫回 Player
    6. 寫入 Game (caller, new_game_id)
    7. 回傳 Flipped 事件（由呼叫者交給 EventSink）

    參數：
        store: Record Store handle
        caller: 已標準化的呼叫者 address
        prediction: 0 或 1
        entropy: 外部時鐘數值

    返回：
        Flipped 事件

    異常：
        InvalidPrediction: prediction 不在 {0, 1}
    """
    validate_prediction(prediction)

    player = store.get_or_default(RecordKind.PLAYER, caller)

    outcome = derive_outcome(entropy)
    won = prediction == outcome
    new_game_id = player.total_flips + 1

    player = PlayerRecord(
        address=caller,
        total_flips=new_game_id,
        wins=player.wins + (1 if won else 0),
        losses=player.losses + (0 if won else 1),
    )
    game = GameRecord(
        player=caller,
        game_id=new_game_id,
        prediction=prediction,
        outcome=outcome,
        won=won,
    )

    store.put(RecordKind.PLAYER, caller, player)
    store.put(RecordKind.GAME, (caller, new_game_id), game)

    return Flipped.from_game(game)


class TransitionEngine:
    """
    把 store、sink、entropy source 綁在一起的 flip 入口

    呼叫者必須保證同一 identity 的 flip 不會交錯執行，
    且 store 寫入與 sink 的事件一起 commit 或一起丟棄
    """

    def __init__(self, store: RecordStore, sink: EventSink, entropy_source: EntropySource):
        self.store = store
        self.sink = sink
        self.entropy_source = entropy_source

    def flip(self, caller: str, prediction: int) -> Flipped:
        validate_prediction(prediction)
        event = apply_flip(self.store, caller, prediction, self.entropy_source())
        self.sink.emit(event)

        logger.info(
            f"Player {caller} flipped game {event.game_id}: "
            f"prediction={event.prediction} outcome={event.outcome} won={event.won}"
        )
        return event
