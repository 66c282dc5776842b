"""
Entropy 服務：提供決定 flip 結果的外部數值

注意：這裡的 entropy 是區塊/commit 時間，任何能預測或影響時間的人
都能預測結果。要換成可驗證的隨機來源，實作同樣的 callable 介面即可。
"""
import time
from typing import Callable, Iterable, Iterator

EntropySource = Callable[[], int]


def clock_seconds() -> int:
    """目前的 commit 時間（秒）"""
    return int(time.time())


def clock_millis() -> int:
    """目前的 commit 時間（毫秒）"""
    return time.time_ns() // 1_000_000


ENTROPY_SOURCES = {
    "clock": clock_seconds,
    "clock_ms": clock_millis,
}


def get_entropy_source(name: str) -> EntropySource:
    """
    依設定名稱取得 entropy source

    異常：
        ValueError: 未知的名稱
    """
    try:
        return ENTROPY_SOURCES[name]
    except KeyError:
        raise ValueError(
            f"Unknown entropy source {name!r}, expected one of {sorted(ENTROPY_SOURCES)}"
        )


class ScriptedEntropy:
    """
    依序回傳預先指定的數值（測試與重播用）

    數值用完後再呼叫會拋出 RuntimeError
    """

    def __init__(self, values: Iterable[int]):
        self._values: Iterator[int] = iter(values)

    def __call__(self) -> int:
        try:
            return next(self._values)
        except StopIteration:
            raise RuntimeError("ScriptedEntropy exhausted")
