"""
Address 服務：將呼叫者識別碼標準化為固定寬度

純計算邏輯，不涉及狀態轉換
"""
import string

from core.exceptions import InvalidAddress

ADDRESS_HEX_WIDTH = 64


def standardize_address(address: str) -> str:
    """
    將 address 標準化為 "0x" + 64 位小寫 hex

    範例：
        standardize_address("0x1") -> "0x000...0001"
        standardize_address("ABC") -> "0x000...0abc"

    參數：
        address: 原始 address（可有可無 0x 前綴）

    返回：
        標準化後的 address

    異常：
        InvalidAddress: 空字串、非 hex 字元、或超過 64 位
    """
    if not isinstance(address, str):
        raise InvalidAddress(address)

    digits = address.strip().lower().removeprefix("0x")
    if not digits or len(digits) > ADDRESS_HEX_WIDTH:
        raise InvalidAddress(address)
    if any(c not in string.hexdigits for c in digits):
        raise InvalidAddress(address)

    return "0x" + digits.zfill(ADDRESS_HEX_WIDTH)
