"""
自定義異常類別

集中管理所有業務邏輯異常，方便 API 層統一處理
"""


class CoinFlipException(Exception):
    """所有 Coin Flip 異常的基類"""
    pass


# ============ 輸入相關異常 ============

class InvalidArgument(CoinFlipException):
    """輸入不合法（prediction 不是 0/1、address 格式錯誤、key 形狀不符）"""
    pass


class InvalidPrediction(InvalidArgument):
    """prediction 必須是 0 或 1"""
    def __init__(self, prediction):
        self.prediction = prediction
        super().__init__(f"Prediction must be 0 or 1, got {prediction!r}")


class InvalidAddress(InvalidArgument):
    """address 不是合法的 hex 識別碼"""
    def __init__(self, address):
        self.address = address
        super().__init__(f"Invalid address {address!r}")


# ============ 查詢相關異常 ============

class PlayerNotFound(CoinFlipException):
    """玩家不存在（從未 flip 過）"""
    def __init__(self, address):
        self.address = address
        super().__init__(f"Player {address} not found")


class GameNotFound(CoinFlipException):
    """Game 紀錄不存在"""
    def __init__(self, address, game_id):
        self.address = address
        self.game_id = game_id
        super().__init__(f"Game ({address}, {game_id}) not found")
