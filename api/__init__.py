"""
API 層

FastAPI routers：
- flips：flip（唯一會改變狀態的 endpoint）
- players：Player / Game 點查詢
- events：outbox 事件讀取（給外部 indexer）
"""
