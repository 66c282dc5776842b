"""
核心業務邏輯層

這個 package 包含所有核心業務邏輯，包括：
- Record Store：Player / Game 兩種紀錄的 keyed 儲存
- Transition Engine：flip 狀態轉換
- Flip Manager：flip 的執行環境（鎖、transaction、outbox）
- Locks：並發控制工具
"""
