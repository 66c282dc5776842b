"""
服務層

這個 package 包含純計算邏輯，不負責狀態轉換：
- AddressService：address 標準化
- EntropyService：決定 flip 結果的外部數值來源
"""
