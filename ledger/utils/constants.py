"""Shared constants: markets, fee/tax policy, sort keys and user-facing messages."""

MS_PER_DAY = 1000 * 60 * 60 * 24
DAYS_PER_YEAR = 365

# Fee rate applies to both legs, tax rate to the sell leg only.
FEE_RATES: dict[str, float] = {
    "TW": 0.001425,  # 0.1425%
    "US": 0.001,  # generic estimate
    "UK": 0.001,
}
TAX_RATES: dict[str, float] = {
    "TW": 0.003,  # 0.3% securities transaction tax
    "US": 0.0,
    "UK": 0.0,
}

SORT_KEYS = ["date", "stock", "cost", "fees", "profit", "profitPercent", "holding"]
SORT_DIRECTIONS = ["asc", "desc"]

MARKET_LABELS: dict[str, str] = {
    "TW": "台股",
    "US": "美股",
    "UK": "英股",
}

SPLIT_NOTE_PREFIX = "(分拆剩餘)"

SAVE_FAILED_MESSAGE = "儲存失敗，請檢查網路連線"
DELETE_FAILED_MESSAGE = "刪除失敗"
SPLIT_CONFIRM_MESSAGE = (
    "偵測到賣出股數 ({sold}) 小於 原持有股數 ({original})。\n"
    "是否要自動拆分為「已賣出」與「剩餘庫存」兩筆紀錄？"
)
