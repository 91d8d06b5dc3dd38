from .stock import (
    CHANGE_ADJUSTMENT,
    CHANGE_DECREASE,
    CHANGE_INCREASE,
    InsufficientStockError,
    InvalidStockOperationError,
    StockChange,
    StockError,
    WasteAlreadyReviewedError,
    change_stock,
    deduct_for_order,
    log_waste,
    receive_stock,
    restore_for_order,
    review_waste,
    set_stock_level,
)

__all__ = [
    "CHANGE_ADJUSTMENT",
    "CHANGE_DECREASE",
    "CHANGE_INCREASE",
    "InsufficientStockError",
    "InvalidStockOperationError",
    "StockChange",
    "StockError",
    "WasteAlreadyReviewedError",
    "change_stock",
    "deduct_for_order",
    "log_waste",
    "receive_stock",
    "restore_for_order",
    "review_waste",
    "set_stock_level",
]
