"""
TinyStoreX 錯誤定義模組。

設定錯誤在建構時立即拋出；reducer 與 listener 拋出的異常不會被包裝，
而是原樣傳遞給 dispatch 的呼叫者。
"""
import traceback
from typing import Any, Dict, Optional


class TinyStoreXError(Exception):
    """所有 TinyStoreX 異常的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.traceback = "".join(traceback.format_stack()[:-1])

    def to_dict(self) -> Dict[str, Any]:
        """
        將錯誤轉為可序列化的字典。

        Returns:
            包含錯誤類型、訊息與細節的字典
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": dict(self.details),
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        details = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.message} ({details})"


class ConfigurationError(TinyStoreXError):
    """建構參數不合法，例如 reducer 不可呼叫或同時傳入兩個 enhancer。"""

    def __init__(self, message: str, component: str, config_key: Optional[str] = None, **kwargs: Any) -> None:
        details = {"component": component, **kwargs}
        if config_key is not None:
            details["config_key"] = config_key
        super().__init__(message, details)
        self.component = component
        self.config_key = config_key


class StoreError(TinyStoreXError):
    """在不允許的時機操作 Store，例如在 reducer 內部 dispatch。"""

    def __init__(self, message: str, operation: str, **kwargs: Any) -> None:
        super().__init__(message, {"operation": operation, **kwargs})
        self.operation = operation
