"""
TinyStoreX 共用類型定義模組。

集中定義 reducer、listener、middleware 與 enhancer 的函數簽名，
供其他模組在類型提示中引用。
"""
from typing import Any, Callable, Optional, Protocol, TypeVar

S = TypeVar("S")  # 狀態類型
P = TypeVar("P")  # 負載類型

# ———— Reducer / Listener ————
Reducer = Callable[[Optional[S], Any], S]
Listener = Callable[[], None]
Unsubscribe = Callable[[], None]

# ———— Dispatch ————
DispatchFunction = Callable[[Any], Any]
NextDispatch = DispatchFunction
MiddlewareFunction = Callable[[NextDispatch], DispatchFunction]


class MiddlewareStore(Protocol):
    """中介軟體可見的受限 Store 介面，只有 dispatch 與 get_state。"""

    def dispatch(self, action: Any) -> Any: ...

    def get_state(self) -> Any: ...


# 三層柯里化：api -> next -> action -> result
Middleware = Callable[[MiddlewareStore], MiddlewareFunction]

# ———— Store 建構 ————
StoreCreator = Callable[..., Any]
StoreEnhancer = Callable[[StoreCreator], StoreCreator]
