"""
Store enhancer：套用中介軟體。

apply_middleware 返回一個 enhancer，它包裝 create_store，
以中介軟體管線取代 Store 的 dispatch，其餘契約保持不變。
"""
import inspect
import logging
from typing import Any, Callable, Optional

from .compose import compose
from .errors import ConfigurationError, StoreError
from .store import Store
from .types import DispatchFunction, Listener, Reducer, StoreCreator, StoreEnhancer, Unsubscribe

logger = logging.getLogger(__name__)


class MiddlewareAPI:
    """
    提供給中介軟體的受限 Store 視圖，只有 dispatch 與 get_state。

    dispatch 在呼叫時才解析，永遠指向最終包裝後的 dispatch，
    使中介軟體內的遞迴 dispatch 會重新走完整條管線。
    """
    __slots__ = ("_dispatch", "_get_state")

    def __init__(self, dispatch: Callable[[], DispatchFunction], get_state: Callable[[], Any]) -> None:
        self._dispatch = dispatch
        self._get_state = get_state

    def dispatch(self, action: Any) -> Any:
        return self._dispatch()(action)

    def get_state(self) -> Any:
        return self._get_state()

    @property
    def state(self) -> Any:
        return self._get_state()


class _MiddlewareStore(Store[Any]):
    """除 dispatch 之外全部委派給原始 Store。"""

    def __init__(self, original_store: Store[Any], dispatch: DispatchFunction) -> None:
        self._original_store = original_store
        self.dispatch = dispatch  # type: ignore[method-assign]

    def get_state(self) -> Any:
        return self._original_store.get_state()

    def subscribe(self, listener: Listener) -> Unsubscribe:
        return self._original_store.subscribe(listener)

    def replace_reducer(self, next_reducer: Reducer[Any]) -> None:
        self._original_store.replace_reducer(next_reducer)


def apply_middleware(*middlewares: Any) -> StoreEnhancer:
    """
    創建一個套用中介軟體的 store enhancer。

    對於 [A, B]，action 依序經過 A 的前置邏輯、B 的前置邏輯、reducer，
    再依序經過 B 與 A 的後置邏輯。

    Args:
        *middlewares: 中介軟體，形式為 api -> next -> action；
            也可以傳入類別，每個 Store 建立時會以無參數實例化一次。

    Returns:
        接收 create_store 並返回新建構函數的 enhancer
    """
    for mw in middlewares:
        if not callable(mw):
            raise ConfigurationError(
                f"Middleware {mw!r} is not callable",
                component="apply_middleware",
            )

    def enhancer(create_store_fn: StoreCreator) -> StoreCreator:
        def create_store(reducer: Reducer[Any], preloaded_state: Any = None, enhancer: Optional[StoreEnhancer] = None) -> Store[Any]:
            store = create_store_fn(reducer, preloaded_state, enhancer)

            # 類別在每個 Store 建立時各自實例化，避免不同 Store 共用中介軟體狀態
            factories = [mw() if inspect.isclass(mw) else mw for mw in middlewares]

            def dispatch_while_constructing(action: Any) -> Any:
                raise StoreError(
                    "Dispatching while constructing your middleware is not allowed; "
                    "other middleware would not be applied to this dispatch",
                    operation="dispatch",
                )

            # 延遲綁定：管線組好之後才指向最終的 dispatch
            current = {"dispatch": dispatch_while_constructing}
            api = MiddlewareAPI(lambda: current["dispatch"], store.get_state)

            chain = [factory(api) for factory in factories]
            dispatch = compose(*chain)(store.dispatch)
            current["dispatch"] = dispatch

            logger.debug("applied %d middleware to %r", len(chain), store)
            return _MiddlewareStore(store, dispatch)

        return create_store

    return enhancer
