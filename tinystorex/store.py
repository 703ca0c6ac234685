"""
狀態容器模組。

Store 持有唯一的可變狀態格，只能透過 dispatch 以 reducer 更新，
並在每次更新後依註冊順序通知所有 listener。
"""
import logging
from typing import Any, Callable, Generic, List, Optional, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict
from reactivex import Observable, create, operators as ops
from reactivex.disposable import Disposable

from .actions import init_store, update_reducer
from .errors import ConfigurationError, StoreError
from .types import Listener, Reducer, StoreEnhancer, Unsubscribe

logger = logging.getLogger(__name__)

S = TypeVar("S")
T = TypeVar("T")


class StoreOptions(BaseModel):
    """
    create_store 的具名設定。

    以欄位明確區分預載狀態與 enhancer，避免位置參數的自動位移規則。
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    preloaded_state: Any = None
    enhancer: Optional[Callable[..., Any]] = None


class Store(Generic[S]):
    """
    Store 的公開介面。

    具體實作由 create_store 建立；enhancer 可以返回包裝後的 Store，
    只要維持 dispatch / subscribe / get_state 的契約即可。
    """

    def dispatch(self, action: Any) -> Any:
        raise NotImplementedError

    def get_state(self) -> S:
        raise NotImplementedError

    def subscribe(self, listener: Listener) -> Unsubscribe:
        raise NotImplementedError

    def replace_reducer(self, next_reducer: Reducer[S]) -> None:
        raise NotImplementedError

    @property
    def state(self) -> S:
        """當前狀態的引用，呼叫者不應修改。"""
        return self.get_state()

    def select(self, selector: Optional[Callable[[S], T]] = None) -> Observable:
        """
        選擇狀態的一部分進行觀察。

        每次 dispatch 後若選取的值與上一個值不相等，發出 (舊值, 新值) 元組。
        取消訂閱 Observable 時會一併解除底層的 listener。

        Args:
            selector: 一個函數，接收整個狀態並返回希望觀察的部分；預設為整個狀態。

        Returns:
            一個可觀察對象，發送 (previous, current) 元組。
        """
        if selector is None:
            selector = lambda state: state  # noqa: E731

        def on_subscribe(observer, scheduler=None) -> Disposable:
            # 先發出訂閱當下的值，作為第一組 (舊值, 新值) 的舊值
            observer.on_next(self.get_state())
            return Disposable(self.subscribe(lambda: observer.on_next(self.get_state())))

        return create(on_subscribe).pipe(
            ops.map(selector),
            ops.distinct_until_changed(),
            ops.pairwise(),
        )


class _DefaultStore(Store[S]):
    _reducer: Reducer[S]
    _state: Optional[S]
    _listeners: List[Listener]
    _is_dispatching: bool

    def __init__(self, reducer: Reducer[S], preloaded_state: Optional[S] = None) -> None:
        self._reducer = reducer
        self._state = preloaded_state
        self._listeners = []
        self._is_dispatching = False

    def dispatch(self, action: Any) -> Any:
        if self._is_dispatching:
            raise StoreError("Reducers may not dispatch actions", operation="dispatch")

        self._is_dispatching = True
        try:
            # reducer 拋出異常時狀態保持不變
            next_state = self._reducer(self._state, action)
        finally:
            self._is_dispatching = False
        self._state = next_state

        # 以快照走訪，巢狀 dispatch 或 (取消)訂閱不影響本輪通知
        for listener in tuple(self._listeners):
            listener()

        return action

    def get_state(self) -> S:
        return self._state

    def subscribe(self, listener: Listener) -> Unsubscribe:
        if not callable(listener):
            raise ConfigurationError(
                f"Expected the listener to be callable, got {type(listener).__name__}",
                component="subscribe",
            )

        self._listeners.append(listener)
        subscribed = True

        def unsubscribe() -> None:
            nonlocal subscribed
            if not subscribed:
                return
            subscribed = False
            for index, registered in enumerate(self._listeners):
                if registered is listener:
                    del self._listeners[index]
                    break

        return unsubscribe

    def replace_reducer(self, next_reducer: Reducer[S]) -> None:
        if not callable(next_reducer):
            raise ConfigurationError(
                "Expected the next reducer to be callable",
                component="replace_reducer",
            )
        logger.debug("replacing root reducer with %r", next_reducer)
        self._reducer = next_reducer
        self.dispatch(update_reducer())


def _resolve_positional(preloaded_state: Any, enhancer: Any) -> Tuple[Any, Any]:
    if callable(preloaded_state) and callable(enhancer):
        raise ConfigurationError(
            "Both preloaded_state and enhancer are callables; "
            "compose enhancers into a single function instead",
            component="create_store",
            config_key="enhancer",
        )

    # create_store(reducer, enhancer) 的位置參數寫法
    if callable(preloaded_state) and enhancer is None:
        return None, preloaded_state

    return preloaded_state, enhancer


def create_store(
    reducer: Reducer[S],
    preloaded_state: Any = None,
    enhancer: Optional[StoreEnhancer] = None,
    *,
    options: Optional[StoreOptions] = None,
) -> Store[S]:
    """
    創建一個新的 Store 實例。

    Args:
        reducer: 根 reducer，接收 (state, action) 並返回新狀態。
        preloaded_state: 可選的預載狀態；若為函數且未提供 enhancer，則視為 enhancer。
        enhancer: 可選的 store enhancer，接收 create_store 並返回新的建構函數。
        options: 具名設定，不可與 preloaded_state / enhancer 同時使用。

    Returns:
        Store: 新創建的 Store 實例，已處理過初始化 action。
    """
    if options is not None:
        if preloaded_state is not None or enhancer is not None:
            raise ConfigurationError(
                "Pass either options or positional preloaded_state/enhancer, not both",
                component="create_store",
                config_key="options",
            )
        preloaded_state, enhancer = options.preloaded_state, options.enhancer
    else:
        preloaded_state, enhancer = _resolve_positional(preloaded_state, enhancer)

    if enhancer is not None:
        if not callable(enhancer):
            raise ConfigurationError(
                f"Expected the enhancer to be callable, got {type(enhancer).__name__}",
                component="create_store",
                config_key="enhancer",
            )
        logger.debug("creating store through enhancer %r", enhancer)
        return enhancer(create_store)(reducer, preloaded_state)

    if not callable(reducer):
        raise ConfigurationError(
            f"Expected the reducer to be callable, got {type(reducer).__name__}",
            component="create_store",
            config_key="reducer",
        )

    store = _DefaultStore(reducer, preloaded_state)
    # 讓每個 reducer 在被讀取前填入預設狀態
    store.dispatch(init_store())
    logger.debug("store created with reducer %r", reducer)
    return store
