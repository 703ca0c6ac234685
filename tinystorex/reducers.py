"""
Reducer 組合與建構工具。

combine_reducers 把多個獨立的 slice reducer 合併為一個作用於鍵值狀態樹的 reducer；
create_reducer / on 以對照表的方式建構單一 slice reducer。
"""
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar

from .actions import get_action_type
from .errors import ConfigurationError
from .types import Reducer

S = TypeVar("S")


def combine_reducers(reducers: Mapping[str, Reducer]) -> Reducer[Dict[str, Any]]:
    """
    合併多個 slice reducer。

    每次 action 都會走訪所有鍵，即使該 slice 的狀態沒有變化，
    以便各 reducer 在初始化 action 時填入預設值。

    Args:
        reducers: slice 鍵名到 reducer 的映射

    Returns:
        一個 reducer，接收 (state, action) 並返回包含相同鍵的新字典
    """
    final_reducers: Dict[str, Reducer] = {}
    for key, reducer in reducers.items():
        if not callable(reducer):
            raise ConfigurationError(
                f"Reducer for key '{key}' is not callable",
                component="combine_reducers",
                config_key=str(key),
            )
        final_reducers[key] = reducer

    def combination(state: Optional[Mapping[str, Any]] = None, action: Any = None) -> Dict[str, Any]:
        if state is None:
            state = {}

        next_state: Dict[str, Any] = {}
        for key, reducer in final_reducers.items():
            next_state[key] = reducer(state.get(key), action)
        return next_state

    return combination


def create_reducer(initial_state: S, *handlers) -> Reducer[S]:
    """
    創建一個 reducer 函式，用於處理狀態變更。

    Args:
        initial_state: 初始狀態，當傳入的 state 為 None 時使用。
        *handlers: 一系列 (action_type, handler_fn) 元組或使用 on 函式創建的處理器。

    Returns:
        一個 reducer 函式，根據 action 的類型執行對應的處理邏輯。
    """
    action_handlers = {}  # 儲存 action 類型與處理函式的對應關係

    for handler in handlers:
        if isinstance(handler, tuple) and len(handler) == 2:
            action_type, handler_fn = handler
            action_handlers[action_type] = handler_fn
        elif isinstance(handler, dict):
            action_handlers.update(handler)
        else:
            raise ConfigurationError(
                f"Unsupported handler {handler!r}; expected a (type, fn) tuple or on(...)",
                component="create_reducer",
            )

    def reducer(state: Optional[S] = None, action: Any = None) -> S:
        if state is None:
            state = initial_state
        if action is None:
            return state

        handler = action_handlers.get(get_action_type(action))
        if handler:
            return handler(state, action)
        return state  # 沒有對應處理函式時返回原狀態

    reducer.initial_state = initial_state  # type: ignore[attr-defined]
    reducer.handlers = action_handlers  # type: ignore[attr-defined]

    return reducer


def on(action_creator_or_type: Any, handler: Callable[[Any, Any], Any]) -> Dict[Any, Callable[[Any, Any], Any]]:
    """
    創建一個 action 類型與處理函式的映射。

    Args:
        action_creator_or_type: Action 創建器函式，或 Action 類型 (字串或任意可雜湊的標記)。
        handler: 處理該 Action 的函式，接收 (state, action) 並返回新狀態。

    Returns:
        一個包含 {action_type: handler} 的字典。
    """
    if callable(action_creator_or_type) and hasattr(action_creator_or_type, 'type'):
        action_type = action_creator_or_type.type
    else:
        action_type = action_creator_or_type

    return {action_type: handler}
