"""
基於 TinyStoreX 的 Action 定義模組。

此模組提供 Action 類別以及創建 Action 的功能。
Actions 是描述狀態變更意圖的不可變對象；核心只要求它帶有 type 鑑別欄位，
可以是本模組的 Action，也可以是含有 "type" 鍵的普通字典。
"""
from collections.abc import Mapping
from typing import Any, Callable, Dict, Generic, Optional, Union

from immutables import Map

from .types import P

# 保留給 Store 內部使用的 action 類型命名空間，應用程式不應使用此前綴
RESERVED_PREFIX = "@@tinystorex/"
INIT = RESERVED_PREFIX + "INIT"
REPLACE = RESERVED_PREFIX + "REPLACE"


class Action(Generic[P]):
    """
    表示一個有類型和可選負載的動作。

    泛型參數:
        P: 負載的類型

    屬性:
        type: 動作的類型字符串
        payload: 動作的負載數據（可選）
    """
    __slots__ = ('type', 'payload')

    def __init__(self, type: str, payload: Optional[P] = None):
        super().__setattr__('type', type)
        super().__setattr__('payload', payload)

    def __setattr__(self, name, value):
        if name not in self.__slots__:
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
        raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")

    def __delattr__(self, name):
        raise AttributeError(f"Cannot delete immutable instance attribute '{name}'")

    def __getitem__(self, key: str) -> Any:
        # 允許以字典方式讀取，讓 action["type"] 風格的 reducer 也能處理 Action
        if key not in self.__slots__:
            raise KeyError(key)
        return getattr(self, key)

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default

    def __eq__(self, other):
        if not isinstance(other, Action):
            return False
        return self.type == other.type and self.payload == other.payload

    def __hash__(self):
        return hash((self.type, self.payload))

    def __repr__(self):
        return f"Action(type='{self.type}', payload={repr(self.payload)})"


def get_action_type(action: Any) -> Optional[Any]:
    """
    讀取 action 的類型鑑別值。

    Args:
        action: Action 物件，或含有 "type" 鍵的映射

    Returns:
        action 的類型；若不存在則返回 None
    """
    if isinstance(action, Mapping):
        return action.get("type")
    return getattr(action, "type", None)


def _process_payload(payload: Any) -> Any:
    # 字典負載轉為不可變的 Map
    if isinstance(payload, dict):
        return Map(payload)
    return payload


def create_action(action_type: str, prepare_fn: Optional[Callable[..., Any]] = None) -> Callable[..., Action[Any]]:
    """
    創建一個 Action 生成器函數。

    Args:
        action_type: Action 的類型標識符
        prepare_fn: 可選的預處理函數，用於在創建 Action 前處理輸入參數

    Returns:
        一個可調用的函數，用於生成指定類型的 Action

    範例:
        >>> increment = create_action("[Counter] Increment")
        >>> increment()
        Action(type='[Counter] Increment', payload=None)
        >>> add = create_action("[Counter] Add", lambda amount: amount)
        >>> add(5)
        Action(type='[Counter] Add', payload=5)
    """
    def action_creator(*args: Any, **kwargs: Any) -> Action[Any]:
        if prepare_fn:
            return Action(action_type, _process_payload(prepare_fn(*args, **kwargs)))
        elif len(args) == 1 and not kwargs:
            return Action(action_type, _process_payload(args[0]))
        elif args or kwargs:
            payload: Dict[Union[int, str], Any] = dict(zip(range(len(args)), args))
            payload.update(kwargs)
            return Action(action_type, _process_payload(payload))

        # 無參數，無負載
        return Action(action_type)

    # 添加 type 屬性以便於識別
    action_creator.type = action_type  # type: ignore[attr-defined]

    return action_creator


# 根 Actions
init_store = create_action(INIT)
update_reducer = create_action(REPLACE)
