"""
函數組合工具。
"""
import functools
from typing import Any, Callable

from .errors import ConfigurationError


def _identity(arg: Any) -> Any:
    return arg


def compose(*funcs: Callable[..., Any]) -> Callable[..., Any]:
    """
    由右至左組合函數：compose(f, g, h)(x) 等同於 f(g(h(x)))。

    最右側的函數接收原始參數，其餘函數皆為單參數函數。

    Args:
        *funcs: 要組合的函數

    Returns:
        組合後的函數。沒有參數時返回恆等函數，只有一個參數時原樣返回。
    """
    for index, fn in enumerate(funcs):
        if not callable(fn):
            raise ConfigurationError(
                f"compose() expects callables, got {type(fn).__name__} at position {index}",
                component="compose",
            )

    if not funcs:
        return _identity

    if len(funcs) == 1:
        return funcs[0]

    return functools.reduce(lambda f, g: lambda *args, **kwargs: f(g(*args, **kwargs)), funcs)
