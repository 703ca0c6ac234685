"""
TinyStoreX：單向資料流的最小狀態容器。
"""

from .errors import TinyStoreXError, ConfigurationError, StoreError
from .actions import Action, create_action, get_action_type, INIT, REPLACE
from .compose import compose
from .reducers import combine_reducers, create_reducer, on
from .store import Store, StoreOptions, create_store
from .enhancers import MiddlewareAPI, apply_middleware
from .middleware import (
    BaseMiddleware, LoggerMiddleware, ErrorMiddleware, PerformanceMonitorMiddleware
)
from .immutable_utils import to_immutable, to_dict

__all__ = [
    # Errors
    "TinyStoreXError", "ConfigurationError", "StoreError",

    # Actions
    "Action", "create_action", "get_action_type", "INIT", "REPLACE",

    # Composition
    "compose", "combine_reducers", "create_reducer", "on",

    # Store
    "Store", "StoreOptions", "create_store",

    # Middleware
    "MiddlewareAPI", "apply_middleware",
    "BaseMiddleware", "LoggerMiddleware", "ErrorMiddleware", "PerformanceMonitorMiddleware",

    # Immutable Utils
    "to_immutable", "to_dict",
]
