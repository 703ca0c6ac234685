"""
基於 TinyStoreX 的中介軟體定義模組。

此模組提供以鉤子方式撰寫的中介軟體，用於在動作分發過程中插入自定義邏輯，
實現日誌記錄、錯誤轉發、性能監控等功能。所有類別皆可直接傳給 apply_middleware。
"""
import contextlib
import logging
import time
from typing import Any, Dict, Generator, Optional

from .actions import create_action, get_action_type
from .immutable_utils import to_dict
from .types import DispatchFunction, MiddlewareFunction, MiddlewareStore, NextDispatch

logger = logging.getLogger(__name__)

ActionContext = Dict[str, Any]


# ———— Base Middleware ————
class BaseMiddleware:
    """
    基礎中介類，定義所有中介可能實現的鉤子。

    中介軟體可以介入動作分發的流程，在動作到達 Reducer 前、
    動作處理完成後或出現錯誤時執行自定義邏輯。
    實例本身就是 api -> next -> action 形式的中介軟體工廠。
    """

    def __call__(self, store: MiddlewareStore) -> MiddlewareFunction:
        """
        配置中介軟體。

        Args:
            store: 受限的 Store 視圖 (dispatch / get_state)

        Returns:
            配置函數，接收 next_dispatch 並返回新的 dispatch 函數
        """
        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Any) -> Any:
                with self.action_context(action, store.get_state()) as context:
                    result = next_dispatch(action)
                    context['result'] = result
                    context['next_state'] = store.get_state()
                    return result
            return dispatch
        return middleware

    def on_next(self, action: Any, prev_state: Any) -> None:
        """
        在 action 發送給 reducer 之前調用。

        Args:
            action: 正在 dispatch 的 Action
            prev_state: dispatch 之前的狀態
        """

    def on_complete(self, next_state: Any, action: Any) -> None:
        """
        在下游處理完 action 之後調用。

        Args:
            next_state: dispatch 之後的最新狀態
            action: 剛剛 dispatch 的 Action
        """

    def on_error(self, error: Exception, action: Any) -> None:
        """
        如果 dispatch 過程中拋出異常，則調用此鉤子；異常隨後會繼續向上拋出。

        Args:
            error: 拋出的異常
            action: 導致異常的 Action
        """

    def create_context(self, action: Any, prev_state: Any) -> ActionContext:
        return {
            'action': action,
            'prev_state': prev_state,
            'next_state': None,
            'result': None,
            'error': None,
        }

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        """
        以上下文管理器的形式處理 action 分發的生命週期。

        進入時呼叫 on_next，正常離開時呼叫 on_complete，
        出錯時呼叫 on_error 並重新拋出異常。

        Args:
            action: 要分發的 Action
            prev_state: 分發前的狀態

        Yields:
            包含上下文數據的字典，dispatch 完成後應填入 next_state 與 result
        """
        context = self.create_context(action, prev_state)
        self.on_next(action, prev_state)
        try:
            yield context
        except Exception as err:
            context['error'] = err
            self.on_error(err, action)
            raise
        self.on_complete(context['next_state'], action)


# ———— LoggerMiddleware ————
class LoggerMiddleware(BaseMiddleware):
    """
    日誌中介，記錄每個 action 發送前和發送後的 state。

    使用場景:
    - 偵錯時需要觀察每次 state 的變化。
    - 確保 action 的執行順序正確。
    """

    def __init__(self, level: int = logging.INFO, log: Optional[logging.Logger] = None) -> None:
        self.level = level
        self.log = log or logger

    def on_next(self, action: Any, prev_state: Any) -> None:
        action_type = get_action_type(action)
        self.log.log(self.level, "dispatching %s", action_type)
        self.log.log(self.level, "state before %s: %s", action_type, to_dict(prev_state))

    def on_complete(self, next_state: Any, action: Any) -> None:
        self.log.log(self.level, "state after %s: %s", get_action_type(action), to_dict(next_state))

    def on_error(self, error: Exception, action: Any) -> None:
        self.log.error("error in %s: %s", get_action_type(action), error)


# ———— ErrorMiddleware ————
global_error = create_action("[Error] GlobalError", lambda info: info)


class ErrorMiddleware(BaseMiddleware):
    """
    捕獲 dispatch 過程中的異常，dispatch 全域錯誤 Action 後重新拋出。

    使用場景:
    - 當需要統一在狀態樹中記錄異常時，由 reducer 處理 global_error。

    轉發失敗時只記錄日誌，呼叫者收到的永遠是原始異常。
    """

    def __call__(self, store: MiddlewareStore) -> MiddlewareFunction:
        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Any) -> Any:
                try:
                    return next_dispatch(action)
                except Exception as err:
                    self.forward_error(store, err, action)
                    raise
            return dispatch
        return middleware

    def forward_error(self, store: MiddlewareStore, error: Exception, action: Any) -> None:
        action_type = get_action_type(action)
        # 錯誤 action 本身失敗時不再轉發，避免無限遞迴
        if action_type == global_error.type:
            return
        try:
            store.dispatch(global_error({
                "error": str(error),
                "error_type": error.__class__.__name__,
                "action": action_type,
                "timestamp": time.time(),
            }))
        except Exception:
            logger.error("failed to dispatch %s for %s", global_error.type, action_type, exc_info=True)


# ———— PerformanceMonitorMiddleware ————
class PerformanceMonitorMiddleware(BaseMiddleware):
    """
    性能監控中間件，記錄 action 處理時間。
    """

    def __init__(self, threshold_ms: float = 100, log_all: bool = False) -> None:
        """
        初始化 PerformanceMonitorMiddleware。

        Args:
            threshold_ms: 性能警告閾值，單位為毫秒，預設為 100 毫秒
            log_all: 是否記錄所有 action 的耗時，預設為 False (只記錄超過閾值的)
        """
        self.threshold_ms = threshold_ms
        self.log_all = log_all
        # 每個 action 類型只保留累計值，長時間運行時不會持續增長
        self.metrics: Dict[Any, Dict[str, float]] = {}

    def _record(self, action_type: Any, elapsed_ms: float) -> None:
        entry = self.metrics.get(action_type)
        if entry is None:
            self.metrics[action_type] = {
                'count': 1, 'total': elapsed_ms, 'min': elapsed_ms, 'max': elapsed_ms,
            }
            return
        entry['count'] += 1
        entry['total'] += elapsed_ms
        entry['min'] = min(entry['min'], elapsed_ms)
        entry['max'] = max(entry['max'], elapsed_ms)

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        action_type = get_action_type(action)
        start_time = time.perf_counter()
        try:
            with super().action_context(action, prev_state) as context:
                yield context
        except Exception as err:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.warning("action %s failed after %.2fms: %s", action_type, elapsed_ms, err)
            raise

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self._record(action_type, elapsed_ms)
        if elapsed_ms > self.threshold_ms:
            logger.warning("action %s exceeded threshold (%sms): took %.2fms", action_type, self.threshold_ms, elapsed_ms)
        elif self.log_all:
            logger.info("action %s took %.2fms", action_type, elapsed_ms)

    def get_metrics(self) -> Dict[Any, Dict[str, float]]:
        """
        獲取性能指標統計信息。
        """
        return {
            action_type: {
                'avg': entry['total'] / entry['count'],
                'max': entry['max'],
                'min': entry['min'],
                'count': entry['count'],
            }
            for action_type, entry in self.metrics.items()
        }
