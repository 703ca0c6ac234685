"""
TinyStoreX 範例：待辦事項與名稱兩個 slice，展示 combine_reducers 與中介軟體。
"""
import datetime
import logging
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from tinystorex import LoggerMiddleware, apply_middleware, combine_reducers, create_store
from tinystorex.actions import get_action_type

logger = logging.getLogger("todo_example")

# ====== 1. 定義初始狀態 ======
todos = (
    {"task": "吃早餐", "completed": False},
    {"task": "刷知乎", "completed": False},
    {"task": "逛淘宝", "completed": False},
)
names = {"name": "yyt"}


# ====== 2. 定義 Reducer ======
def todos_reducer(state=None, action=None):
    if state is None:
        state = list(todos)
    if action["type"] == "task_completed":
        return [
            {**todo, "completed": True} if index == action["index"] else todo
            for index, todo in enumerate(state)
        ]
    return state


def name_reducer(state=None, action=None):
    if state is None:
        state = names
    if action["type"] == "changename":
        return {**state, "name": action["name"]}
    return state


# ====== 3. 定義中介軟體 ======
def timestamp_middleware(store):
    def wrap(next_dispatch):
        def dispatch(action):
            logger.info("當前時間：%s", datetime.date.today().isoformat())
            logger.info("當前 action: %s", get_action_type(action))
            return next_dispatch(action)
        return dispatch
    return wrap


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    store = create_store(
        combine_reducers({"todos": todos_reducer, "name": name_reducer}),
        apply_middleware(LoggerMiddleware, timestamp_middleware),
    )
    store.subscribe(lambda: print("狀態更新:", store.get_state()))

    # 更改 todo
    store.dispatch({"type": "task_completed", "index": 0})
    # 更改 name
    store.dispatch({"type": "changename", "name": "xyy"})
