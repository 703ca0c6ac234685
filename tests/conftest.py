from __future__ import annotations

import pytest

TODOS = (
    {"task": "吃早餐", "completed": False},
    {"task": "刷知乎", "completed": False},
    {"task": "逛淘宝", "completed": False},
)


def todos_reducer(state=None, action=None):
    if state is None:
        state = list(TODOS)
    if action["type"] == "task_completed":
        return [
            {**todo, "completed": True} if index == action["index"] else todo
            for index, todo in enumerate(state)
        ]
    return state


def name_reducer(state=None, action=None):
    if state is None:
        state = {"name": "yyt"}
    if action["type"] == "changename":
        return {**state, "name": action["name"]}
    return state


def counter_reducer(state=None, action=None):
    if state is None:
        state = 0
    if action["type"] == "increment":
        return state + 1
    return state


@pytest.fixture
def app_reducers():
    return {"todos": todos_reducer, "name": name_reducer}


@pytest.fixture
def todos():
    return todos_reducer


@pytest.fixture
def name():
    return name_reducer


@pytest.fixture
def counter():
    return counter_reducer
