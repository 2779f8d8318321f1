"""
Історія станів для undo/redo: зберігає повні snapshots (export карти), без diff.
"""
import copy
from typing import Any, List, Optional, Tuple


class HistoryState:
    def __init__(self, name: str, snapshot: Any):
        self.name = name
        self.snapshot = snapshot


class StateHistory:
    """
    Лінійна історія з курсором. push після undo відкидає redo-хвіст.
    undo/redo/select повертають snapshot, який треба відновити (або None).
    peek_* + commit дозволяють рухати курсор лише після успішного відновлення.
    """

    def __init__(self, max_states: int = 100):
        if max_states < 1:
            raise ValueError("max_states має бути >= 1")
        self.max_states = max_states
        self.states: List[HistoryState] = []
        self.index = -1

    @property
    def selected(self) -> Optional[HistoryState]:
        if 0 <= self.index < len(self.states):
            return self.states[self.index]
        return None

    def push(self, name: str, snapshot: Any) -> HistoryState:
        del self.states[self.index + 1:]
        state = HistoryState(name, copy.deepcopy(snapshot))
        self.states.append(state)
        if len(self.states) > self.max_states:
            del self.states[0]
        self.index = len(self.states) - 1
        return state

    def _restore(self, index: int) -> Any:
        return copy.deepcopy(self.states[index].snapshot)

    def peek_undo(self) -> Optional[Tuple[int, Any]]:
        """(index, snapshot) попереднього стану; курсор не рухається"""
        if self.index <= 0:
            return None
        return self.index - 1, self._restore(self.index - 1)

    def peek_redo(self) -> Optional[Tuple[int, Any]]:
        if self.index >= len(self.states) - 1:
            return None
        return self.index + 1, self._restore(self.index + 1)

    def peek(self, index: int) -> Tuple[int, Any]:
        if not 0 <= index < len(self.states):
            raise IndexError(f"Стан {index} відсутній в історії")
        return index, self._restore(index)

    def commit(self, index: int) -> None:
        """Переносить курсор після того, як snapshot успішно відновлено"""
        if not 0 <= index < len(self.states):
            raise IndexError(f"Стан {index} відсутній в історії")
        self.index = index

    def undo(self) -> Optional[Any]:
        step = self.peek_undo()
        if step is None:
            return None
        self.commit(step[0])
        return step[1]

    def redo(self) -> Optional[Any]:
        step = self.peek_redo()
        if step is None:
            return None
        self.commit(step[0])
        return step[1]

    def select(self, index: int) -> Any:
        index, snapshot = self.peek(index)
        self.commit(index)
        return snapshot
