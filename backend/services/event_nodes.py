"""
Дерево event-вузлів (скрипти NPC/тригерів) як tagged variant з реєстром типів.

Складені вузли будуються рекурсивно:
  IF          -> then_step, else_step (else опційний)
  SHOW_CHOICE -> окрема гілка на кожну опцію (ключ - індекс опції)
Невідомий тип -> DefaultEvent, який зберігає сирі дані.
Дерево будується з settings["event"] entity (MapEntity.events).
"""
import copy
from typing import Any, Callable, Dict, List, Optional, Type


class EventNode:
    type = ""

    def __init__(self, data: Dict[str, Any], action_step: bool = False):
        self.data = copy.deepcopy(data)
        self.action_step = action_step

    def build_children(self, registry: "EventRegistry") -> None:
        pass

    def export(self) -> Dict[str, Any]:
        return copy.deepcopy(self.data)


class DefaultEvent(EventNode):
    """Вузол без спеціальної обробки"""

    @property
    def type(self) -> str:
        return self.data.get("type", "")


class IfEvent(EventNode):
    type = "IF"

    def __init__(self, data: Dict[str, Any], action_step: bool = False):
        super().__init__(data, action_step)
        self.then_step: List[EventNode] = []
        self.else_step: Optional[List[EventNode]] = None

    def build_children(self, registry: "EventRegistry") -> None:
        self.then_step = registry.build_list(self.data.get("thenStep") or [], self.action_step)
        if self.data.get("elseStep") is not None:
            self.else_step = registry.build_list(self.data["elseStep"], self.action_step)

    def export(self) -> Dict[str, Any]:
        out = super().export()
        out["thenStep"] = [node.export() for node in self.then_step]
        if self.else_step is not None:
            out["elseStep"] = [node.export() for node in self.else_step]
        return out


class ShowChoiceEvent(EventNode):
    type = "SHOW_CHOICE"

    def __init__(self, data: Dict[str, Any], action_step: bool = False):
        super().__init__(data, action_step)
        self.branches: Dict[int, List[EventNode]] = {}

    def build_children(self, registry: "EventRegistry") -> None:
        # гілки лежать у документі під ключами "0", "1", ... поруч з options
        for index, _option in enumerate(self.data.get("options") or []):
            steps = self.data.get(str(index), self.data.get(index)) or []
            self.branches[index] = registry.build_list(steps, self.action_step)

    def export(self) -> Dict[str, Any]:
        out = super().export()
        for index, nodes in self.branches.items():
            out.pop(index, None)
            out[str(index)] = [node.export() for node in nodes]
        return out


class EventRegistry:
    def __init__(self):
        self._types: Dict[str, Type[EventNode]] = {}

    def register(self, tag: str) -> Callable[[Type[EventNode]], Type[EventNode]]:
        def decorator(cls: Type[EventNode]) -> Type[EventNode]:
            self._types[tag] = cls
            return cls
        return decorator

    def get(self, tag: str) -> Type[EventNode]:
        return self._types.get(tag, DefaultEvent)

    def build(self, data: Dict[str, Any], action_step: bool = False) -> EventNode:
        node = self.get(data.get("type", ""))(data, action_step)
        node.build_children(self)
        return node

    def build_list(self, items: List[Dict[str, Any]], action_step: bool = False) -> List[EventNode]:
        return [self.build(item, action_step) for item in items]


default_registry = EventRegistry()
default_registry.register(IfEvent.type)(IfEvent)
default_registry.register(ShowChoiceEvent.type)(ShowChoiceEvent)


def build_event(data: Dict[str, Any], action_step: bool = False) -> EventNode:
    return default_registry.build(data, action_step)
