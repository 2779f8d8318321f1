"""
Тести для дерева event-вузлів
"""
from services.event_nodes import DefaultEvent, EventNode, EventRegistry, IfEvent, ShowChoiceEvent, build_event

IF_DOC = {
    "type": "IF",
    "condition": "tmp.chestOpened",
    "thenStep": [{"type": "SHOW_MSG", "message": "empty"}],
    "elseStep": [
        {
            "type": "IF",
            "condition": "map.visited",
            "thenStep": [{"type": "SHOW_MSG", "message": "nested"}],
        }
    ],
}

CHOICE_DOC = {
    "type": "SHOW_CHOICE",
    "options": [{"label": "Yes"}, {"label": "No"}],
    "0": [{"type": "SHOW_MSG", "message": "yes"}],
    "1": [{"type": "SET_VAR", "name": "declined"}, {"type": "SHOW_MSG", "message": "no"}],
}


class TestEventNodes:
    """Тести для event_nodes.py"""

    def test_if_branches(self):
        node = build_event(IF_DOC)
        assert isinstance(node, IfEvent)
        assert [n.type for n in node.then_step] == ["SHOW_MSG"]
        nested = node.else_step[0]
        assert isinstance(nested, IfEvent)
        assert nested.else_step is None
        assert nested.then_step[0].data["message"] == "nested"

    def test_show_choice_branch_per_option(self):
        node = build_event(CHOICE_DOC)
        assert isinstance(node, ShowChoiceEvent)
        assert sorted(node.branches) == [0, 1]
        assert [n.type for n in node.branches[1]] == ["SET_VAR", "SHOW_MSG"]

    def test_unknown_type_falls_back(self):
        node = build_event({"type": "SHOW_MSG", "message": "hi"})
        assert isinstance(node, DefaultEvent)
        assert node.type == "SHOW_MSG"

    def test_action_step_propagates(self):
        node = build_event(IF_DOC, action_step=True)
        assert node.then_step[0].action_step
        assert node.else_step[0].then_step[0].action_step

    def test_export_round_trip(self):
        assert build_event(IF_DOC).export() == IF_DOC
        assert build_event(CHOICE_DOC).export() == CHOICE_DOC

    def test_custom_registry(self):
        registry = EventRegistry()

        @registry.register("WAIT")
        class WaitEvent(EventNode):
            type = "WAIT"

        node = registry.build({"type": "WAIT", "time": 1})
        assert isinstance(node, WaitEvent)
        assert isinstance(registry.build({"type": "IF", "thenStep": []}), DefaultEvent)
