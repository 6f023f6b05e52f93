"""Flat, tagged view of a submitted exam graph.

The nested ``stations -> questions -> options`` payload is converted once into
three tables keyed by node key. Every node carries its parent key and an
explicit tag (new, existing or removed), so reconciliation never has to look at
identity fields again.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple, Union

from app.core.constants import NodeTagEnum
from app.core.exceptions import ValidationError
from app.schemas.exam import ExamCreate, ExamSync, OptionIn, QuestionIn, StationIn

# ("station" | "question" | "option", "new" | "existing", ordinal or stored id)
NodeKey = Tuple[str, str, int]


@dataclass
class PlannedNode:
    key: NodeKey
    tag: NodeTagEnum
    parent_key: Optional[NodeKey]
    data: Union[StationIn, QuestionIn, OptionIn]

    @property
    def id(self) -> Optional[int]:
        return self.key[2] if self.tag == NodeTagEnum.EXISTING else None


@dataclass
class GraphPlan:
    stations: Dict[NodeKey, PlannedNode] = field(default_factory=dict)
    questions: Dict[NodeKey, PlannedNode] = field(default_factory=dict)
    options: Dict[NodeKey, PlannedNode] = field(default_factory=dict)
    removed_station_ids: Set[int] = field(default_factory=set)
    removed_question_ids: Set[int] = field(default_factory=set)
    removed_option_ids: Set[int] = field(default_factory=set)

    def stations_tagged(self, tag: NodeTagEnum) -> List[PlannedNode]:
        return [n for n in self.stations.values() if n.tag == tag]

    def questions_of(self, station_key: NodeKey) -> Iterator[PlannedNode]:
        return (n for n in self.questions.values() if n.parent_key == station_key)

    def options_of(self, question_key: NodeKey) -> Iterator[PlannedNode]:
        return (n for n in self.options.values() if n.parent_key == question_key)

    def existing_ids(self, table: Dict[NodeKey, PlannedNode]) -> Set[int]:
        return {n.id for n in table.values() if n.tag == NodeTagEnum.EXISTING}


class _KeyFactory:
    def __init__(self):
        self._counter = 0

    def key_for(self, kind: str, node_id: Optional[int]) -> Tuple[NodeKey, NodeTagEnum]:
        if node_id is None:
            self._counter += 1
            return (kind, NodeTagEnum.NEW.value, self._counter), NodeTagEnum.NEW
        return (kind, NodeTagEnum.EXISTING.value, node_id), NodeTagEnum.EXISTING


def _register(table: Dict[NodeKey, PlannedNode], node: PlannedNode, kind: str):
    if node.key in table:
        raise ValidationError(
            f"The {kind} with id {node.key[2]} appears more than once in the submitted graph.",
            details={f"{kind}_id": node.key[2]},
        )
    table[node.key] = node


def build_plan(graph: Union[ExamCreate, ExamSync]) -> GraphPlan:
    plan = GraphPlan()
    keys = _KeyFactory()

    for station_in in graph.stations:
        station_key, station_tag = keys.key_for("station", station_in.id)
        _register(plan.stations, PlannedNode(station_key, station_tag, None, station_in), "station")

        for question_in in station_in.questions:
            question_key, question_tag = keys.key_for("question", question_in.id)
            if station_tag == NodeTagEnum.NEW and question_tag == NodeTagEnum.EXISTING:
                raise ValidationError(
                    "A new station cannot contain existing questions.",
                    details={"question_id": question_in.id},
                )
            _register(plan.questions, PlannedNode(question_key, question_tag, station_key, question_in), "question")

            for option_in in question_in.options:
                option_key, option_tag = keys.key_for("option", option_in.id)
                if question_tag == NodeTagEnum.NEW and option_tag == NodeTagEnum.EXISTING:
                    raise ValidationError(
                        "A new question cannot contain existing options.",
                        details={"option_id": option_in.id},
                    )
                _register(plan.options, PlannedNode(option_key, option_tag, question_key, option_in), "option")

    if isinstance(graph, ExamSync):
        plan.removed_station_ids = set(graph.removed_station_ids)
        plan.removed_question_ids = set(graph.removed_question_ids)
        plan.removed_option_ids = set(graph.removed_option_ids)

    for kind, table, removed in (
        ("station", plan.stations, plan.removed_station_ids),
        ("question", plan.questions, plan.removed_question_ids),
        ("option", plan.options, plan.removed_option_ids),
    ):
        both = sorted(plan.existing_ids(table) & removed)
        if both:
            raise ValidationError(
                f"Some {kind}s are marked both as kept and as removed.",
                details={f"{kind}_ids": both},
            )

    return plan
