"""Generic finite-state workflow engine.

A workflow is an immutable :class:`WorkflowDefinition` (states, one initial
state, terminal states and a transition table of guarded edges) plus pure
functions that move a :class:`WorkflowInstance` snapshot along those edges.
The engine keeps no state of its own; persisting the returned instance and
serialising concurrent writers is the caller's job.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import (
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Tuple,
    Union,
)

from placement_core.core.errors import (
    ErrorKind,
    TransitionResult,
    WorkflowDefinitionError,
    WorkflowError,
)
from placement_core.core.models import Actor, HistoryEntry, Role, WorkflowInstance, utcnow
from placement_core.utils.logging import get_logger, log_transition_context

logger = get_logger(__name__)

StateLike = Union[str, Enum]
Guard = Callable[[WorkflowInstance, Actor], bool]


def _value(item: StateLike) -> str:
    return item.value if isinstance(item, Enum) else item


@dataclass(frozen=True)
class Edge:
    """A permitted move from one state to another, triggered by an action."""
    from_state: str
    action: str
    to_state: str
    allowed_roles: FrozenSet[Role]
    guard: Optional[Guard] = None

    def permits(self, instance: WorkflowInstance, actor: Actor) -> bool:
        """Whether the actor may take this edge for this instance."""
        if actor.role not in self.allowed_roles:
            return False
        return self.guard is None or self.guard(instance, actor)


def edge(
    from_state: StateLike,
    action: StateLike,
    to_state: StateLike,
    roles: Iterable[Role],
    guard: Optional[Guard] = None,
) -> Edge:
    """Shorthand for declaring an edge with enum members."""
    return Edge(
        from_state=_value(from_state),
        action=_value(action),
        to_state=_value(to_state),
        allowed_roles=frozenset(roles),
        guard=guard,
    )


class WorkflowDefinition:
    """Immutable description of a finite workflow.

    Structural invariants are checked on construction and a malformed
    definition raises :class:`WorkflowDefinitionError`:

    - every edge endpoint is a declared state
    - no two edges share the same ``(from_state, action)`` key
    - terminal states have no outgoing edges
    - every non-terminal state has at least one outgoing edge
    - no edge targets the initial state
    """

    def __init__(
        self,
        name: str,
        states: Iterable[StateLike],
        initial_state: StateLike,
        terminal_states: Iterable[StateLike],
        edges: Iterable[Edge],
        labels: Optional[Mapping[StateLike, str]] = None,
    ):
        self._name = name
        self._states: Tuple[str, ...] = tuple(_value(s) for s in states)
        self._initial = _value(initial_state)
        self._terminal: FrozenSet[str] = frozenset(_value(s) for s in terminal_states)

        table: Dict[Tuple[str, str], Edge] = {}
        for item in edges:
            key = (item.from_state, item.action)
            if key in table:
                raise WorkflowDefinitionError(f"{name}: duplicate edge for {key}")
            table[key] = item
        self._table: Mapping[Tuple[str, str], Edge] = MappingProxyType(table)

        self._labels: Mapping[str, str] = MappingProxyType(
            {_value(k): v for k, v in (labels or {}).items()}
        )
        self._actions: FrozenSet[str] = frozenset(action for _, action in table)
        self._targets: Mapping[str, Optional[str]] = MappingProxyType(self._collect_targets())

        self._validate()

    def _collect_targets(self) -> Dict[str, Optional[str]]:
        # An action seeks a single state when all its edges lead there.
        targets: Dict[str, Optional[str]] = {}
        for item in self._table.values():
            if item.action not in targets:
                targets[item.action] = item.to_state
            elif targets[item.action] != item.to_state:
                targets[item.action] = None
        return targets

    def _validate(self) -> None:
        declared = set(self._states)
        if len(declared) != len(self._states):
            raise WorkflowDefinitionError(f"{self._name}: duplicate state names")
        if self._initial not in declared:
            raise WorkflowDefinitionError(f"{self._name}: unknown initial state {self._initial!r}")
        if not self._terminal <= declared:
            raise WorkflowDefinitionError(f"{self._name}: unknown terminal states")
        if self._initial in self._terminal:
            raise WorkflowDefinitionError(f"{self._name}: initial state cannot be terminal")

        for item in self._table.values():
            if item.from_state not in declared or item.to_state not in declared:
                raise WorkflowDefinitionError(
                    f"{self._name}: edge {item.from_state}->{item.to_state} uses an undeclared state"
                )
            if item.to_state == self._initial:
                raise WorkflowDefinitionError(f"{self._name}: edge targets the initial state")
            if not item.allowed_roles:
                raise WorkflowDefinitionError(
                    f"{self._name}: edge {item.from_state}->{item.to_state} allows no roles"
                )

        for state in self._states:
            has_outgoing = bool(self.outgoing(state))
            if state in self._terminal and has_outgoing:
                raise WorkflowDefinitionError(f"{self._name}: terminal state {state!r} has outgoing edges")
            if state not in self._terminal and not has_outgoing:
                raise WorkflowDefinitionError(f"{self._name}: state {state!r} is a dead end")

    @property
    def name(self) -> str:
        return self._name

    @property
    def states(self) -> Tuple[str, ...]:
        return self._states

    @property
    def initial_state(self) -> str:
        return self._initial

    @property
    def terminal_states(self) -> FrozenSet[str]:
        return self._terminal

    @property
    def actions(self) -> FrozenSet[str]:
        """The action vocabulary."""
        return self._actions

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return tuple(self._table.values())

    def edge(self, state: StateLike, action: StateLike) -> Optional[Edge]:
        return self._table.get((_value(state), _value(action)))

    def outgoing(self, state: StateLike) -> List[Edge]:
        state = _value(state)
        return [item for (source, _), item in self._table.items() if source == state]

    def target_of(self, action: StateLike) -> Optional[str]:
        """The single state an action leads to, or None if it is ambiguous or unknown."""
        return self._targets.get(_value(action))

    def action_for(self, target_state: StateLike) -> Optional[str]:
        """The action that seeks ``target_state``, if exactly one does."""
        target_state = _value(target_state)
        matches = [action for action, target in self._targets.items() if target == target_state]
        return matches[0] if len(matches) == 1 else None

    def is_terminal(self, state: StateLike) -> bool:
        return _value(state) in self._terminal

    def label(self, state: StateLike) -> str:
        state = _value(state)
        return self._labels.get(state, state.replace("_", " ").title())

    def __repr__(self) -> str:
        return f"<WorkflowDefinition: {self._name} ({len(self._states)} states, {len(self._table)} edges)>"


def create_instance(
    definition: WorkflowDefinition,
    entity_id: str,
    actor: Actor,
    owner_id: Optional[str] = None,
    organization_id: Optional[str] = None,
    note: Optional[str] = None,
    now: Optional[datetime] = None,
) -> WorkflowInstance:
    """Create an instance in the definition's initial state with a creation entry."""
    now = now or utcnow()
    entry = HistoryEntry(
        from_state=None,
        to_state=definition.initial_state,
        action=None,
        actor_id=actor.user_id,
        actor_role=actor.role,
        timestamp=now,
        note=note,
    )
    return WorkflowInstance(
        id=entity_id,
        workflow=definition.name,
        current_state=definition.initial_state,
        history=(entry,),
        owner_id=owner_id,
        organization_id=organization_id,
        version=0,
        created_at=now,
    )


def transition(
    definition: WorkflowDefinition,
    instance: WorkflowInstance,
    action: StateLike,
    actor: Actor,
    note: Optional[str] = None,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """Validate and apply one transition, returning a new instance or a typed error.

    Checks run in a fixed order: unknown action, terminal state, no-op (the
    action seeks the state the instance is already in), missing edge,
    role/guard permission. Terminal states have no outgoing edges, so any
    request against them is an IllegalTransition. The input instance is never
    modified.
    """
    action = _value(action)
    current = instance.current_state
    log = logger.bind(component="finite_workflow", workflow=definition.name)
    context = log_transition_context(instance, action, actor)

    def fail(kind: ErrorKind, *details: str) -> TransitionResult:
        log.warning("Transition rejected", error_kind=kind.value, **context)
        return TransitionResult.fail(
            WorkflowError(kind=kind, state=current, action=action, details=list(details))
        )

    if instance.workflow != definition.name:
        return fail(ErrorKind.ILLEGAL_TRANSITION, f"instance belongs to workflow {instance.workflow!r}")
    if current not in definition.states:
        return fail(ErrorKind.ILLEGAL_TRANSITION, f"unknown state {current!r}")
    if action not in definition.actions:
        return fail(ErrorKind.ILLEGAL_TRANSITION, f"unknown action {action!r}")
    if definition.is_terminal(current):
        return fail(ErrorKind.ILLEGAL_TRANSITION, f"state {current!r} is terminal")
    if definition.target_of(action) == current:
        return fail(ErrorKind.NO_OP_TRANSITION)

    selected = definition.edge(current, action)
    if selected is None:
        return fail(ErrorKind.ILLEGAL_TRANSITION)
    if not selected.permits(instance, actor):
        return fail(ErrorKind.FORBIDDEN, f"role {actor.role.value!r}")

    entry = HistoryEntry(
        from_state=current,
        to_state=selected.to_state,
        action=action,
        actor_id=actor.user_id,
        actor_role=actor.role,
        timestamp=now or utcnow(),
        note=note,
    )
    updated = instance.model_copy(
        update={
            "current_state": selected.to_state,
            "history": instance.history + (entry,),
            "version": instance.version + 1,
        }
    )

    log.info("Transition applied", from_state=current, to_state=selected.to_state, **context)
    return TransitionResult.ok(updated)


def request_state(
    definition: WorkflowDefinition,
    instance: WorkflowInstance,
    action: StateLike,
    actor: Actor,
    note: Optional[str] = None,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """Apply ``action`` as a request for the state it leads to.

    Used where a caller picks a status (status dropdowns, approval decisions).
    Asking for the state the instance already holds fails with NoOpTransition,
    terminal states included; everything else behaves as :func:`transition`.
    """
    action = _value(action)
    if instance.workflow == definition.name and definition.target_of(action) == instance.current_state:
        logger.warning(
            "Transition rejected",
            component="finite_workflow",
            workflow=definition.name,
            error_kind=ErrorKind.NO_OP_TRANSITION.value,
            **log_transition_context(instance, action, actor),
        )
        return TransitionResult.fail(
            WorkflowError(kind=ErrorKind.NO_OP_TRANSITION, state=instance.current_state, action=action)
        )
    return transition(definition, instance, action, actor, note=note, now=now)


def available_actions(
    definition: WorkflowDefinition,
    instance: WorkflowInstance,
    actor: Actor,
) -> List[str]:
    """Actions the actor may take on the instance right now, in table order."""
    return [
        item.action
        for item in definition.outgoing(instance.current_state)
        if item.permits(instance, actor)
    ]


def detect_conflict(snapshot: WorkflowInstance, current: WorkflowInstance) -> Optional[WorkflowError]:
    """Report ConflictingState when the stored instance moved on since ``snapshot`` was read.

    The engine validates only against the state it is handed, so callers use
    this at the persistence boundary before writing a transition result.
    """
    if snapshot.version == current.version and snapshot.current_state == current.current_state:
        return None
    return WorkflowError(
        kind=ErrorKind.CONFLICTING_STATE,
        state=current.current_state,
        details=[f"read version {snapshot.version}, stored version {current.version}"],
    )


class InstanceRepository(Protocol):
    """Persistence seam the caller composes around the engine."""

    def load_instance(self, entity_id: str) -> WorkflowInstance:
        ...

    def save_instance(self, instance: WorkflowInstance) -> None:
        ...


class FiniteWorkflow:
    """A workflow definition bound to the engine's pure operations."""

    def __init__(self, definition: WorkflowDefinition):
        self.definition = definition
        self.logger = logger.bind(component="finite_workflow", workflow=definition.name)

    @property
    def name(self) -> str:
        return self.definition.name

    def create(
        self,
        entity_id: str,
        actor: Actor,
        owner_id: Optional[str] = None,
        organization_id: Optional[str] = None,
        note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> WorkflowInstance:
        instance = create_instance(
            self.definition, entity_id, actor,
            owner_id=owner_id, organization_id=organization_id, note=note, now=now,
        )
        self.logger.info("Workflow instance created", entity_id=entity_id, state=instance.current_state)
        return instance

    def transition(
        self,
        instance: WorkflowInstance,
        action: StateLike,
        actor: Actor,
        note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TransitionResult:
        return transition(self.definition, instance, action, actor, note=note, now=now)

    def request_state(
        self,
        instance: WorkflowInstance,
        action: StateLike,
        actor: Actor,
        note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TransitionResult:
        return request_state(self.definition, instance, action, actor, note=note, now=now)

    def available_actions(self, instance: WorkflowInstance, actor: Actor) -> List[str]:
        return available_actions(self.definition, instance, actor)

    def is_terminal(self, instance: WorkflowInstance) -> bool:
        return self.definition.is_terminal(instance.current_state)
