# src/contentflow/core/workflow/graph.py
"""WorkflowGraph - the immutable state configuration and every query over it.

The graph bundles the three pieces the validator checks together:
- Vocabulary: the closed set of states
- Stage table: which stage (and phase) each state belongs to
- Transition matrix: state -> frozenset of permitted successors

All methods are pure lookups over data fixed at construction, so a single
instance is safely shared by every thread in the process.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

import networkx as nx

from contentflow.contracts.enums import Phase, TerminalAnchor, WorkflowState
from contentflow.contracts.errors import UnmappedStateError
from contentflow.contracts.progress import StepView
from contentflow.core.workflow.models import StageDefinition, TerminalDefinition


def build_transition_matrix(
    stages: Sequence[StageDefinition],
    *,
    final_state: WorkflowState,
    cancel_state: WorkflowState,
    terminal_states: Iterable[WorkflowState],
) -> dict[WorkflowState, frozenset[WorkflowState]]:
    """Generate the legal transition matrix from the stage table.

    Per stage:
        initial -> pending (only the stage holding the initial state)
        pending -> processing, or pending -> completed for a human gate
        processing -> completed | failed
        failed -> processing (retry re-enters the same stage)
        completed -> next stage's pending, or final_state after the last stage

    Every non-terminal state may additionally move to cancel_state.
    Terminal states get an empty successor set.
    """
    terminal = frozenset(terminal_states)
    edges: dict[WorkflowState, set[WorkflowState]] = {}
    for stage in stages:
        for state in stage.state_names:
            edges.setdefault(state, set())
    for state in terminal:
        edges.setdefault(state, set())

    def add(source: WorkflowState | None, target: WorkflowState | None) -> None:
        if source is None or target is None:
            return
        edges.setdefault(source, set()).add(target)

    for position, stage in enumerate(stages):
        pending = stage.state_for(Phase.PENDING)
        processing = stage.state_for(Phase.PROCESSING)
        completed = stage.state_for(Phase.COMPLETED)
        failed = stage.state_for(Phase.FAILED)

        add(stage.state_for(Phase.INITIAL), pending)
        if processing is None:
            add(pending, completed)
        else:
            add(pending, processing)
            add(processing, completed)
            add(processing, failed)
            add(failed, processing)

        if position + 1 < len(stages):
            add(completed, stages[position + 1].state_for(Phase.PENDING))
        else:
            add(completed, final_state)

    for state, successors in edges.items():
        if state not in terminal:
            successors.add(cancel_state)

    return {state: frozenset(successors) for state, successors in edges.items()}


@dataclass(frozen=True, eq=False)
class WorkflowGraph:
    """Immutable workflow configuration.

    Use WorkflowGraph.build() to derive the transition matrix from the
    stage table. The constructor accepts an explicit matrix so broken
    configurations can be assembled for validator tests.
    """

    vocabulary: frozenset[WorkflowState]
    stages: tuple[StageDefinition, ...]
    terminals: tuple[TerminalDefinition, ...]
    transitions: Mapping[WorkflowState, frozenset[WorkflowState]]
    initial_state: WorkflowState
    final_state: WorkflowState
    cancel_state: WorkflowState
    _stage_lookup: Mapping[WorkflowState, tuple[int, Phase]] = field(init=False, repr=False)
    _terminal_lookup: Mapping[WorkflowState, TerminalDefinition] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "transitions", MappingProxyType(dict(self.transitions)))

        # First assignment wins. Duplicates are a configuration error that
        # the validator reports; lookups must still be deterministic.
        stage_lookup: dict[WorkflowState, tuple[int, Phase]] = {}
        for position, stage in enumerate(self.stages, start=1):
            for state, phase in stage.states:
                stage_lookup.setdefault(state, (position, phase))
        terminal_lookup: dict[WorkflowState, TerminalDefinition] = {}
        for terminal in self.terminals:
            terminal_lookup.setdefault(terminal.state, terminal)

        object.__setattr__(self, "_stage_lookup", MappingProxyType(stage_lookup))
        object.__setattr__(self, "_terminal_lookup", MappingProxyType(terminal_lookup))

    @classmethod
    def build(
        cls,
        stages: Sequence[StageDefinition],
        terminals: Sequence[TerminalDefinition],
        *,
        initial_state: WorkflowState,
        final_state: WorkflowState,
        cancel_state: WorkflowState,
        vocabulary: Iterable[WorkflowState] | None = None,
    ) -> WorkflowGraph:
        """Build a graph whose transition matrix is generated from the stage table."""
        transitions = build_transition_matrix(
            stages,
            final_state=final_state,
            cancel_state=cancel_state,
            terminal_states=[t.state for t in terminals],
        )
        return cls(
            vocabulary=frozenset(vocabulary) if vocabulary is not None else frozenset(WorkflowState),
            stages=tuple(stages),
            terminals=tuple(terminals),
            transitions=transitions,
            initial_state=initial_state,
            final_state=final_state,
            cancel_state=cancel_state,
        )

    # === Transition matrix ===

    def next_states(self, state: WorkflowState) -> frozenset[WorkflowState]:
        """Permitted successors of a state."""
        try:
            return self.transitions[state]
        except KeyError:
            raise UnmappedStateError(state) from None

    def is_legal_transition(self, source: WorkflowState, target: WorkflowState) -> bool:
        if source not in self.transitions:
            return False
        return target in self.transitions[source]

    def is_terminal(self, state: WorkflowState) -> bool:
        """True iff the state has no permitted successors."""
        return not self.next_states(state)

    # === Step derivation ===

    @property
    def stage_count(self) -> int:
        return len(self.stages)

    @property
    def terminal_states(self) -> frozenset[WorkflowState]:
        return frozenset(self._terminal_lookup)

    def stage_index_of(self, state: WorkflowState) -> int:
        """1-based stage index derived from the owning stage's position."""
        terminal = self._terminal_lookup.get(state)
        if terminal is not None:
            return 1 if terminal.anchor == TerminalAnchor.FIRST_STAGE else len(self.stages)
        entry = self._stage_lookup.get(state)
        if entry is None:
            raise UnmappedStateError(state)
        return entry[0]

    def phase_of(self, state: WorkflowState) -> Phase | None:
        """Phase within the owning stage; None for terminal states."""
        if state in self._terminal_lookup:
            return None
        entry = self._stage_lookup.get(state)
        if entry is None:
            raise UnmappedStateError(state)
        return entry[1]

    def status_label_of(self, state: WorkflowState) -> str:
        terminal = self._terminal_lookup.get(state)
        if terminal is not None:
            return terminal.label
        index = self.stage_index_of(state)
        return f"step_{index}_{self.stages[index - 1].key}"

    def is_processing(self, state: WorkflowState) -> bool:
        return self.phase_of(state) == Phase.PROCESSING

    def is_failed(self, state: WorkflowState) -> bool:
        return self.phase_of(state) == Phase.FAILED

    def is_completed(self, state: WorkflowState) -> bool:
        """True only when the whole run has completed."""
        self.stage_index_of(state)  # unknown states fail fast
        return state == self.final_state

    def is_stage_completed(self, state: WorkflowState) -> bool:
        return self.phase_of(state) == Phase.COMPLETED

    def can_access_stage(self, current_state: WorkflowState, target_stage_index: int) -> bool:
        """Whether a user may navigate to a stage given the run's state.

        Cancelled runs cannot access any stage.
        """
        if current_state == self.cancel_state:
            return False
        return 1 <= target_stage_index <= self.stage_index_of(current_state)

    def next_stage_index(self, state: WorkflowState) -> int | None:
        """Stage after the current one; None at the final stage or in a terminal state."""
        if state in self._terminal_lookup:
            return None
        index = self.stage_index_of(state)
        return index + 1 if index < len(self.stages) else None

    def previous_stage_index(self, state: WorkflowState) -> int | None:
        index = self.stage_index_of(state)
        return index - 1 if index > 1 else None

    def stage_at(self, stage_index: int) -> StageDefinition:
        if not 1 <= stage_index <= len(self.stages):
            raise ValueError(f"Stage index out of range: {stage_index} (valid: 1..{len(self.stages)})")
        return self.stages[stage_index - 1]

    def stage_title(self, stage_index: int) -> str:
        return self.stage_at(stage_index).title

    def states_for_stage(self, stage_index: int) -> tuple[WorkflowState, ...]:
        return self.stage_at(stage_index).state_names

    def describe(self, state: WorkflowState) -> StepView:
        """Bundle every derived output for one state."""
        index = self.stage_index_of(state)
        stage = self.stages[index - 1]
        phase = self.phase_of(state)
        return StepView(
            state=WorkflowState(state),
            stage_index=index,
            stage_key=stage.key,
            stage_title=stage.title,
            status_label=self.status_label_of(state),
            phase=phase,
            total_stages=len(self.stages),
            is_processing=phase == Phase.PROCESSING,
            is_failed=phase == Phase.FAILED,
            is_completed=state == self.final_state,
            is_terminal=self.is_terminal(state),
        )

    # === Graph algorithms ===

    def to_networkx(self) -> nx.DiGraph[WorkflowState]:
        """Return the transition matrix as a NetworkX digraph.

        Nodes are added in sorted order so traversal results are stable
        across interpreter runs.
        """
        graph: nx.DiGraph[WorkflowState] = nx.DiGraph()
        graph.add_nodes_from(sorted(self.vocabulary | set(self.transitions)))
        for source in sorted(self.transitions):
            for target in sorted(self.transitions[source]):
                graph.add_edge(source, target)
        return graph

    def path_between(self, source: WorkflowState, target: WorkflowState) -> list[WorkflowState] | None:
        """Shortest legal path from source to target (inclusive), or None."""
        try:
            path: list[WorkflowState] = nx.shortest_path(self.to_networkx(), source, target)
        except (nx.NetworkXNoPath, nx.NodeNotFound):
            return None
        return path
