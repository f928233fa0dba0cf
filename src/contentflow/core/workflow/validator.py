# src/contentflow/core/workflow/validator.py
"""Startup-time invariant checks over the workflow configuration.

Validates the Vocabulary + Stage table + Transition matrix as a whole.
A broken graph corrupts every tenant's running pipeline, so this is
fail-fast: assert_valid_workflow_graph() raises ConfigurationError and the
service must not start.

Checks:
1. Coverage - every vocabulary state is in a stage or declared terminal
2. Uniqueness - no state is assigned twice (stage/stage or stage/terminal)
3. Contiguity - stage indices, sorted, run 1..N with no gaps
4. Matrix closure - every matrix source/target is in the vocabulary and
   every vocabulary state has a matrix row
5. Terminality - terminal states have no successors, and every state with
   no successors is declared terminal
6. Structure - stage shapes, no self-transitions, initial/final/cancel roles,
   reachability from the initial state and to the final state
"""

from __future__ import annotations

from collections import Counter

import networkx as nx

from contentflow.contracts.enums import Phase, WorkflowState
from contentflow.contracts.errors import ConfigurationError
from contentflow.core.logging import get_logger
from contentflow.core.workflow.graph import WorkflowGraph

logger = get_logger(__name__)

_AUTOMATED_STAGE_PHASES = frozenset({Phase.PENDING, Phase.PROCESSING, Phase.COMPLETED, Phase.FAILED})
_HUMAN_GATE_PHASES = frozenset({Phase.PENDING, Phase.COMPLETED})


def _sorted(states: set[WorkflowState] | frozenset[WorkflowState]) -> list[str]:
    return sorted(str(s) for s in states)


def _check_coverage(graph: WorkflowGraph) -> list[str]:
    assigned = {state for stage in graph.stages for state in stage.state_names}
    assigned |= {t.state for t in graph.terminals}
    uncovered = graph.vocabulary - assigned
    errors = []
    if uncovered:
        errors.append(f"Uncovered states (not in any stage or terminal mapping): {', '.join(_sorted(uncovered))}")
    unknown = assigned - graph.vocabulary
    if unknown:
        errors.append(f"Stage/terminal mappings reference states outside the vocabulary: {', '.join(_sorted(unknown))}")
    return errors


def _check_uniqueness(graph: WorkflowGraph) -> list[str]:
    owners: dict[WorkflowState, list[str]] = {}
    for stage in graph.stages:
        for state in stage.state_names:
            owners.setdefault(state, []).append(f"stage '{stage.key}'")
    for terminal in graph.terminals:
        owners.setdefault(terminal.state, []).append("terminal mapping")

    errors = [
        f"Duplicate state assignment: '{state}' appears in {', '.join(places)}"
        for state, places in sorted(owners.items())
        if len(places) > 1
    ]

    key_counts = Counter(stage.key for stage in graph.stages)
    errors.extend(f"Duplicate stage key: '{key}' is defined {count} times" for key, count in sorted(key_counts.items()) if count > 1)
    return errors


def _check_contiguity(graph: WorkflowGraph) -> list[str]:
    if not graph.stages:
        return ["Workflow defines no stages"]

    errors = [
        f"Stage {position} ('{stage.key}') has no states, leaving a gap in stage indices"
        for position, stage in enumerate(graph.stages, start=1)
        if not stage.states
    ]

    indices = sorted({position for position, stage in enumerate(graph.stages, start=1) if stage.states})
    if indices and indices[0] != 1:
        errors.append(f"Stage indices must start at 1, first populated stage is {indices[0]}")
    for previous, current in zip(indices, indices[1:], strict=False):
        if current - previous != 1:
            errors.append(f"Stage index gap: missing stage between {previous} and {current}")
    return errors


def _check_stage_shapes(graph: WorkflowGraph) -> list[str]:
    errors = []
    for stage in graph.stages:
        phases = Counter(phase for _, phase in stage.states)
        repeated = sorted(str(phase) for phase, count in phases.items() if count > 1)
        if repeated:
            errors.append(f"Stage '{stage.key}' has more than one state for phase(s): {', '.join(repeated)}")
        present = set(phases) - {Phase.INITIAL}
        required = _HUMAN_GATE_PHASES if stage.human_gate else _AUTOMATED_STAGE_PHASES
        missing = sorted(str(p) for p in required - present)
        extra = sorted(str(p) for p in present - required)
        if missing:
            errors.append(f"Stage '{stage.key}' is missing phase(s): {', '.join(missing)}")
        if extra:
            kind = "human-gate" if stage.human_gate else "automated"
            errors.append(f"Stage '{stage.key}' ({kind}) must not define phase(s): {', '.join(extra)}")
    return errors


def _check_matrix_closure(graph: WorkflowGraph) -> list[str]:
    errors = []
    for source in sorted(graph.transitions):
        if source not in graph.vocabulary:
            errors.append(f"Transition matrix source '{source}' is not in the vocabulary")
        unknown_targets = graph.transitions[source] - graph.vocabulary
        if unknown_targets:
            errors.append(f"Transition matrix row '{source}' targets states outside the vocabulary: {', '.join(_sorted(unknown_targets))}")
    missing_rows = graph.vocabulary - set(graph.transitions)
    if missing_rows:
        errors.append(f"States with no row in the transition matrix: {', '.join(_sorted(missing_rows))}")
    return errors


def _check_terminality(graph: WorkflowGraph) -> list[str]:
    errors = []
    declared = graph.terminal_states
    for terminal in sorted(declared):
        successors = graph.transitions.get(terminal, frozenset())
        if successors:
            errors.append(f"Terminal state '{terminal}' must have no successors, found: {', '.join(_sorted(successors))}")
    dead_ends = {state for state, successors in graph.transitions.items() if not successors} - declared
    if dead_ends:
        errors.append(f"States with no successors that are not declared terminal: {', '.join(_sorted(dead_ends))}")
    return errors


def _check_roles(graph: WorkflowGraph) -> list[str]:
    errors = []
    declared = graph.terminal_states
    if graph.initial_state in declared:
        errors.append(f"Initial state '{graph.initial_state}' must not be terminal")
    if not any(graph.initial_state in stage.state_names for stage in graph.stages):
        errors.append(f"Initial state '{graph.initial_state}' is not assigned to any stage")
    if graph.final_state not in declared:
        errors.append(f"Final state '{graph.final_state}' must be declared terminal")
    if graph.cancel_state not in declared:
        errors.append(f"Cancel state '{graph.cancel_state}' must be declared terminal")
    self_loops = sorted(str(state) for state, successors in graph.transitions.items() if state in successors)
    if self_loops:
        errors.append(f"Self-transitions are not allowed: {', '.join(self_loops)}")
    return errors


def _check_reachability(graph: WorkflowGraph) -> list[str]:
    nx_graph = graph.to_networkx()
    errors = []

    if graph.initial_state in nx_graph:
        reachable = nx.descendants(nx_graph, graph.initial_state) | {graph.initial_state}
        unreachable = set(graph.vocabulary) - reachable
        if unreachable:
            errors.append(f"States unreachable from '{graph.initial_state}': {', '.join(_sorted(unreachable))}")

    if graph.final_state in nx_graph:
        can_finish = nx.ancestors(nx_graph, graph.final_state) | {graph.final_state}
        stuck = set(graph.vocabulary) - can_finish - graph.terminal_states
        if stuck:
            errors.append(f"Non-terminal states that cannot reach '{graph.final_state}': {', '.join(_sorted(stuck))}")
    return errors


def validate_workflow_graph(graph: WorkflowGraph) -> list[str]:
    """Run every structural check and return the violated invariants.

    Returns:
        Human-readable violations; empty when the configuration is valid
    """
    errors: list[str] = []
    errors.extend(_check_coverage(graph))
    errors.extend(_check_uniqueness(graph))
    errors.extend(_check_contiguity(graph))
    errors.extend(_check_stage_shapes(graph))
    errors.extend(_check_matrix_closure(graph))
    errors.extend(_check_terminality(graph))
    errors.extend(_check_roles(graph))
    errors.extend(_check_reachability(graph))
    return errors


def assert_valid_workflow_graph(graph: WorkflowGraph) -> None:
    """Validate the graph and abort initialization if it is broken.

    Raises:
        ConfigurationError: With every violation found
    """
    errors = validate_workflow_graph(graph)
    if errors:
        for error in errors:
            logger.error("workflow_graph_violation", violation=error)
        raise ConfigurationError(errors)
    logger.debug(
        "workflow_graph_validated",
        states=len(graph.vocabulary),
        stages=graph.stage_count,
        transitions=sum(len(successors) for successors in graph.transitions.values()),
    )
