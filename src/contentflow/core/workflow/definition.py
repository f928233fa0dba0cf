# src/contentflow/core/workflow/definition.py
"""Declarative definition of the content-production workflow.

This table is the single configuration source for stage membership,
stage ordering, and (via WorkflowGraph.build) the transition matrix.
Stage indices are positions in WORKFLOW_STAGES - to insert a stage,
insert a definition; nothing else in the codebase names an index.
"""

from contentflow.contracts.enums import Phase, StageKey, TerminalAnchor, WorkflowState
from contentflow.core.workflow.graph import WorkflowGraph
from contentflow.core.workflow.models import StageDefinition, TerminalDefinition

S = WorkflowState

WORKFLOW_STAGES: tuple[StageDefinition, ...] = (
    StageDefinition(
        key=StageKey.ICP,
        title="ICP Generation",
        states=(
            (S.CREATED, Phase.INITIAL),
            (S.ICP_PENDING, Phase.PENDING),
            (S.ICP_PROCESSING, Phase.PROCESSING),
            (S.ICP_COMPLETED, Phase.COMPLETED),
            (S.ICP_FAILED, Phase.FAILED),
        ),
    ),
    StageDefinition(
        key=StageKey.COMPETITORS,
        title="Competitor Analysis",
        states=(
            (S.COMPETITOR_PENDING, Phase.PENDING),
            (S.COMPETITOR_PROCESSING, Phase.PROCESSING),
            (S.COMPETITOR_COMPLETED, Phase.COMPLETED),
            (S.COMPETITOR_FAILED, Phase.FAILED),
        ),
    ),
    StageDefinition(
        key=StageKey.KEYWORDS,
        title="Seed Keyword Review",
        states=(
            (S.SEED_REVIEW_PENDING, Phase.PENDING),
            (S.SEED_REVIEW_COMPLETED, Phase.COMPLETED),
        ),
        human_gate=True,
    ),
    StageDefinition(
        key=StageKey.TOPICS,
        title="Keyword Clustering",
        states=(
            (S.CLUSTERING_PENDING, Phase.PENDING),
            (S.CLUSTERING_PROCESSING, Phase.PROCESSING),
            (S.CLUSTERING_COMPLETED, Phase.COMPLETED),
            (S.CLUSTERING_FAILED, Phase.FAILED),
        ),
    ),
    StageDefinition(
        key=StageKey.VALIDATION,
        title="Cluster Validation",
        states=(
            (S.VALIDATION_PENDING, Phase.PENDING),
            (S.VALIDATION_PROCESSING, Phase.PROCESSING),
            (S.VALIDATION_COMPLETED, Phase.COMPLETED),
            (S.VALIDATION_FAILED, Phase.FAILED),
        ),
    ),
    StageDefinition(
        key=StageKey.ARTICLE,
        title="Article Generation",
        states=(
            (S.ARTICLE_PENDING, Phase.PENDING),
            (S.ARTICLE_PROCESSING, Phase.PROCESSING),
            (S.ARTICLE_COMPLETED, Phase.COMPLETED),
            (S.ARTICLE_FAILED, Phase.FAILED),
        ),
    ),
    StageDefinition(
        key=StageKey.PUBLISH,
        title="Publishing",
        states=(
            (S.PUBLISH_PENDING, Phase.PENDING),
            (S.PUBLISH_PROCESSING, Phase.PROCESSING),
            (S.PUBLISH_COMPLETED, Phase.COMPLETED),
            (S.PUBLISH_FAILED, Phase.FAILED),
        ),
    ),
)

# Cancelled resets navigation to the first stage; completion reports the last.
WORKFLOW_TERMINALS: tuple[TerminalDefinition, ...] = (
    TerminalDefinition(state=S.CANCELLED, anchor=TerminalAnchor.FIRST_STAGE, label="cancelled"),
    TerminalDefinition(state=S.FULLY_COMPLETED, anchor=TerminalAnchor.LAST_STAGE, label="completed"),
)


def build_default_workflow() -> WorkflowGraph:
    """Build the production workflow graph from the tables above."""
    return WorkflowGraph.build(
        WORKFLOW_STAGES,
        WORKFLOW_TERMINALS,
        initial_state=S.CREATED,
        final_state=S.FULLY_COMPLETED,
        cancel_state=S.CANCELLED,
    )


# Loaded once, read-only process-wide.
DEFAULT_WORKFLOW: WorkflowGraph = build_default_workflow()
