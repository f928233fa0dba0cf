"""All states, stage keys, and phases used across subsystem boundaries.

CRITICAL: WorkflowState is the closed vocabulary of the engine. A run's
persisted state is always one of these values. There is no "unknown" -
a value read from the database that is not in this enum crashes the
repository layer.
"""

from enum import StrEnum


class WorkflowState(StrEnum):
    """Every position a workflow run can occupy.

    Stored in the database (workflow_runs.state, workflow_transitions.*_state).
    Grouped into stages by core.workflow.definition; the grouping is the only
    place that decides which stage a state belongs to.
    """

    CREATED = "created"

    ICP_PENDING = "icp_pending"
    ICP_PROCESSING = "icp_processing"
    ICP_COMPLETED = "icp_completed"
    ICP_FAILED = "icp_failed"

    COMPETITOR_PENDING = "competitor_pending"
    COMPETITOR_PROCESSING = "competitor_processing"
    COMPETITOR_COMPLETED = "competitor_completed"
    COMPETITOR_FAILED = "competitor_failed"

    # Human-in-the-loop gate: approval moves pending straight to completed
    SEED_REVIEW_PENDING = "seed_review_pending"
    SEED_REVIEW_COMPLETED = "seed_review_completed"

    CLUSTERING_PENDING = "clustering_pending"
    CLUSTERING_PROCESSING = "clustering_processing"
    CLUSTERING_COMPLETED = "clustering_completed"
    CLUSTERING_FAILED = "clustering_failed"

    VALIDATION_PENDING = "validation_pending"
    VALIDATION_PROCESSING = "validation_processing"
    VALIDATION_COMPLETED = "validation_completed"
    VALIDATION_FAILED = "validation_failed"

    ARTICLE_PENDING = "article_pending"
    ARTICLE_PROCESSING = "article_processing"
    ARTICLE_COMPLETED = "article_completed"
    ARTICLE_FAILED = "article_failed"

    PUBLISH_PENDING = "publish_pending"
    PUBLISH_PROCESSING = "publish_processing"
    PUBLISH_COMPLETED = "publish_completed"
    PUBLISH_FAILED = "publish_failed"

    # Terminal
    CANCELLED = "cancelled"
    FULLY_COMPLETED = "fully_completed"


class StageKey(StrEnum):
    """Symbolic stage names.

    Semantic meaning only - ordering (and therefore the stage index shown
    to users) comes from the position of the stage in the workflow
    definition, never from this enum.
    """

    ICP = "icp"
    COMPETITORS = "competitors"
    KEYWORDS = "keywords"
    TOPICS = "topics"
    VALIDATION = "validation"
    ARTICLE = "article"
    PUBLISH = "publish"


class Phase(StrEnum):
    """Sub-state of a state within its stage.

    INITIAL: The run exists but no stage has been entered yet
    PENDING: Stage is queued, waiting for a worker (or a human)
    PROCESSING: A worker is executing the stage
    COMPLETED: The stage finished successfully
    FAILED: The stage failed; retry re-enters PROCESSING
    """

    INITIAL = "initial"
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class TerminalAnchor(StrEnum):
    """Which stage a terminal state reports as its stage index."""

    FIRST_STAGE = "first_stage"
    LAST_STAGE = "last_stage"
