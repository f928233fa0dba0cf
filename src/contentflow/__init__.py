"""contentflow: state engine for multi-stage content-production workflows.

Runs move through a closed vocabulary of states along a declarative
transition matrix. Every move is validated, versioned, and recorded in an
append-only audit trail; progress (stage index, status label) is derived
from the state, never stored.
"""

__version__ = "0.1.0"
