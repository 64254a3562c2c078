"""Payroll Workflows.

State machine for the approval of a stored monthly payroll.  The Unsaved
state (no row) is not part of the machine: generating a payroll creates
the row in ``pending`` and deleting it removes the row.
"""

from payroll_kernel.domain.workflow import Guard, Transition, Workflow
from payroll_kernel.logging_config import get_logger

logger = get_logger("modules.payroll.workflows")

PENDING = "pending"
APPROVED = "approved"

APPROVE = "approve"
UNAPPROVE = "unapprove"


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

PAYROLL_PERSISTED = Guard(
    name="payroll_persisted",
    description="A payroll row exists for the employee and period",
)

logger.info(
    "payroll_workflow_guards_defined",
    extra={"guards": [PAYROLL_PERSISTED.name]},
)


# -----------------------------------------------------------------------------
# Payroll Approval Workflow
# -----------------------------------------------------------------------------

PAYROLL_APPROVAL_WORKFLOW = Workflow(
    name="payroll_approval",
    description="Monthly payroll approval (pending <-> approved, no terminal state)",
    initial_state=PENDING,
    states=(PENDING, APPROVED),
    transitions=(
        Transition(PENDING, APPROVED, action=APPROVE, guard=PAYROLL_PERSISTED, stamps_approval=True),
        Transition(APPROVED, PENDING, action=UNAPPROVE, guard=PAYROLL_PERSISTED, clears_approval=True),
    ),
)

logger.info(
    "payroll_workflow_registered",
    extra={
        "workflow_name": PAYROLL_APPROVAL_WORKFLOW.name,
        "state_count": len(PAYROLL_APPROVAL_WORKFLOW.states),
        "transition_count": len(PAYROLL_APPROVAL_WORKFLOW.transitions),
    },
)
