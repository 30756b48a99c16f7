"""Approval state machine and the review panel presentation rule."""

from studio.approval.states import ApprovalVerdict, ReviewState, review_state
from studio.approval.machine import ApprovalOutcome, ApprovalStateMachine
from studio.approval.panel import PanelKind, ReviewPanel, review_panel

__all__ = [
    "ApprovalVerdict",
    "ReviewState",
    "review_state",
    "ApprovalOutcome",
    "ApprovalStateMachine",
    "PanelKind",
    "ReviewPanel",
    "review_panel",
]
