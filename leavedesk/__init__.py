"""LeaveDesk — leave requests, approvals, balances and supervisor reports."""

__version__ = "1.0.0"
