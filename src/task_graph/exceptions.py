"""Error taxonomy for the task graph.

  ConfigurationError   — insufficient startup context, raised at construction
  UnknownOperatorError — calculator received an operator it does not support
  PlanValidationError  — planner produced a step for an unregistered agent
  ProtocolError        — malformed or unexpected frame on the bridge
"""


class TaskGraphError(Exception):
    """Base class for all task graph errors."""


class ConfigurationError(TaskGraphError):
    pass


class UnknownOperatorError(TaskGraphError, ValueError):
    def __init__(self, operator: str):
        super().__init__(f"Unknown operator: {operator}")
        self.operator = operator


class PlanValidationError(TaskGraphError):
    pass


class ProtocolError(TaskGraphError):
    pass
