"""Execution engine: type rules, marshalling and the step loop."""

from .natural import Marshaller
from .outcome import Continue, Done, Fault
from .program import Program, RunResult
from .rules import RuleTable, TypeRule, build_rule_table

__all__ = [
    "Continue",
    "Done",
    "Fault",
    "Marshaller",
    "Program",
    "RuleTable",
    "RunResult",
    "TypeRule",
    "build_rule_table",
]
