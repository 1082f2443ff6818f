"""
Git Flow Hooks

Enforces a Git-Flow branching and commit discipline from inside Git hooks
and runs a configurable, prioritized set of quality-gate commands around
each hook, aggregating their results into a single pass/fail verdict.
"""

__version__ = "1.0.0"
__author__ = "Git Flow Hooks Team"
