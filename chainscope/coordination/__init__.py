"""
coordination - Failover Policy
==============================

Question this layer answers:
"Which endpoint do we ask next, and when?"

This is NOT orchestration (which network runs when).
This is NOT the FSM (it only counts attempts).
This IS the retry and fallback rules, explicit and testable.
"""

from .failover import FailoverInvoker, FailoverPolicy, InvocationResult

__all__ = ["FailoverInvoker", "FailoverPolicy", "InvocationResult"]
