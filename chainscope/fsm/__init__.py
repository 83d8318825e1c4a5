"""
fsm - State Machine Safety Layer
================================

Question this layer answers:
"Are we allowed to try again?"

FSM enforces:
- At most max_attempts calls per endpoint
- A fixed wait between attempts, never after the last one
- Pipeline steps in order, with FAILED and DONE terminal

```python
if attempts == max_attempts:
    state = EXHAUSTED
```

This is what GUARANTEES a dead endpoint is eventually abandoned.
"""

from .state_machine import (
    AttemptFSM,
    AttemptState,
    PipelineFSM,
    PipelineState,
)

__all__ = ["AttemptFSM", "AttemptState", "PipelineFSM", "PipelineState"]
