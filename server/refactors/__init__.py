"""
Refactors Package

This package contains the refactors offered at a cursor position.
Refactors are automatically discovered and registered when this package is imported
by the registry.

To add a new refactor:
1. Create a Python file in this directory (e.g., my_refactor.py)
2. Define your refactor class implementing the Refactor protocol
3. Create a REFACTORS list containing your refactor instance, or call register(refactor)
4. The refactor will be auto-discovered by refactor_engine.registry.discover_refactors()

Example refactor structure:

```python
from refactor_engine.types import ApplicableRefactorInfo, RefactorActionInfo, RefactorMeta

class MyRefactor:
    meta = RefactorMeta(
        name="My refactor",
        description="Rewrites the node under the cursor",
    )

    def get_available_actions(self, ctx):
        return [ApplicableRefactorInfo(name=self.meta.name, description=self.meta.description,
                                       actions=[RefactorActionInfo("Do it", "Do it")])]

    def get_edits_for_action(self, ctx, action_name):
        ...

# Register the refactor
REFACTORS = [MyRefactor()]
```
"""

from typing import List

from refactor_engine.registry import register_refactor
from refactor_engine.types import Refactor

# Refactors registered at runtime through register(); module-level REFACTORS
# lists are picked up by discovery.
REFACTORS: List[Refactor] = []


def register(refactor: Refactor) -> None:
    """
    Register a refactor in the global registry.

    Args:
        refactor: Refactor instance to register
    """
    register_refactor(refactor.meta.name, refactor)
    REFACTORS.append(refactor)
