"""Registries for learners and serialization hooks.

Add an implementation, register it, and the rest of the package picks it up:

    @register_learner(MyConfig)
    class MyLearner: ...

    register_hooks("my_algo")(MyHooks())

Built-ins are registered lazily on first lookup.
"""

from .learners import get_learner, list_algos, register_learner
from .hooks import (
    PASSTHROUGH,
    get_hooks,
    register_hooks,
    restore_fitresult,
    save_fitresult,
    unregister_hooks,
)
