from .engine import Policy, Resolution, resolve_action
from .orchestrator import resolve_all

__all__ = ["Policy", "Resolution", "resolve_action", "resolve_all"]

# Import all strategy modules so they register themselves via @register_strategy.
# Registration order is the order strategies are tried.
from . import requested
from . import same_major
from . import latest
