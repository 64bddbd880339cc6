# Store modules import core.errors; keep this package free of store imports.
from .errors import OmoconfError, ValidationError
from .intent_router import IntentRouter, Route, classify
from .params import ActionParams, extract
from .policy import MutationPolicy, PolicyResult, is_safe_config_key

__all__ = [
  "OmoconfError",
  "ValidationError",
  "IntentRouter",
  "Route",
  "classify",
  "ActionParams",
  "extract",
  "MutationPolicy",
  "PolicyResult",
  "is_safe_config_key",
]
