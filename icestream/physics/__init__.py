"""Physics of the ice-stream box model: basal stresses and the rate law."""
from . import rates, stress
from .rates import RateLaw, box_model_rate, classify_regime

__all__ = [
    "rates",
    "stress",
    "RateLaw",
    "box_model_rate",
    "classify_regime",
]
