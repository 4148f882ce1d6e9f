from .feasibility import FeasibilityEval
from .edit_correctness import EditCorrectnessEval
from .grounding import GroundingEval
from .runner import EvaluationRunner

__all__ = [
    "FeasibilityEval",
    "EditCorrectnessEval",
    "GroundingEval",
    "EvaluationRunner",
]
