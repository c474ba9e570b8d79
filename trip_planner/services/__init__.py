"""Services layer - Planning logic built on top of the ports."""

from .constraint_resolver import ConstraintExtractor, ConstraintResolver
from .edit_service import EditApplier, EditInterpreter, day_fingerprint
from .evaluations import evaluate_edit_correctness, evaluate_feasibility, evaluate_grounding
from .explanation import ExplanationGenerator
from .intent_service import IntentClassifier
from .itinerary_builder import ItineraryBuilder
from .planner import EditResult, PlannerService, PlanOutcome
from .poi_search import POISearchService
from .tips import TipsService

__all__ = [
    "ConstraintExtractor",
    "ConstraintResolver",
    "EditApplier",
    "EditInterpreter",
    "day_fingerprint",
    "evaluate_edit_correctness",
    "evaluate_feasibility",
    "evaluate_grounding",
    "ExplanationGenerator",
    "IntentClassifier",
    "ItineraryBuilder",
    "EditResult",
    "PlannerService",
    "PlanOutcome",
    "POISearchService",
    "TipsService",
]
