from .collector import CandidateCollector
from .engine import ExtractionEngine, ExtractionState
from .interaction import PLAY_SELECTORS, InteractionCampaign
from .network import BLOCKED_RESOURCE_TYPES, NetworkObserver
from .settings import ExtractionSettings
from .steps import StepOutcome, run_step

__all__ = [
    "BLOCKED_RESOURCE_TYPES",
    "CandidateCollector",
    "ExtractionEngine",
    "ExtractionSettings",
    "ExtractionState",
    "InteractionCampaign",
    "NetworkObserver",
    "PLAY_SELECTORS",
    "StepOutcome",
    "run_step",
]
