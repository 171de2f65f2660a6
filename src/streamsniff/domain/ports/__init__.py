from .admission import AdmissionQueuePort, AdmissionTicketPort
from .browser_pool import BrowserHandle, BrowserPoolPort
from .extraction_engine import ExtractionEnginePort
from .result_cache import ResultCachePort

__all__ = [
    "AdmissionQueuePort",
    "AdmissionTicketPort",
    "BrowserHandle",
    "BrowserPoolPort",
    "ExtractionEnginePort",
    "ResultCachePort",
]
