from .extraction import (
    NO_STREAMS_FOUND_MESSAGE,
    CandidateStream,
    CandidateSubtitle,
    DiscoveryChannel,
    ExtractionRequest,
    ExtractionResult,
    FailureKind,
    Fingerprint,
    ObservedNetworkEvent,
    Viewport,
)

__all__ = [
    "NO_STREAMS_FOUND_MESSAGE",
    "CandidateStream",
    "CandidateSubtitle",
    "DiscoveryChannel",
    "ExtractionRequest",
    "ExtractionResult",
    "FailureKind",
    "Fingerprint",
    "ObservedNetworkEvent",
    "Viewport",
]
