from .bridge import SessionBridge
from .adapter import UpstreamAdapter
from .coordinator import TranscriptionCoordinator
from .envelope import OtherMessage, SetupComplete, TranscriptFragment

__all__ = [
    "OtherMessage",
    "SessionBridge",
    "SetupComplete",
    "TranscriptFragment",
    "TranscriptionCoordinator",
    "UpstreamAdapter",
]
