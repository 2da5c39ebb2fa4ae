from src.draft_room.auto_pick import AutoPickSelector
from src.draft_room.broadcast import (
    BroadcastGateway,
    FireAndForgetPublisher,
    InProcessBroadcastGateway,
    PickMade,
)
from src.draft_room.draft_coordinator import DraftCoordinator
from src.draft_room.draft_service import DraftService
from src.draft_room.errors import DraftError, ErrorKind
from src.draft_room.models import (
    CoordinatorState,
    DraftPick,
    DraftSession,
    DraftSlot,
    League,
    LeagueStatus,
    Player,
    Team,
)
from src.draft_room.pick_order import build_draft_order, pick_position
from src.draft_room.pick_store import (
    Conflict,
    InMemoryPickStore,
    JsonPickStore,
    RetryingPickStore,
)
from src.draft_room.pick_timer import PickTimer
from src.draft_room.turn_validator import TurnValidator

__all__ = [
    "AutoPickSelector",
    "BroadcastGateway",
    "Conflict",
    "CoordinatorState",
    "DraftCoordinator",
    "DraftError",
    "DraftPick",
    "DraftService",
    "DraftSession",
    "DraftSlot",
    "ErrorKind",
    "FireAndForgetPublisher",
    "InMemoryPickStore",
    "InProcessBroadcastGateway",
    "JsonPickStore",
    "League",
    "LeagueStatus",
    "PickMade",
    "PickTimer",
    "Player",
    "RetryingPickStore",
    "Team",
    "TurnValidator",
    "build_draft_order",
    "pick_position",
]
