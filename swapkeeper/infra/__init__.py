"""swapkeeper.infra — configuration, event bus protocol, and in-memory adapter."""

from swapkeeper.infra.config import TOPIC_TRADE_RECEIPTS as TOPIC_TRADE_RECEIPTS
from swapkeeper.infra.config import TOPICS as TOPICS
from swapkeeper.infra.config import EscrowConfig as EscrowConfig
from swapkeeper.infra.config import TemporalConfig as TemporalConfig
from swapkeeper.infra.memory_adapter import InMemoryEventBus as InMemoryEventBus
from swapkeeper.infra.protocols import EventBus as EventBus
