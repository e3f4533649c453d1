"""swapkeeper.trade — the escrow state machine, its events and receipts."""

from swapkeeper.trade.controller import Capability as Capability
from swapkeeper.trade.controller import OperationResult as OperationResult
from swapkeeper.trade.controller import TradeController as TradeController
from swapkeeper.trade.controller import TradeSnapshot as TradeSnapshot
from swapkeeper.trade.events import TradeEvent as TradeEvent
from swapkeeper.trade.events import TradeEventKind as TradeEventKind
from swapkeeper.trade.events import TradeReceipt as TradeReceipt
from swapkeeper.trade.state import OPEN_FOR_DEPOSIT as OPEN_FOR_DEPOSIT
from swapkeeper.trade.state import TERMINAL as TERMINAL
from swapkeeper.trade.state import TRADE_TRANSITIONS as TRADE_TRANSITIONS
from swapkeeper.trade.state import TradeState as TradeState
from swapkeeper.trade.state import check_transition as check_transition
from swapkeeper.trade.state import recompute_state as recompute_state
