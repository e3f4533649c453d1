"""swapkeeper.workflow -- Temporal.io hosting of escrow trades."""

from swapkeeper.workflow.desk import TradeDesk as TradeDesk
from swapkeeper.workflow.types import CommandKind as CommandKind
from swapkeeper.workflow.types import CommandOutput as CommandOutput
from swapkeeper.workflow.types import EscrowInput as EscrowInput
from swapkeeper.workflow.types import EscrowResult as EscrowResult
from swapkeeper.workflow.types import OpenTradeOutput as OpenTradeOutput
from swapkeeper.workflow.types import ParticipantTerms as ParticipantTerms
from swapkeeper.workflow.types import ReleaseOutput as ReleaseOutput
from swapkeeper.workflow.types import TradeCommand as TradeCommand
