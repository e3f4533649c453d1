"""swapkeeper.ledger — committed-asset and native side-balance bookkeeping."""

from swapkeeper.ledger.assets import Asset as Asset
from swapkeeper.ledger.assets import AssetKind as AssetKind
from swapkeeper.ledger.assets import AssetLedger as AssetLedger
from swapkeeper.ledger.assets import AssetRef as AssetRef
from swapkeeper.ledger.assets import FungibleAsset as FungibleAsset
from swapkeeper.ledger.assets import NonFungibleAsset as NonFungibleAsset
from swapkeeper.ledger.assets import Participant as Participant
from swapkeeper.ledger.assets import Role as Role
from swapkeeper.ledger.native import NativeSideLedger as NativeSideLedger
