"""swapkeeper.gateway — custody movements against external registries."""

from swapkeeper.gateway.transfer import NATIVE_REGISTRY as NATIVE_REGISTRY
from swapkeeper.gateway.transfer import AssetTransferGateway as AssetTransferGateway
from swapkeeper.gateway.transfer import Transfer as Transfer
from swapkeeper.gateway.transfer import TransferFamily as TransferFamily
