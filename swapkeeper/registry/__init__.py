"""swapkeeper.registry — external asset registry protocols and in-memory doubles."""

from swapkeeper.registry.memory_adapter import (
    InMemoryFungibleRegistry as InMemoryFungibleRegistry,
)
from swapkeeper.registry.memory_adapter import (
    InMemoryNativeCurrency as InMemoryNativeCurrency,
)
from swapkeeper.registry.memory_adapter import (
    InMemoryNonFungibleRegistry as InMemoryNonFungibleRegistry,
)
from swapkeeper.registry.memory_adapter import (
    InMemoryRegistryDirectory as InMemoryRegistryDirectory,
)
from swapkeeper.registry.protocols import FungibleRegistry as FungibleRegistry
from swapkeeper.registry.protocols import NativeCurrency as NativeCurrency
from swapkeeper.registry.protocols import NonFungibleRegistry as NonFungibleRegistry
from swapkeeper.registry.protocols import RegistryDirectory as RegistryDirectory
from swapkeeper.registry.protocols import RegistryRejection as RegistryRejection
