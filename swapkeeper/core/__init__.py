"""swapkeeper.core — error values, Result, refined types, canonical serialization."""

from swapkeeper.core.errors import (
    AuthorizationError as AuthorizationError,
)
from swapkeeper.core.errors import (
    ExternalCallFailure as ExternalCallFailure,
)
from swapkeeper.core.errors import (
    FieldViolation as FieldViolation,
)
from swapkeeper.core.errors import (
    IllegalTransitionError as IllegalTransitionError,
)
from swapkeeper.core.errors import (
    InsufficientBalanceError as InsufficientBalanceError,
)
from swapkeeper.core.errors import (
    LengthMismatchError as LengthMismatchError,
)
from swapkeeper.core.errors import (
    PersistenceError as PersistenceError,
)
from swapkeeper.core.errors import (
    StateError as StateError,
)
from swapkeeper.core.errors import (
    SwapkeeperError as SwapkeeperError,
)
from swapkeeper.core.errors import (
    ValidationError as ValidationError,
)
from swapkeeper.core.result import Err as Err
from swapkeeper.core.result import Ok as Ok
from swapkeeper.core.result import Result as Result
from swapkeeper.core.result import unwrap as unwrap
from swapkeeper.core.serialization import canonical_bytes as canonical_bytes
from swapkeeper.core.serialization import content_hash as content_hash
from swapkeeper.core.types import Address as Address
from swapkeeper.core.types import TokenAmount as TokenAmount
from swapkeeper.core.types import UtcDatetime as UtcDatetime
