"""
Typed Exception Hierarchy for the Pallet Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The scan and stock screens show a specific message for each failure: a
missing pallet type, a zero quantity, a full driver catalog. Matching on
message text would tie those screens to wording. Every error here has:

  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, UI-safe)
  3. Structured DATA attributes (not just a message string)

Example - WRONG way to handle errors:
    try:
        ledger.record_movement("EUR", qty, origin, destination)
    except Exception as e:
        if "quantity" in str(e):
            show_quantity_hint()

Example - RIGHT way:
    try:
        ledger.record_movement("EUR", qty, origin, destination)
    except InvalidQuantityError as e:
        show_quantity_hint(e.quantity)
    except ValidationError as e:
        show_error(e.code)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from PalletKernelError:

    PalletKernelError (base)
    |
    +-- ValidationError
    |   +-- PalletTypeRequiredError
    |   +-- InvalidQuantityError
    |   +-- InvalidSourceError
    |   +-- InvalidDestinationError
    |   +-- NoOpMovementError
    |   +-- LocationNameRequiredError
    |   +-- PalletCodeRequiredError
    |
    +-- LimitExceededError
    |
    +-- StorageError
    |   +-- StorageUnavailableError
    |
    +-- SettingsError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | PALLET_TYPE_REQUIRED        | Blank pallet type on a movement
                | QTY_INVALID                 | Quantity not a finite number > 0
                | FROM_INVALID                | Movement origin missing kind or id
                | TO_INVALID                  | Movement destination missing kind or id
                | NO_OP_MOVEMENT              | Origin and destination are the same
                | LOCATION_NAME_REQUIRED      | Blank location name
                | PALLET_CODE_REQUIRED        | Blank pallet code
----------------|-----------------------------|-----------------------------------------
Limits          | LIMIT_EXCEEDED              | Location catalog is full
----------------|-----------------------------|-----------------------------------------
Storage         | STORAGE_UNAVAILABLE         | Backing store cannot be read/written
----------------|-----------------------------|-----------------------------------------
Settings        | SETTINGS_ERROR              | Malformed configuration value

Lookups by unknown id are NOT errors: update() returns None and remove()
returns False, since the UI may hold a stale id for a just-deleted record.
"""


class PalletKernelError(Exception):
    """
    Base exception for all pallet kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PALLET_KERNEL_ERROR"


# Validation exceptions


class ValidationError(PalletKernelError):
    """
    Base exception for rejected input.

    Always raised before any write, so a failed call leaves storage as it was.
    """

    code: str = "VALIDATION_ERROR"


class PalletTypeRequiredError(ValidationError):
    """Movement has no pallet type."""

    code: str = "PALLET_TYPE_REQUIRED"

    def __init__(self, pallet_type: object = None):
        self.pallet_type = pallet_type
        super().__init__("Pallet type is required")


class InvalidQuantityError(ValidationError):
    """Movement quantity is not a finite number greater than zero."""

    code: str = "QTY_INVALID"

    def __init__(self, quantity: object):
        self.quantity = quantity
        super().__init__(f"Invalid quantity: {quantity!r}")


class InvalidSourceError(ValidationError):
    """Movement origin is missing its kind or id."""

    code: str = "FROM_INVALID"

    def __init__(self, location: object):
        self.location = location
        super().__init__(f"Invalid movement origin: {location!r}")


class InvalidDestinationError(ValidationError):
    """Movement destination is missing its kind or id."""

    code: str = "TO_INVALID"

    def __init__(self, location: object):
        self.location = location
        super().__init__(f"Invalid movement destination: {location!r}")


class NoOpMovementError(ValidationError):
    """Movement origin and destination are the same location."""

    code: str = "NO_OP_MOVEMENT"

    def __init__(self, location_kind: str, location_id: str):
        self.location_kind = location_kind
        self.location_id = location_id
        super().__init__(
            f"Movement from {location_kind}:{location_id} to itself"
        )


class LocationNameRequiredError(ValidationError):
    """Location name is blank after trimming."""

    code: str = "LOCATION_NAME_REQUIRED"

    def __init__(self, location_kind: str):
        self.location_kind = location_kind
        super().__init__(f"Name is required for {location_kind}")


class PalletCodeRequiredError(ValidationError):
    """Pallet code is blank after trimming."""

    code: str = "PALLET_CODE_REQUIRED"

    def __init__(self):
        super().__init__("Pallet code is required")


# Catalog limits


class LimitExceededError(PalletKernelError):
    """
    Location catalog has reached its configured size cap.

    Kept separate from ValidationError so the UI can show the cap itself.
    """

    code: str = "LIMIT_EXCEEDED"

    def __init__(self, location_kind: str, limit: int):
        self.location_kind = location_kind
        self.limit = limit
        super().__init__(f"{location_kind} catalog is limited to {limit} entries")


# Storage exceptions


class StorageError(PalletKernelError):
    """Base exception for key-value store failures."""

    code: str = "STORAGE_ERROR"


class StorageUnavailableError(StorageError):
    """
    Backing store cannot be reached.

    Raised by KeyValueStore implementations. Collections absorb it: reads
    return the empty default and writes keep the in-memory result only.
    """

    code: str = "STORAGE_UNAVAILABLE"

    def __init__(self, key: str, operation: str, reason: str = ""):
        self.key = key
        self.operation = operation
        self.reason = reason
        msg = f"Storage unavailable for {operation} of {key}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


# Settings exceptions


class SettingsError(PalletKernelError):
    """Configuration value is missing or malformed."""

    code: str = "SETTINGS_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid setting '{field}': {reason}")
