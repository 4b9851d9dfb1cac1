class FinanceError(Exception):
    """Base class for errors raised around the record store."""


class RecordNotFoundError(FinanceError):

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind.capitalize()} not found: {record_id}")


class ValidationError(FinanceError):
    """Input rejected before a record was built.

    ``errors`` maps field name to a user-facing message.
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        detail = "; ".join(f"{k}: {v}" for k, v in self.errors.items())
        super().__init__(f"Invalid input ({detail})")


class StorageError(FinanceError):
    pass
