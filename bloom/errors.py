class BloomError(Exception):
    """Base class for errors raised by the ordering core."""


class StoreError(BloomError):
    """The record store rejected the call or could not be reached."""


class RecordNotFound(StoreError):
    def __init__(self, collection: str, record_id: str) -> None:
        super().__init__(f"{collection} record {record_id!r} not found")
        self.collection = collection
        self.record_id = record_id


class ReadOnlyField(StoreError):
    def __init__(self, collection: str, fields: set[str]) -> None:
        names = ", ".join(sorted(fields))
        super().__init__(f"{collection} fields are not writable: {names}")
        self.collection = collection
        self.fields = fields


class UnknownMenuItem(BloomError, LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown menu item: {name}")
        self.name = name
