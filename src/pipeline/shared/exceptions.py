"""Exceptions raised by the ATO data pipeline."""


class PipelineError(Exception):
    """Base class for pipeline errors that abort a run."""


class AuthenticationRequiredError(PipelineError):
    """The injected credential could not authenticate against Azure."""


class ConfigurationError(PipelineError, ValueError):
    """Required configuration is missing or invalid."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []


class SubscriptionNotFoundError(PipelineError):
    """No enabled subscription matched the requested selector."""

    def __init__(self, message: str, available: list | None = None):
        super().__init__(message)
        self.available = available or []


class PartitionKeyError(PipelineError):
    """A document lacks the field its container partitions on."""

    def __init__(self, container: str, partition_key: str, item_id: str | None = None):
        super().__init__(
            f"Item {item_id or 'unknown'} has no value for partition key "
            f"{partition_key} required by container {container}"
        )
        self.container = container
        self.partition_key = partition_key
        self.item_id = item_id
