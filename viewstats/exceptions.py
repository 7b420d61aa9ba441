class StatsError(Exception): ...


class InvalidRangeError(StatsError, ValueError): ...


class UnknownStatisticError(StatsError, LookupError): ...


class ConfigError(StatsError): ...


class StoreError(StatsError): ...


class StoreUnavailableError(StoreError): ...


class StoreQueryError(StoreError): ...


def require(condition: bool, message: str, exc: type[StatsError] = StatsError):
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)
