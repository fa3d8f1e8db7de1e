class TrustGraphError(Exception):
    pass


class DataSourceError(TrustGraphError):
    pass


class RateLimitError(DataSourceError):
    pass


class MalformedInputError(TrustGraphError):
    pass


class EmptyGraphError(TrustGraphError):
    pass


class StoreError(TrustGraphError):
    pass


class SolverError(TrustGraphError):
    pass
