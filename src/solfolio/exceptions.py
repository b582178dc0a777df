"""Exception taxonomy shared by the scanning, pricing and burn layers."""


class SolfolioError(Exception):
    """Base class for all solfolio errors."""


class AddressValidationError(SolfolioError):
    """Malformed input: bad address format or empty request."""


class ExternalServiceError(SolfolioError):
    """An upstream (RPC, price API, gateway) call failed."""


class RateLimitError(ExternalServiceError):
    """Upstream signalled throttling (HTTP 429 or equivalent)."""


class NetworkError(ExternalServiceError):
    """Upstream unreachable."""


class RequestTimeoutError(NetworkError):
    """Upstream did not answer within the call's timeout."""


class FetchError(ExternalServiceError):
    """Content could not be fetched from any gateway mirror."""


class UnsupportedURIError(FetchError):
    """URI scheme has no known HTTP gateway."""


class DecodeError(SolfolioError):
    """On-chain or off-chain data could not be decoded."""


class BurnTransactionError(SolfolioError):
    """No burn instruction could be built for the request."""
