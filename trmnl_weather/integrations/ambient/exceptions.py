from ..common.exceptions import SourceError, SourceRateLimited


class AmbientAPIError(SourceError):
    """Ambient Weather specific API error."""

    pass


class AmbientRateLimited(AmbientAPIError, SourceRateLimited):
    """
    Ambient Weather caps requests at 1 request/second per API key and
    3 requests/second per application key.
    """

    pass
