"""
Errors raised by the client.  The set is deliberately small: the only
condition a caller can act on is an expired token, everything else is
either the transport failing or something unexpected.
"""

# the challenge Google sends back in WWW-Authenticate once a token is dead
INVALID_TOKEN_CHALLENGE = 'Bearer error="invalid_token"'


class ClientError(Exception):
    """Base class for all client errors."""


class InvalidTokenError(ClientError):
    """
    The access token is no longer accepted.  Re-authenticate and build a
    new client with the fresh token.
    """

    def __init__(self, message: str = "Invalid Access Token") -> None:
        super().__init__(message)


class TransportError(ClientError):
    """
    The transport failed to deliver the request or read the response.
    The original exception is kept in cause (and chained as __cause__).
    """

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Transport Error: {cause}")
        self.cause = cause


class UnknownError(ClientError):
    """
    Anything else: serialization or URL building problems, undecodable
    responses, or a status the resource client does not accept.
    """

    def __init__(self, message: str, status_code: int|None = None) -> None:
        super().__init__(f"Unknown Error: {message}")
        self.message = message
        self.status_code = status_code
