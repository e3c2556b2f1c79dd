"""Exceptions raised inside the server.

None of these cross a session boundary: ``HubSpotError`` is turned into a
failure envelope by the tool invoker, ``SessionNotFoundError`` into an HTTP 400
by the message endpoint, and ``ConfigurationError`` stops the process before
it starts listening.
"""


class HubSpotMCPError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(HubSpotMCPError):
    """Raised when required process configuration is missing or invalid."""


class HubSpotError(HubSpotMCPError):
    """Raised when a HubSpot API call does not produce a usable JSON body.

    Attributes:
        status_code: HTTP status returned by HubSpot, or ``None`` when the
                     request failed before a response was received
        body: Response body text verbatim, or the transport error description
    """

    status_code: int | None
    body: str

    def __init__(self, status_code: int | None, body: str):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            super().__init__(f"HubSpot request failed: {body}")
        else:
            super().__init__(f"HubSpot {status_code} {body}")


class SessionNotFoundError(HubSpotMCPError):
    """Raised when a message names a session that is not open."""

    session_id: str

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"No transport found for sessionId {session_id!r}")
