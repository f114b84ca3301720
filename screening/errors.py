class ScreeningError(Exception):
    """Base class for errors raised by the screening pipeline."""


class UnknownDomainError(ScreeningError, KeyError):
    def __init__(self, domain: str):
        self.domain = domain
        super().__init__(f"Invalid domain selected: {domain!r}")

    def __str__(self) -> str:
        return self.args[0]


class NoInputFilesError(ScreeningError):
    pass


class GatewayError(ScreeningError):
    """LLM call failed (transport, auth, quota or unusable payload)."""


class PdfExtractionError(ScreeningError):
    pass
