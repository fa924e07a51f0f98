class NewsReaderError(Exception):
    """Base class for errors raised inside the news reader services."""


class ConfigurationError(NewsReaderError):
    """A required setting (usually an API key) is missing."""


class NewsAPIError(NewsReaderError):
    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        super().__init__(f"News API error: {status_code} {message}".strip())
