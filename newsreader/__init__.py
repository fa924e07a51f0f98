"""AI news reader: NewsAPI headlines with Gemini-powered insights and chat."""

__version__ = "0.1.0"
