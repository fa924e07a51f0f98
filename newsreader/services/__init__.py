"""Outbound calls: NewsAPI.org and Google Gemini."""
