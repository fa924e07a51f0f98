import logging

import google.generativeai as genai
from google.generativeai.types import HarmBlockThreshold, HarmCategory

from .. import config
from ..errors import ConfigurationError
from ..models import Article, ChatMessage, InsightRecord
from ..normalizer import normalize

logger = logging.getLogger(__name__)

if config.GEMINI_API_KEY:
    genai.configure(api_key=config.GEMINI_API_KEY)

SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
}

CHAT_GENERATION_CONFIG = {
    "temperature": 0.7,
    "top_p": 0.95,
    "top_k": 40,
}

CHAT_ERROR_REPLY = "I'm sorry, I encountered an error processing your request. Please try again."

# Article bodies from NewsAPI are short, but scraped or pasted content may not be
MAX_CONTENT_CHARS = 15000


def _get_model(generation_config=None):
    if not config.GEMINI_API_KEY:
        raise ConfigurationError("GEMINI_API_KEY is not set")
    return genai.GenerativeModel(
        config.GEMINI_MODEL,
        safety_settings=SAFETY_SETTINGS,
        generation_config=generation_config,
    )


def build_insights_prompt(article: Article) -> str:
    return f"""
    Analyze the following news article and provide insights:

    Title: {article.title}
    Description: {article.description}
    Content: {article.content[:MAX_CONTENT_CHARS]}

    Please provide the following in JSON format:
    {{
      "summary": "A concise summary (2-3 sentences)",
      "keyPoints": ["3-5 key points from the article"],
      "keywords": ["5-7 relevant keywords"],
      "sentiment": "The overall sentiment (Positive, Negative, or Neutral)"
    }}
    """


def generate_article_insights(article: Article) -> InsightRecord:
    """
    Ask Gemini for a summary, key points, keywords and sentiment.

    Always returns a complete record: a failed call falls back to defaults
    with keywords taken from the article title and description.
    """
    try:
        model = _get_model()
        response = model.generate_content(build_insights_prompt(article))
        text = response.text
    except Exception as e:
        logger.error("Error generating article insights: %s", e)
        return normalize(None, article.fallback_text)

    return normalize(text, article.fallback_text)


def welcome_message(article: Article = None) -> str:
    if article:
        return (
            "Hello! I'm your AI news assistant. I can help you understand the article "
            f"\"{article.title}\". What would you like to know about it?"
        )
    return (
        "Hello! I'm your AI news assistant. I can help you find and understand news articles, "
        "answer questions about current events, or discuss specific topics. "
        "What would you like to talk about today?"
    )


def _article_context(article: Article) -> str:
    return (
        f"Title: {article.title}\n"
        f"Source: {article.source.name}\n"
        f"Description: {article.description}"
    )


def build_chat_request(previous_messages: list[ChatMessage], user_message: str, article: Article = None):
    """
    Return (history, prompt) for a Gemini chat turn.

    Gemini requires a chat history to start with a user turn. When the
    conversation opens with our assistant greeting, start a fresh chat and
    carry the greeting inside the prompt instead.
    """
    if previous_messages and previous_messages[0].role == "assistant":
        assistant_context = previous_messages[0].content
        if article:
            prompt = (
                f"{assistant_context}\n\n"
                f"Article context:\n{_article_context(article)}\n\n"
                f"User: {user_message}"
            )
        else:
            prompt = f"{assistant_context}\n\nUser: {user_message}"
        return [], prompt

    history = [
        {"role": "user" if msg.role == "user" else "model", "parts": [msg.content]}
        for msg in previous_messages
    ]
    if article:
        prompt = (
            f"I'm asking about this article:\n{_article_context(article)}\n\n"
            f"My question is: {user_message}"
        )
    else:
        prompt = user_message
    return history, prompt


def chat_with_ai(previous_messages: list[ChatMessage], user_message: str, article: Article = None) -> str:
    """
    Answer a chat message, optionally grounded on an article.
    Errors are logged and turned into an apology reply.
    """
    history, prompt = build_chat_request(previous_messages, user_message, article)
    try:
        model = _get_model(CHAT_GENERATION_CONFIG)
        chat = model.start_chat(history=history)
        response = chat.send_message(prompt)
        return response.text
    except Exception as e:
        logger.error("Error chatting with AI: %s", e)
        return CHAT_ERROR_REPLY
