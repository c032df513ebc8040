"""
Chat model construction and message helpers.

Dependencies: langchain_google_genai, langchain_core
System role: Default language model backend for question and answer synthesis
"""

from typing import Any

from dotenv import load_dotenv
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI

load_dotenv()


def build_chat_model(model: str, temperature: float = 0.0) -> BaseChatModel:
    """
    Create the default Google Gemini chat model.

    Args:
        model: Gemini model identifier
        temperature: Sampling temperature

    Returns:
        BaseChatModel: Chat model supporting ainvoke and astream
    """
    return ChatGoogleGenerativeAI(model=model, temperature=temperature)


def message_text(content: Any) -> str:
    """
    Flatten message content to plain text.

    Gemini may return either a string or a list of content parts
    (strings or dicts with a "text" key).

    Args:
        content: AIMessage / AIMessageChunk content

    Returns:
        str: Concatenated text ("" when there is none)
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict):
                parts.append(str(item.get("text", "")))
        return "".join(parts)
    return str(content)
