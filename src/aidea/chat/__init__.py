"""Chat turn orchestration and attachment handling."""

from .attachments import StagedAttachments, extract_pdf_text, image_data_url
from .controller import APOLOGY_TEXT, AssistantReply, ChatController, is_thinking_model
from .messages import build_message_history, prepare_message_content

__all__ = [
    "APOLOGY_TEXT",
    "AssistantReply",
    "ChatController",
    "StagedAttachments",
    "build_message_history",
    "extract_pdf_text",
    "image_data_url",
    "is_thinking_model",
    "prepare_message_content",
]
