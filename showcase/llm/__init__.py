"""Model endpoint client."""

from .client import Completion, ModelCallFailure, ModelClient, extract_document

__all__ = ["Completion", "ModelCallFailure", "ModelClient", "extract_document"]
