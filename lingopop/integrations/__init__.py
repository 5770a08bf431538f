"""
External integrations for LingoPop.

Modules:
- oracle: abstract contract of the generative service
- gemini_oracle: Google Gemini implementation
- schemas: response schemas and payload validation
- prompts: prompt templates
"""
from .gemini_oracle import GeminiOracle
from .oracle import Oracle

__all__ = ["GeminiOracle", "Oracle"]
