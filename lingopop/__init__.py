"""
LingoPop: generative vocabulary and conversation practice.

Components:
- dictionary: term lookup, notebook, stories, term tutor
- roleplay: scenario-driven conversation practice with grading
- audio: spoken playback of any text
- integrations: the Oracle contract and its Gemini implementation
- cli: terminal interface
"""

__version__ = "1.0.0"
