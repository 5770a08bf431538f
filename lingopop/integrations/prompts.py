"""
Prompt templates for the Gemini Oracle.

Each structured operation pairs a prompt here with a response schema in
``schemas.py``.
"""

from __future__ import annotations

from typing import Sequence

from lingopop.core.models import ChatTurn, Role

# =============================================================================
# Dictionary
# =============================================================================

ENRICH_PROMPT = """You are an advanced AI language tutor.
The user is a native {source_lang} speaker learning {target_lang}.
The input is: "{term}".

Analyze the input:
1. **Translation/Correction**:
   - If the input is {source_lang}, translate it to {target_lang}.
   - If the input is {target_lang}, correct typos.
2. **Type Detection**: Is it a word, a phrase, or a **Grammar Point** (e.g., JLPT N4-N1 grammar structures)?
3. **Phonetics**: Provide Pinyin for Chinese, Furigana/Romaji for Japanese, or IPA for others.
4. **Definition**: Explain the meaning naturally in {source_lang}. For a grammar point, explain the connection rules and nuance.
5. **Examples**: Provide two distinct examples in {target_lang}. For each, include the {source_lang} translation and the phonetic reading of the sentence.
6. **Usage Note**: A friendly, casual note in {source_lang} about culture, nuance, or common mistakes.

Return JSON matching the schema.
"""

IMAGE_PROMPT = """Generate an image representing: "{term}".

Rules:
1. **Famous People**: If "{term}" is a specific real person, generate a realistic portrait that captures their essence, style and era without violating policy.
2. **Objects/Places**: If it is a physical object or place, generate a photorealistic photo.
3. **Abstract/Grammar**: If it is an abstract concept or grammar point, generate a colorful, minimalist 3D illustration.

Lighting: professional studio lighting or natural light.
Style: high resolution, no text overlays.
"""

STORY_PROMPT = """Create a short, funny story to help memorize these words: {words}.
The reader is a native {source_lang} speaker learning {target_lang}.
Write the story primarily in {source_lang}, but weave in the target words ({words}) naturally in {target_lang}.
Highlight the target words by wrapping them in asterisks (e.g., *word*).
Keep it under 200 words.
"""

TERM_TUTOR_PROMPT = """You are a helpful language tutor assistant. The user is studying the term "{term}" (Native: {source_lang}, Target: {target_lang}). Answer their questions about this specific term briefly and clearly.

Conversation History:
{history}

User: {question}
Model:
"""

# =============================================================================
# Roleplay
# =============================================================================

SCENARIOS_PROMPT = """Generate 3 distinct, fun, and practical roleplay scenarios for a student learning {target_lang}.
The student's native language is {source_lang}: write titles and descriptions in {source_lang}, and the opening line in {target_lang}.
Themes: 1. Work/Office, 2. Daily Life/Travel, 3. Unexpected/Funny Situation.

Return JSON with a "scenarios" array.
"""

SCENARIO_REPLY_PROMPT = """You are acting in a roleplay scenario: "{title}" - {description}.
Language: {target_lang} ONLY.
Your role: Interact naturally with the user. Keep responses concise (1-3 sentences).

History:
{history}

Respond to the last user message in character.
"""

EVALUATION_PROMPT = """Analyze this roleplay conversation in {target_lang}.
The user (native {source_lang}) was practicing.

Conversation:
{history}

Provide:
1. Score (0-100) based on fluency and appropriateness.
2. Feedback (in {source_lang}): encouraging summary.
3. Corrections: Find up to 3 mistakes or better ways to say things.
"""


def format_history(history: Sequence[ChatTurn]) -> str:
    """Render turns as ``user:``/``model:`` lines, oldest first."""
    lines = []
    for turn in history:
        prefix = "user" if turn.role == Role.LEARNER else "model"
        lines.append(f"{prefix}: {turn.text}")
    return "\n".join(lines)
