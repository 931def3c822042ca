"""
Prompt construction.

A request whose context already carries a detailed instruction block is sent
verbatim; anything else gets a generic JSON-answer prompt. The builders below
produce those detailed blocks for blog articles and social posts rewritten
from an extracted source article.
"""

from typing import List, Optional

from ..core.models.extraction import ExtractedContent
from ..core.models.generation import BrandVoice, ContentType, GenerationRequest, RewriteStyle

CRITICAL_RULES_MARKER = "### CRITICAL RULES"
OUTPUT_REQUIREMENTS_MARKER = "### OUTPUT REQUIREMENTS"
DETAILED_INSTRUCTION_MARKERS = (CRITICAL_RULES_MARKER, OUTPUT_REQUIREMENTS_MARKER)

IMAGE_PLACEHOLDER = "[INSERT_IMAGE]"

WORD_COUNT_TARGETS = {
    "concise": 300,
    "detailed": 800,
    "comprehensive": 1500,
}
DEFAULT_WORD_COUNT = 800

LANGUAGE_NAMES = {
    "en": "English",
    "vi": "Vietnamese",
    "fr": "French",
    "de": "German",
    "es": "Spanish",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
}

CONTENT_TYPE_LABELS = {
    ContentType.BLOG_POST: "blog post",
    ContentType.SOCIAL_MEDIA: "social media post",
    ContentType.EMAIL: "marketing email",
    ContentType.AD_COPY: "advertisement copy",
}

REWRITE_INSTRUCTIONS = {
    RewriteStyle.SIMILAR: "Keep the structure and key points of the source, rewritten entirely in your own words.",
    RewriteStyle.IMPROVED: "Keep the source's topic but improve clarity, structure and depth, correcting weak arguments.",
    RewriteStyle.DIFFERENT_ANGLE: "Cover the same subject from a different perspective than the source takes.",
    RewriteStyle.EXPANDED: "Expand on the source with additional detail, examples and practical advice.",
}

SOURCE_EXCERPT_CHARS = 1000
SOURCE_ARTICLE_CHARS = 6000
REFERENCE_EXCERPT_CHARS = 300


def has_detailed_instructions(context: Optional[str]) -> bool:
    return bool(context) and any(marker in context for marker in DETAILED_INSTRUCTION_MARKERS)


def word_count_target(brand_voice: BrandVoice) -> int:
    return WORD_COUNT_TARGETS.get((brand_voice.length or "").lower(), DEFAULT_WORD_COUNT)


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get((code or "en").lower(), code)


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def build_generic_prompt(request: GenerationRequest) -> str:
    """Prompt synthesized from the request fields, asking for a JSON answer."""
    voice = request.brand_voice
    label = CONTENT_TYPE_LABELS.get(request.content_type, "content")
    lines = [
        f"Write a {label} about: {request.topic}",
        "",
        f"Target audience: {request.target_audience}",
        f"Tone: {voice.tone}",
        f"Style: {voice.style}",
        f"Vocabulary: {voice.vocabulary}",
        f"Target length: about {word_count_target(voice)} words",
        f"Language: write entirely in {language_name(request.language)}",
    ]
    if voice.brand_name:
        lines.append(f"Brand: {voice.brand_name}")
    if request.keywords:
        lines.append(f"Keywords to include naturally: {', '.join(request.keywords)}")
    if request.context:
        lines.extend(["", "Context:", request.context])
    if request.special_instructions:
        lines.extend(["", "Additional instructions:", request.special_instructions])
    lines.extend([
        "",
        "Respond with a single JSON object and nothing else:",
        '{"title": "...", "body": "...", "excerpt": "one or two sentence summary"}',
    ])
    return "\n".join(lines)


def build_prompt(request: GenerationRequest) -> str:
    """Full prompt for a request."""
    if has_detailed_instructions(request.context):
        return request.context
    return build_generic_prompt(request)


def build_source_context(source: ExtractedContent) -> str:
    """Plain context describing the source article."""
    return (
        f"Original content from {source.source_url}:\n"
        f"Title: {source.title}\n"
        f"Content: {_truncate(source.body, SOURCE_EXCERPT_CHARS)}\n\n"
        "Please create new content based on this source material."
    )


def build_reference_section(
    source: ExtractedContent,
    references: List[ExtractedContent],
    rewrite_style: RewriteStyle
) -> str:
    """REFERENCE CONTENT ANALYSIS block with the rewrite style and sibling articles."""
    lines = [
        "### REFERENCE CONTENT ANALYSIS",
        f"Rewrite style: {RewriteStyle(rewrite_style).value}",
        REWRITE_INSTRUCTIONS[RewriteStyle(rewrite_style)],
        f"Current article: {source.title} ({source.metadata.word_count} words, "
        f"language {source.metadata.language})",
    ]
    for index, reference in enumerate(references[:2], start=1):
        lines.append(
            f"Reference {index}: {reference.title} - "
            f"{_truncate(' '.join(reference.body.split()), REFERENCE_EXCERPT_CHARS)}"
        )
    if references:
        lines.append("Use the references only for perspective; do not copy from them.")
    return "\n".join(lines)


def _voice_lines(brand_voice: BrandVoice, target_audience: str, keywords: List[str]) -> List[str]:
    lines = [
        f"- Target audience: {target_audience}",
        f"- Tone: {brand_voice.tone}; style: {brand_voice.style}; vocabulary: {brand_voice.vocabulary}",
    ]
    if brand_voice.brand_name:
        lines.append(f"- Brand: {brand_voice.brand_name}")
    if keywords:
        lines.append(f"- Keywords to include naturally: {', '.join(keywords)}")
    return lines


def build_blog_instructions(
    source: ExtractedContent,
    topic: str,
    brand_voice: BrandVoice,
    target_audience: str,
    keywords: List[str],
    language: str,
    reference_section: Optional[str] = None,
    extra_context: Optional[str] = None
) -> str:
    """Detailed instruction block for an HTML blog article."""
    target_words = max(1000, word_count_target(brand_voice))
    lines = [
        f"You are an expert content writer. Transform the source article below into an original "
        f"WordPress blog article about: {topic}",
        "",
        CRITICAL_RULES_MARKER,
        "1. Output clean HTML only: a single <h1> title followed by <h2>, <h3>, <p>, <ul> and <li> elements.",
        "2. Do not output <html>, <head>, <body>, markdown or code fences.",
        f"3. Write at least {target_words} words.",
        f"4. Insert the placeholder {IMAGE_PLACEHOLDER} on its own line 3 to 5 times, between sections.",
        f"5. Write entirely in {language_name(language)}, even if the source is in another language.",
        "6. Do not copy sentences from the source; rewrite every idea in your own words.",
        "",
        "### BRAND AND AUDIENCE",
        *_voice_lines(brand_voice, target_audience, keywords),
    ]
    if reference_section:
        lines.extend(["", reference_section])
    if extra_context:
        lines.extend(["", "### ADDITIONAL CONTEXT", extra_context])
    lines.extend([
        "",
        "### SOURCE ARTICLE TO TRANSFORM",
        f"URL: {source.source_url}",
        f"Title: {source.title}",
        _truncate(source.body, SOURCE_ARTICLE_CHARS),
        "",
        OUTPUT_REQUIREMENTS_MARKER,
        "Return only the HTML article, starting with the <h1> title.",
    ])
    return "\n".join(lines)


def build_social_instructions(
    source: ExtractedContent,
    topic: str,
    brand_voice: BrandVoice,
    target_audience: str,
    keywords: List[str],
    language: str,
    reference_section: Optional[str] = None,
    extra_context: Optional[str] = None
) -> str:
    """Detailed instruction block for a short social media post."""
    lines = [
        f"You are a social media copywriter. Turn the source article below into one engaging post about: {topic}",
        "",
        CRITICAL_RULES_MARKER,
        "1. Open with a one-line hook that stops the scroll.",
        "2. Keep the post under 200 words, in short paragraphs.",
        "3. Use 2 to 4 relevant emojis.",
        "4. End with a clear call to action.",
        "5. Finish with 3 to 5 relevant hashtags on the last line.",
        f"6. Write entirely in {language_name(language)}.",
        "",
        "### BRAND AND AUDIENCE",
        *_voice_lines(brand_voice, target_audience, keywords),
    ]
    if reference_section:
        lines.extend(["", reference_section])
    if extra_context:
        lines.extend(["", "### ADDITIONAL CONTEXT", extra_context])
    lines.extend([
        "",
        "### SOURCE ARTICLE TO TRANSFORM",
        f"Title: {source.title}",
        _truncate(source.body, SOURCE_EXCERPT_CHARS * 2),
        "",
        OUTPUT_REQUIREMENTS_MARKER,
        "First line: a short title for internal use. Then the post text exactly as it should be published.",
    ])
    return "\n".join(lines)
