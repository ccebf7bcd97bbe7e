"""
Prompt templates for every generation step.

Each builder turns domain inputs (video metadata, earlier stage outputs,
keyword data) into a fully formed prompt string.
"""

from typing import Dict, List, Optional

from ..image_models import ImageModelSpec
from ..models import ScriptContext, StyleSelection, VideoData
from ..utils.text_processing import excerpt
from .styles import STYLE_SUMMARIES


SCRIPT_SYSTEM = "You are an expert YouTube scriptwriter specializing in creating engaging short-form content."
DESCRIPTION_SYSTEM = "You are a YouTube SEO expert specializing in creating optimized video descriptions."
TITLE_SYSTEM = "You are a YouTube optimization expert specializing in creating viral, clickable titles."
KEYWORD_SYSTEM = (
    "You are a YouTube SEO and keyword research specialist with deep expertise in YouTube "
    "algorithm optimization, content discovery, and viewer engagement strategies."
)
BREAKDOWN_SYSTEM = "You are an expert at breaking down video scripts into visually-suitable segments."
STYLE_SYSTEM = "You are a visual design expert specializing in selecting appropriate styles for video content."
IMAGE_PROMPT_SYSTEM = (
    "You are an expert at creating detailed, consistent prompts for AI image generation. "
    "Always maintain the exact same visual style throughout a video series."
)
EDITOR_KEYWORDS_SYSTEM = (
    "You are an expert at extracting key words and phrases that actually appear in text for "
    "video editing purposes. Only highlight words that exist in the original sentence."
)
THUMBNAIL_SYSTEM = "You are an expert YouTube thumbnail designer who creates high-converting, clickable thumbnails."


def _join(items: Optional[List[str]], limit: Optional[int] = None) -> str:
    items = (items or [])[:limit] if limit is not None else (items or [])
    return ", ".join(items) if items else "N/A"


def context_analysis_prompt(script: str, video: VideoData) -> str:
    return f"""
Analyze the following script to extract key contextual elements for enhanced regeneration:

Original Script:
{script}

Video Metadata:
- Title: {video.title}
- Description: {excerpt(video.description, 300)}

Perform a comprehensive CONTEXT ANALYSIS and return a JSON object with:

{{
  "originalScriptIntent": "Core purpose and goal of the original content",
  "targetAudience": "Specific audience demographic and characteristics",
  "contentVibe": "Tone, style, and emotional approach (formal/casual/inspirational/etc)",
  "coreMessage": "Main takeaway or key insight",
  "hookStyle": "How the content captures attention (question/story/statistic/etc)",
  "callToActionApproach": "Style of CTA used (direct/soft/educational/etc)",
  "contentPillars": ["key theme 1", "key theme 2", "key theme 3"],
  "audienceSpecificLanguage": "Language style and terminology used",
  "videoFormat": "Content format (tutorial/story/tips/analysis/etc)"
}}

Focus on preserving the essence while enabling development and enhancement."""


def _keyword_strategy(keywords: Optional[Dict[str, List[str]]]) -> str:
    if not keywords or not any(keywords.values()):
        return ""
    return f"""
SEO KEYWORD INTEGRATION STRATEGY:
- Primary Keywords (integrate 2-3 naturally): {_join(keywords.get("primaryKeywords"))}
- Long-tail Keywords (address problems): {_join(keywords.get("longTailKeywords"), 5)}
- Question Keywords (answer directly): {_join(keywords.get("questionKeywords"), 3)}
- Semantic Keywords (natural mentions): {_join(keywords.get("semanticKeywords"), 4)}

Integrate these keywords naturally throughout the script without compromising engagement.
"""


def script_prompt(
    transcript: str,
    video: VideoData,
    context: ScriptContext,
    keywords: Optional[Dict[str, List[str]]] = None,
    description_chars: int = 500,
) -> str:
    return f"""
You are a viral YouTube content strategist and scriptwriter with expertise in algorithm optimization and audience psychology. Transform the original video into breakthrough content that maximizes engagement and viral potential.

CONTEXT ANALYSIS:
- Original Script Intent: {context.intent}
- Target Audience: {context.audience}
- Content Vibe: {context.vibe}
- Core Message: {context.core_message}
- Hook Style: {context.hook_style}
- Call-to-Action Approach: {context.cta_style}
- Content Pillars: {", ".join(context.content_pillars)}
- Audience Language: {context.audience_language}
- Video Format: {context.video_format}

Original Video Information:
- Title: {video.title}
- Description: {excerpt(video.description, description_chars)}

Original Transcript (Use as inspiration only):
{transcript}
{_keyword_strategy(keywords)}
SCRIPT ARCHITECTURE:

HOOK (0-10s):
- Pattern interrupt that breaks viewer expectations immediately
- Curiosity gap: "The thing about X that even experts miss..."
- Future pacing: "By the end of this video, you'll..."

NARRATIVE STRUCTURE:
- Current state problem: identify with the viewer's frustration
- Challenge introduction: present the obstacle or opportunity
- Authority and social proof: establish credibility with evidence
- Method and solution: deliver core value with actionable insights
- Transformation evidence: show results and proof
- Strong CTA: next action, community invitation and session extension

RETENTION:
- Retention hooks at the 5s, 15s, 30s, 60s and 2m marks
- Comment-baiting questions integrated naturally
- At least 3 quotable, shareable moments
- Emotional progression: Curiosity -> Hope -> Excitement -> Action

Keep the same audience and value proposition while creating completely new stories, examples and analogies.

Return only the script - no commentary, explanations, or meta-information."""


def description_prompt(script: str, keywords: List[str]) -> str:
    primary = keywords[0:4]
    secondary = keywords[4:8]
    hashtags = keywords[0:6]
    return f"""
Create a completely NEW and original YouTube video description optimized for SEO and engagement based on this enhanced script content:

Enhanced Script Content:
{script}

SEO KEYWORD STRATEGY:
Primary Keywords (must include naturally): {", ".join(primary)}
Secondary Keywords (sprinkle throughout): {", ".join(secondary)}
Hashtag Keywords: {", ".join(hashtags)}
All Keywords Available: {", ".join(keywords)}

DESCRIPTION STRUCTURE:
1. HOOK (first 125 characters): primary keyword in the first sentence, front-load the most important information
2. VALUE PROPOSITION: what the viewer will learn or gain, with 2-3 primary keywords
3. CONTENT OUTLINE: scannable breakdown of key points using secondary keywords
4. ENGAGEMENT: call-to-action for likes, comments and subscribes plus one engaging question
5. HASHTAGS: 8-12 hashtags mixing broad and niche terms

Write as if this is completely original content for a new channel, in a conversational tone.

Return the complete SEO-optimized description ready for YouTube upload."""


def title_prompt(script: str, original_title: str, keywords: List[str], script_chars: int = 800) -> str:
    return f"""
You are a viral YouTube title optimization expert. Create 5 high-converting titles based SPECIFICALLY on this new generated script content with SEO keyword integration.

SCRIPT ANALYSIS:
Original Reference Title: {original_title}
NEW GENERATED SCRIPT CONTENT: {excerpt(script, script_chars)}...

KEYWORD STRATEGY:
Primary Keywords (must include 1-2): {", ".join(keywords[0:3])}
Long-tail Keywords (natural integration): {", ".join(keywords[3:6])}
All Available Keywords: {", ".join(keywords)}

TITLE RULES:
- Use a different psychological trigger per title (curiosity gap, urgency, authority, personal stakes, results preview)
- 50-60 characters for full mobile visibility
- Promise exactly what the script delivers
- Include 1-2 primary keywords naturally

Create 5 distinct title options. Return as numbered list 1-5."""


def keyword_research_prompt(content: str, niche: str = "", content_chars: int = 1200) -> str:
    return f"""
Perform comprehensive SEO and YouTube algorithm-optimized keyword research for a YouTube video based on the following content:

Video Content: {excerpt(content, content_chars)}
Niche Context: {niche or "General Content"}

Generate a keyword strategy covering:
1. PRIMARY KEYWORDS (8-12): high search volume, directly relevant
2. LONG-TAIL KEYWORDS (12-15): specific 3-6 word phrases with clear intent
3. SEMANTIC KEYWORDS (8-10): LSI terms and related concepts
4. QUESTION KEYWORDS (6-8): voice search and featured snippet queries
5. TRENDING HASHTAGS (6-8): evergreen and trending tags
6. COMPETITIVE KEYWORDS (5-7): underserved gap opportunities
7. RELATED TOPICS (8-10): adjacent topics for topical authority
8. YOUTUBE SEARCH KEYWORDS (6-8): terms that perform in YouTube search
9. BROWSE FEED KEYWORDS (5-7): terms that trigger suggested videos
10. SHORTS OPTIMIZED KEYWORDS (5-8): terms for the Shorts feed
11. ALGORITHM BOOST KEYWORDS (4-6): high engagement trigger words
12. RETENTION KEYWORDS (4-6): watch time extending terms
13. ENGAGEMENT TRIGGER KEYWORDS (4-6): comment and share starters

Format the response as JSON with the following structure:
{{
  "primaryKeywords": [],
  "longTailKeywords": [],
  "semanticKeywords": [],
  "questionKeywords": [],
  "trendingHashtags": [],
  "competitiveKeywords": [],
  "relatedTopics": [],
  "youtubeSearchKeywords": [],
  "browseFeedKeywords": [],
  "shortsOptimizedKeywords": [],
  "algorithmBoostKeywords": [],
  "retentionKeywords": [],
  "engagementTriggerKeywords": []
}}"""


def breakdown_prompt(script: str) -> str:
    return f"""
Break down the following script into individual sentences that are suitable for creating images/visuals. Each sentence should:
1. Be complete and make sense on its own
2. Be suitable for visual representation
3. Be concise but meaningful
4. Flow naturally when combined

Script:
{script}

Return the sentences as a JSON array of strings, like this:
["sentence 1", "sentence 2", "sentence 3", ...]"""


def style_selection_prompt(title: str, script: str) -> str:
    styles = "\n".join(
        f"{number}. {name} - {summary}"
        for number, (name, summary) in enumerate(STYLE_SUMMARIES.items(), start=1)
    )
    return f"""
Analyze the following video content and select the most appropriate visual style:

Title: {title}
Script Preview: {excerpt(script, 500)}...

Available styles:
{styles}

For self-development, motivational, personal growth, or inspirational content, prioritize "beyondbeing" style.

Return only the style name (one word) that best matches this content."""


def image_prompt_prompt(sentence: str, style: StyleSelection) -> str:
    return f"""
Create a premium image generation prompt for the following script sentence, designed as standalone professional visual content:

Sentence: "{sentence}"

BASE STYLE (MUST BE MAINTAINED):
{style.template}

REQUIREMENTS:
1. STYLE CONSISTENCY: keep the exact same {style.style} aesthetic as every other image in this video
2. COMPOSITION: rule of thirds, leading lines, depth of field and professional framing
3. LIGHTING: studio-quality key, fill and rim lighting for dimensional depth
4. COLOR: curated palette with strategic contrast
5. SYMBOLISM: visual metaphors that reinforce the sentence's message
6. Clean negative space suitable for text overlay, but no text in the image

CRITICAL: Begin your prompt with "{style.template}, " followed by the sentence-specific details.

Generate only the complete image prompt."""


def editor_keywords_prompt(sentence: str) -> str:
    return f"""
Extract 3-6 key words or phrases that ACTUALLY APPEAR in the following script sentence. These keywords will help video editors find relevant B-roll footage.

Script Sentence: "{sentence}"

Requirements:
1. ONLY extract words/phrases that exist in the sentence - do not create new keywords
2. Focus on important nouns, action verbs, and visual elements
3. Use the exact words as they appear in the sentence
4. Separate with commas

Examples:
- For "The market crashed in 2008 causing widespread panic": market, crashed, 2008, widespread panic
- For "She walked through the forest path": walked, forest, path

Return only the comma-separated keywords that exist in the sentence, nothing else."""


def thumbnail_prompt(title: str, script: str, style_template: str, script_chars: int = 300) -> str:
    return f"""
Create a premium YouTube thumbnail optimized for maximum engagement and professional appeal.

Video Title: "{title}"
Content Context: {excerpt(script, script_chars)}...
Visual Style Foundation: {style_template}

THUMBNAIL SPECIFICATIONS:
1. Clean, modern design with a single dominant focal point
2. Professional composition using the rule of thirds
3. Inspiring visual elements that convey growth and transformation
4. High-contrast elements for visibility in YouTube's interface
5. Horizontal 16:9 format, readable at small mobile sizes
6. FULL CANVAS COVERAGE edge-to-edge with NO EMPTY SPACE
7. NO TEXT OVERLAYS OR WRITTEN CONTENT - pure visual storytelling only

Generate a detailed image prompt that creates this thumbnail."""


def prompt_enhancement_prompt(prompt: str, spec: ImageModelSpec, size: str, is_thumbnail: bool) -> str:
    alchemy = (
        "Alchemy ENABLED: use complex lighting scenarios, advanced materials and professional effects"
        if spec.supports_alchemy
        else "Alchemy DISABLED: keep compositions, lighting and materials simple and direct"
    )
    return f"""You are an expert image prompt optimization specialist.

Current Generation Context:
- Target Model: {spec.display_name or spec.model}
- Model Specialty: {spec.preset_style or "general"}
- {alchemy}
- Output Type: {"YouTube Thumbnail (MOBILE-FIRST)" if is_thumbnail else "Video Content Image"}
- Canvas Size: {size} ({spec.max_width}x{spec.max_height} max)

PROMPT STRUCTURE:
1. Lead with a clear artistic style (cinematic, photographic or creative)
2. Define the main subject with specific descriptive details
3. Specify camera angle, framing and lighting setup
4. Add professional quality markers and a specific color palette
5. Remove any text overlay references
6. Keep the prompt between 200 and 300 words

Keep the original prompt's opening style description unchanged.

Original Prompt to Enhance:

{prompt}"""


def thumbnail_suggestions_prompt(video: VideoData, script: str) -> str:
    return f"""
You are a YouTube thumbnail design expert. Create two thumbnail concepts for this video.

- Title: {video.title or "YouTube Video"}
- Channel: {video.channel_title or "YouTube Channel"}
- Script Content: {excerpt(script, 500) or "No script available"}...

STYLE 1: EMOTIONAL VIRAL ENGAGEMENT
Bold contrast, expressive focal subject, urgency colors.

STYLE 2: PROFESSIONAL AUTHORITY
Clean layout, trust signals, cool professional palette.

For each concept, provide:
1. Core visual strategy and expected viewer response
2. Color palette with hex codes
3. Typography sizes and placement
4. Composition and focal point
5. Mobile readability notes"""


THUMBNAIL_SUGGESTIONS_FALLBACK = """THUMBNAIL SUGGESTION ERROR: Unable to generate thumbnail suggestions. Please create thumbnails manually.

Style 1: Emotional/Dramatic - Use bright colors, close-up faces, and emotional expressions
Style 2: Professional/Clean - Use minimal design, clear typography, and visual metaphors"""


HEALTH_CHECK_PROMPT = 'Say "AI service is working" if you can respond.'
