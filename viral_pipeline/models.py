"""
Value objects passed between pipeline stages.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class VideoData:
    """Source video as supplied by the caller, optionally enriched by metadata."""
    video_id: str
    title: str = ""
    description: str = ""
    channel_title: str = ""
    duration: str = ""
    url: str = ""
    transcript: str = ""

    @property
    def source_text(self) -> str:
        """Transcript when present, title otherwise."""
        return self.transcript or self.title

    def merge_metadata(self, metadata: Dict[str, Any]) -> "VideoData":
        """
        Overlay reliable metadata on the caller's data.

        Metadata wins for the core descriptive fields; the caller's transcript
        is kept when present.

        Recognized keys: ``title``, ``description``, ``duration`` and either
        spelling of ``channel_title``/``channelTitle``,
        ``canonical_url``/``canonicalUrl`` and
        ``transcript_text``/``transcriptText``. Other keys are ignored.
        """
        def pick(*keys):
            for key in keys:
                if metadata.get(key):
                    return metadata[key]
            return None

        return VideoData(
            video_id=self.video_id,
            title=pick("title") or self.title,
            description=pick("description") or self.description,
            channel_title=pick("channel_title", "channelTitle") or self.channel_title,
            duration=pick("duration") or self.duration,
            url=pick("canonical_url", "canonicalUrl") or self.url,
            transcript=self.transcript or pick("transcript_text", "transcriptText") or "",
        )


@dataclass
class ScriptContext:
    """Analysis of a source script, consumed by script generation."""
    intent: str = "Engage and inform audience"
    audience: str = "General viewers"
    vibe: str = "Conversational and engaging"
    core_message: str = "Value-driven content"
    hook_style: str = "Direct approach"
    cta_style: str = "Educational"
    content_pillars: List[str] = field(default_factory=lambda: ["information", "engagement", "value"])
    audience_language: str = "Clear and accessible"
    video_format: str = "Educational content"

    # JSON keys the analysis prompt asks for
    JSON_KEYS = {
        "originalScriptIntent": "intent",
        "targetAudience": "audience",
        "contentVibe": "vibe",
        "coreMessage": "core_message",
        "hookStyle": "hook_style",
        "callToActionApproach": "cta_style",
        "contentPillars": "content_pillars",
        "audienceSpecificLanguage": "audience_language",
        "videoFormat": "video_format",
    }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ScriptContext":
        """Build from the analysis JSON; missing or empty fields keep defaults."""
        values = {}
        for json_key, attr in cls.JSON_KEYS.items():
            value = data.get(json_key)
            if attr == "content_pillars":
                if isinstance(value, list) and value:
                    values[attr] = [str(item) for item in value]
            elif isinstance(value, str) and value.strip():
                values[attr] = value.strip()
        return cls(**values)


@dataclass
class TitleOptions:
    options: List[str] = field(default_factory=list)
    recommended: str = "Optimized Title"


@dataclass
class StyleSelection:
    """Visual style chosen once per video."""
    style: str
    template: str
    description: str = ""


@dataclass
class ImagePrompt:
    sentence: str
    prompt: str
    style: str


@dataclass
class GenerationRequest:
    """One billable image generation."""
    prompt: str
    model: str
    size: str
    quality: str = "standard"
    video_id: Optional[str] = None
    enhance_prompt: bool = False
    is_thumbnail: bool = False


@dataclass
class GenerationResult:
    url: str
    prompt: str
    model: str
    provider: str
    size: str
    cost: float
    enhanced_prompt: Optional[str] = None
    revised_prompt: Optional[str] = None


@dataclass
class GeneratedImage:
    """A per-sentence image that was generated and uploaded."""
    index: int
    sentence: str
    prompt: str
    style: str
    original_url: str
    uploaded_url: str
    file_name: str
    cost: float


@dataclass
class Thumbnail:
    title: str
    thumbnail_prompt: str
    style: str
    image: GenerationResult
    uploaded_url: Optional[str] = None


@dataclass
class EnhancementResult:
    """Everything one enhancement run produced for a video."""
    video_id: str
    script: str
    description: str
    titles: TitleOptions
    keywords: Dict[str, List[str]]
    script_sentences: List[str] = field(default_factory=list)
    image_prompts: List[ImagePrompt] = field(default_factory=list)
    video_style: Optional[StyleSelection] = None
    editor_keywords: List[str] = field(default_factory=list)
    generated_images: List[GeneratedImage] = field(default_factory=list)
    thumbnail: Optional[Thumbnail] = None
    cost_summary: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
