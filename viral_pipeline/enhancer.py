"""
Content enhancement orchestrator.

Sequences one video's regeneration: keyword research, script, title and
description, sentence breakdown, image prompts, thumbnail and per-sentence
images. All billable image calls go through the instance's cost ledger.
"""

import asyncio
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from loguru import logger

from .clients import PipelineClients
from .config import PipelineConfig
from .content import prompts
from .content.seo import default_keywords, normalize_keywords, parse_title_options
from .content.styles import default_style, get_style
from .costs import CostLedger
from .errors import AllProvidersExhausted, MalformedProviderResponse, UnsupportedConfiguration
from .image_models import ImageProvider, get_image_model
from .llm.dispatcher import FallbackDispatcher
from .llm.providers import build_text_providers
from .media.image_providers import build_image_providers
from .media.storage import LocalFolderUploader, UploadResult, download_image, storage_path
from .models import (
    EnhancementResult,
    GeneratedImage,
    GenerationRequest,
    GenerationResult,
    ImagePrompt,
    ScriptContext,
    StyleSelection,
    Thumbnail,
    TitleOptions,
    VideoData,
)
from .utils.text_processing import normalize_whitespace, split_sentences


DEFAULT_THUMBNAIL_STYLE = "eye-catching and clickable design"


def ensure_style_prefix(prompt: str, template: str) -> str:
    """Make sure an image prompt opens with the video's style template."""
    text = prompt.strip().strip('"').strip()
    if text.startswith(template):
        return text
    return f"{template}, {text}"


class ContentEnhancer:
    """
    Generation orchestrator and cost guard for enhancement runs.

    Owns its CostLedger; two enhancers never share cost state.
    """

    def __init__(
        self,
        config: PipelineConfig,
        dispatcher: FallbackDispatcher,
        image_providers: Optional[Dict[ImageProvider, Any]] = None,
        uploader=None,
        ledger: Optional[CostLedger] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        downloader: Callable[..., Awaitable[bytes]] = download_image,
    ):
        """
        Args:
            config: Validated pipeline configuration
            dispatcher: Text-provider fallback dispatcher
            image_providers: Image providers by backend
            uploader: Object storage with ``async upload(data, destination)``
            ledger: Cost ledger (a fresh one is created if omitted)
            sleep: Awaitable delay used between batch image calls
            downloader: Coroutine fetching image bytes from a URL
        """
        self.config = config
        self.dispatcher = dispatcher
        self.image_providers = image_providers or {}
        self.uploader = uploader
        self.ledger = ledger or CostLedger(config.costs)
        self._sleep = sleep
        self._download = downloader

    @classmethod
    def from_env(
        cls,
        config: Optional[PipelineConfig] = None,
        uploader=None,
        output_dir: Union[str, Path] = "output",
    ) -> "ContentEnhancer":
        """
        Build an enhancer with real providers from environment variables.

        Args:
            config: Pipeline configuration (read from the environment if omitted)
            uploader: Storage uploader (a LocalFolderUploader on output_dir if omitted)
            output_dir: Root folder for the default uploader

        Returns:
            Ready-to-use ContentEnhancer
        """
        config = config or PipelineConfig.from_env()
        timeout = config.timeouts.request_timeout_seconds
        clients = PipelineClients.from_env(timeout=timeout)
        dispatcher = FallbackDispatcher(
            build_text_providers(clients, config.providers, timeout),
            config.providers.priorities,
        )
        return cls(
            config,
            dispatcher,
            image_providers=build_image_providers(clients, config),
            uploader=uploader or LocalFolderUploader(output_dir),
        )

    # ------------------------------------------------------------------
    # Script and metadata
    # ------------------------------------------------------------------

    async def analyze_script_context(self, script: str, video: VideoData) -> ScriptContext:
        """
        Analyze the source script for regeneration.

        Falls back to the default ScriptContext if every provider fails.
        """
        try:
            data = await self.dispatcher.generate_structured(
                "context",
                prompts.context_analysis_prompt(script, video),
                dict,
                max_tokens=800,
                video_id=video.video_id,
            )
        except AllProvidersExhausted as exc:
            logger.warning(f"Script context analysis failed for video {video.video_id}, using defaults: {exc}")
            return ScriptContext()
        logger.info(f"Script context analyzed for video {video.video_id}")
        return ScriptContext.from_json(data)

    async def perform_keyword_research(
        self,
        content: str,
        niche: str = "",
        video_id: Optional[str] = None,
    ) -> Dict[str, List[str]]:
        """
        Research SEO keywords for the content.

        Returns:
            Full keyword taxonomy; all categories empty if research fails
        """
        try:
            data = await self.dispatcher.generate_structured(
                "keywords",
                prompts.keyword_research_prompt(content, niche, self.config.script.keyword_excerpt_chars),
                dict,
                max_tokens=1000,
                temperature=0.5,
                system=prompts.KEYWORD_SYSTEM,
                video_id=video_id,
            )
        except AllProvidersExhausted as exc:
            logger.warning(f"Keyword research failed for video {video_id}, continuing without keywords: {exc}")
            return default_keywords()
        logger.info("Keywords researched")
        return normalize_keywords(data)

    async def generate_script(
        self,
        transcript: str,
        video: VideoData,
        context: Optional[ScriptContext] = None,
        keywords: Optional[Dict[str, List[str]]] = None,
    ) -> str:
        """
        Regenerate the script from the source transcript.

        Raises:
            AllProvidersExhausted: If no provider produced a script
        """
        if context is None:
            context = await self.analyze_script_context(transcript, video)

        script = await self.dispatcher.generate(
            "script",
            prompts.script_prompt(
                transcript, video, context, keywords, self.config.script.description_excerpt_chars
            ),
            max_tokens=2000,
            temperature=0.7,
            system=prompts.SCRIPT_SYSTEM,
            video_id=video.video_id,
        )
        script = normalize_whitespace(script)
        logger.info(f"Script generated for video {video.video_id} ({len(script)} chars)")
        return script

    async def generate_description(self, script: str, keywords: List[str], video_id: Optional[str] = None) -> str:
        description = await self.dispatcher.generate(
            "description",
            prompts.description_prompt(script, keywords),
            max_tokens=800,
            temperature=0.6,
            system=prompts.DESCRIPTION_SYSTEM,
            video_id=video_id,
        )
        logger.info("Description generated")
        return description

    async def generate_titles(
        self,
        script: str,
        original_title: str,
        keywords: List[str],
        video_id: Optional[str] = None,
    ) -> TitleOptions:
        response = await self.dispatcher.generate(
            "title",
            prompts.title_prompt(script, original_title, keywords, self.config.script.title_excerpt_chars),
            max_tokens=400,
            temperature=0.8,
            system=prompts.TITLE_SYSTEM,
            video_id=video_id,
        )
        titles = parse_title_options(response)
        logger.info(f"Extracted {len(titles.options)} clean titles")
        return titles

    async def generate_thumbnail_suggestions(self, video: VideoData, script: str) -> str:
        """Two written thumbnail concepts, or a fixed fallback text on failure."""
        try:
            suggestions = await self.dispatcher.generate(
                "thumbnail_suggestions",
                prompts.thumbnail_suggestions_prompt(video, script),
                max_tokens=1000,
                temperature=0.7,
                video_id=video.video_id,
            )
        except AllProvidersExhausted as exc:
            logger.error(f"Thumbnail suggestions failed for video {video.video_id}: {exc}")
            return prompts.THUMBNAIL_SUGGESTIONS_FALLBACK
        logger.info(f"Thumbnail suggestions generated for video {video.video_id}")
        return suggestions

    # ------------------------------------------------------------------
    # Sentence pipeline
    # ------------------------------------------------------------------

    async def breakdown_script(self, script: str, video_id: Optional[str] = None) -> List[str]:
        """
        Split a script into sentences suitable for one visual each.

        A script the rule-based splitter sees as a single sentence is returned
        as-is without a provider call.

        Raises:
            AllProvidersExhausted: If every provider failed
            MalformedProviderResponse: If the decoded array holds no sentences
        """
        if not script or not script.strip():
            return []
        if len(split_sentences(script)) <= 1:
            return [script.strip()]

        data = await self.dispatcher.generate_structured(
            "breakdown",
            prompts.breakdown_prompt(script),
            list,
            max_tokens=1000,
            temperature=0.3,
            system=prompts.BREAKDOWN_SYSTEM,
            video_id=video_id,
        )
        sentences = [str(item).strip() for item in data if str(item).strip()]
        if not sentences:
            raise MalformedProviderResponse("breakdown", "sentence array was empty", "breakdown")
        logger.info(f"Script: {len(sentences)} sentences")
        return sentences

    async def select_video_style(self, script: str, title: str, video_id: Optional[str] = None) -> StyleSelection:
        """Pick one visual style for the whole video; the default style on any failure."""
        try:
            answer = await self.dispatcher.generate(
                "style",
                prompts.style_selection_prompt(title, script),
                max_tokens=20,
                temperature=0.3,
                system=prompts.STYLE_SYSTEM,
                video_id=video_id,
            )
        except AllProvidersExhausted as exc:
            logger.warning(f"Style selection failed for video {video_id}, using default: {exc}")
            return default_style()
        style = get_style(answer)
        logger.info(f"Style: {style.style}")
        return style

    async def generate_image_prompts(
        self,
        sentences: List[str],
        style: Optional[StyleSelection] = None,
        video: Optional[VideoData] = None,
    ) -> Tuple[List[ImagePrompt], StyleSelection]:
        """
        Derive one image prompt per sentence, all sharing one style.

        Returns:
            (prompts in sentence order, the style used)
        """
        video_id = video.video_id if video else None
        if style is None:
            style = await self.select_video_style(" ".join(sentences), video.title if video else "", video_id)

        image_prompts = []
        for sentence in sentences:
            text = await self.dispatcher.generate(
                "image_prompt",
                prompts.image_prompt_prompt(sentence, style),
                max_tokens=200,
                temperature=0.6,
                system=prompts.IMAGE_PROMPT_SYSTEM,
                video_id=video_id,
            )
            image_prompts.append(ImagePrompt(
                sentence=sentence,
                prompt=ensure_style_prefix(text, style.template),
                style=style.style,
            ))

        logger.info(f"Generated {len(image_prompts)} prompts")
        return image_prompts, style

    async def generate_editor_keywords(self, sentences: List[str], video_id: Optional[str] = None) -> List[str]:
        """Comma-separated B-roll keywords found in each sentence."""
        keywords = []
        for sentence in sentences:
            keywords.append(await self.dispatcher.generate(
                "editor_keywords",
                prompts.editor_keywords_prompt(sentence),
                max_tokens=100,
                temperature=0.3,
                system=prompts.EDITOR_KEYWORDS_SYSTEM,
                video_id=video_id,
            ))
        logger.info(f"Keywords: {len(keywords)} sentences")
        return keywords

    # ------------------------------------------------------------------
    # Billable image generation
    # ------------------------------------------------------------------

    def estimate_image_cost(self, model: str, quality: str = "standard", enhance: bool = False) -> float:
        """Budgeted cost of one image, including optional prompt enhancement."""
        spec = get_image_model(model)
        cost = self.ledger.estimate_cost(spec.price_key(quality))
        if enhance:
            cost += self.config.costs.prompt_enhancement_cost
        return cost

    async def enhance_prompt(self, request: GenerationRequest) -> str:
        """
        Rewrite an image prompt for the target model.

        Falls back to the original prompt if every provider fails.
        """
        spec = get_image_model(request.model)
        try:
            enhanced = await self.dispatcher.generate(
                "prompt_enhancement",
                prompts.prompt_enhancement_prompt(request.prompt, spec, request.size, request.is_thumbnail),
                max_tokens=800,
                video_id=request.video_id,
            )
        except AllProvidersExhausted as exc:
            logger.warning(f"Prompt enhancement failed for video {request.video_id}, using original: {exc}")
            return request.prompt

        if request.video_id:
            self.ledger.track_cost(request.video_id, self.config.costs.prompt_enhancement_cost, "prompt-enhancement")
        logger.debug(f"Original prompt length: {len(request.prompt)}, enhanced: {len(enhanced)}")
        return enhanced

    async def generate_image(self, request: GenerationRequest) -> GenerationResult:
        """
        Generate one billable image.

        The budget is checked before any provider is called.

        Raises:
            BudgetExceeded: If the video cannot afford the image
            UnsupportedConfiguration: If no provider serves the model
            ProviderCallFailed: If the image provider fails
        """
        spec = get_image_model(request.model)
        provider = self.image_providers.get(spec.provider)
        if provider is None:
            raise UnsupportedConfiguration(f"No image provider configured for {spec.provider.value}")

        enhance = request.enhance_prompt and bool(request.video_id)
        if request.video_id:
            self.ledger.ensure_within_budget(
                request.video_id, self.estimate_image_cost(spec.model, request.quality, enhance)
            )

        prompt = await self.enhance_prompt(request) if enhance else request.prompt

        image = await provider.generate(prompt, model=spec.model, size=request.size, quality=request.quality)

        cost = self.ledger.estimate_cost(spec.price_key(request.quality))
        if request.video_id:
            self.ledger.track_cost(request.video_id, cost, "image")
        self.ledger.record_image()
        logger.info(f"Generated {spec.display_name} image (Cost: ${cost:.4f})")

        return GenerationResult(
            url=image.url,
            prompt=request.prompt,
            model=spec.model,
            provider=spec.provider.value,
            size=request.size,
            cost=cost,
            enhanced_prompt=prompt if prompt != request.prompt else None,
            revised_prompt=image.revised_prompt,
        )

    async def upload_image(self, image_url: str, file_name: str, video_id: str, folder_type: str = "images") -> UploadResult:
        """Download a provider-hosted image and store it permanently."""
        if self.uploader is None:
            raise UnsupportedConfiguration("No storage uploader configured")
        data = await self._download(image_url, timeout=self.config.timeouts.download_timeout_seconds)
        result = await self.uploader.upload(data, storage_path(video_id, folder_type, file_name))
        logger.info(f"Uploaded {folder_type} {file_name} via {result.provider}: {result.public_url}")
        return result

    async def generate_thumbnail(
        self,
        title: str,
        script: str,
        video_id: str,
        style: Optional[StyleSelection] = None,
    ) -> Thumbnail:
        """
        Generate and upload the 16:9 thumbnail.

        Raises:
            BudgetExceeded: If the video cannot afford one more image
        """
        images = self.config.images
        self.ledger.ensure_within_budget(
            video_id, self.estimate_image_cost(images.model, images.quality, images.enhance_prompts)
        )

        template = style.template if style else DEFAULT_THUMBNAIL_STYLE
        thumbnail_prompt = await self.dispatcher.generate(
            "thumbnail_prompt",
            prompts.thumbnail_prompt(title, script, template, self.config.script.thumbnail_excerpt_chars),
            max_tokens=200,
            temperature=0.7,
            system=prompts.THUMBNAIL_SYSTEM,
            video_id=video_id,
        )

        image = await self.generate_image(GenerationRequest(
            prompt=thumbnail_prompt,
            model=images.model,
            size=images.thumbnail_size,
            quality=images.quality,
            video_id=video_id,
            enhance_prompt=images.enhance_prompts,
            is_thumbnail=True,
        ))
        upload = await self.upload_image(image.url, f"{video_id}_thumbnail.jpg", video_id, "thumbnails")

        logger.info(f"Generated thumbnail for video {video_id}")
        return Thumbnail(
            title=title,
            thumbnail_prompt=thumbnail_prompt,
            style=style.style if style else "custom",
            image=image,
            uploaded_url=upload.public_url,
        )

    async def generate_video_images(
        self,
        image_prompts: List[ImagePrompt],
        video_id: str,
        max_images: Optional[int] = None,
    ) -> List[GeneratedImage]:
        """
        Generate, download and upload one image per prompt, in order.

        The batch is truncated to what the remaining budget affords. A failed
        item is logged and skipped; the rest of the batch continues.

        Args:
            image_prompts: Prompts in sentence order
            video_id: Video the spend is charged to
            max_images: Cap on the batch (0 = unlimited); configuration if omitted

        Returns:
            Successfully generated images in original order
        """
        if not image_prompts:
            return []

        images = self.config.images
        limit = images.max_images if max_images is None else max_images
        batch = list(image_prompts[:limit]) if limit > 0 else list(image_prompts)

        unit_cost = self.estimate_image_cost(images.model, images.quality, images.enhance_prompts)
        estimated = unit_cost * len(batch)
        if not self.ledger.is_within_budget(video_id, estimated):
            affordable = self.ledger.affordable_count(video_id, unit_cost) if unit_cost > 0 else len(batch)
            dropped = len(batch) - affordable
            logger.warning(
                f"Total estimated cost (${estimated:.4f}) would exceed budget for video {video_id}: "
                f"generating {affordable} of {len(batch)} images, dropping {dropped}"
            )
            batch = batch[:affordable]
            if not batch:
                logger.warning(f"Budget for video {video_id} cannot afford a single image")
                return []

        generated = []
        for position, item in enumerate(batch, start=1):
            if position > 1:
                await self._sleep(images.request_delay_seconds)
            try:
                logger.info(f"Generating image {position}/{len(batch)} for video {video_id}")
                result = await self.generate_image(GenerationRequest(
                    prompt=item.prompt,
                    model=images.model,
                    size=images.size,
                    quality=images.quality,
                    video_id=video_id,
                    enhance_prompt=images.enhance_prompts,
                ))
                file_name = f"{video_id}_image_{position:03d}.jpg"
                upload = await self.upload_image(result.url, file_name, video_id)
            except Exception as exc:
                logger.error(f"Failed to generate image {position} for video {video_id}: {exc}")
                continue

            generated.append(GeneratedImage(
                index=position,
                sentence=item.sentence,
                prompt=item.prompt,
                style=item.style,
                original_url=result.url,
                uploaded_url=upload.public_url,
                file_name=file_name,
                cost=result.cost,
            ))

        total = sum(image.cost for image in generated)
        logger.info(f"Generated {len(generated)} images for video {video_id} (Total cost: ${total:.4f})")
        return generated

    # ------------------------------------------------------------------
    # Top level
    # ------------------------------------------------------------------

    async def enhance_content(self, video: VideoData, metadata_provider=None) -> EnhancementResult:
        """
        Run the full enhancement pipeline for one video.

        Args:
            video: Caller-supplied video data
            metadata_provider: Optional source with ``async get_metadata(video_id)``
                returning a dict; see ``VideoData.merge_metadata`` for the keys read

        Returns:
            EnhancementResult with the video's cost summary

        Raises:
            PipelineError: If script generation or any later stage fails
        """
        video_id = video.video_id
        logger.info(f"AI enhancement for video {video_id}...")

        if metadata_provider is not None:
            try:
                metadata = await metadata_provider.get_metadata(video_id)
                video = video.merge_metadata(metadata or {})
                logger.info(f"Using reliable metadata context for {video_id}")
            except Exception as exc:
                logger.warning(f"Could not retrieve reliable metadata for {video_id}, using caller data: {exc}")

        keywords = await self.perform_keyword_research(video.source_text, video_id=video_id)
        script = await self.generate_script(video.source_text, video, None, keywords)

        primary = keywords["primaryKeywords"]
        description, titles = await asyncio.gather(
            self.generate_description(script, primary, video_id),
            self.generate_titles(script, video.title, primary, video_id),
        )

        sentences: List[str] = []
        image_prompts: List[ImagePrompt] = []
        style: Optional[StyleSelection] = None
        editor_keywords: List[str] = []
        if self.config.script.enable_breakdown:
            sentences = await self.breakdown_script(script, video_id)
            if sentences:
                logger.info("Script breakdown enabled - generating prompts and keywords")
                (image_prompts, style), editor_keywords = await asyncio.gather(
                    self.generate_image_prompts(sentences, None, video),
                    self.generate_editor_keywords(sentences, video_id),
                )

        thumbnail = None
        generated_images: List[GeneratedImage] = []
        if self.config.images.enabled:
            logger.info("Image generation enabled - generating thumbnail and images")
            thumbnail = await self.generate_thumbnail(titles.recommended, script, video_id, style)
            if image_prompts:
                generated_images = await self.generate_video_images(image_prompts, video_id)
        else:
            logger.info("Image generation disabled - skipping actual image generation")

        cost_summary = self.ledger.video_summary(video_id)
        cost_summary["images_generated"] = len(generated_images)
        logger.info(f"AI content enhancement completed for video {video_id}")

        return EnhancementResult(
            video_id=video_id,
            script=script,
            description=description,
            titles=titles,
            keywords=keywords,
            script_sentences=sentences,
            image_prompts=image_prompts,
            video_style=style,
            editor_keywords=editor_keywords,
            generated_images=generated_images,
            thumbnail=thumbnail,
            cost_summary=cost_summary,
        )

    def get_cost_summary(self) -> Dict[str, Any]:
        """Cost summary across every video this enhancer processed."""
        return self.ledger.get_summary()

    async def health_check(self) -> bool:
        """
        Ping every configured text provider (and Leonardo, if configured).

        Returns:
            True if at least one service responded

        Raises:
            AllProvidersExhausted: If nothing responded
        """
        errors: Dict[str, str] = {}
        working = 0
        for name, provider in self.dispatcher.providers.items():
            try:
                await provider.generate(prompts.HEALTH_CHECK_PROMPT, model=provider.model, max_tokens=50, temperature=0.1)
            except Exception as exc:
                errors[name] = str(exc)
                logger.warning(f"{name} health check failed: {exc}")
                continue
            working += 1
            logger.info(f"AI service health check passed ({name})")

        leonardo = self.image_providers.get(ImageProvider.LEONARDO)
        if leonardo is not None:
            try:
                if await leonardo.check_account():
                    working += 1
                    logger.info("AI service health check passed (leonardo)")
            except Exception as exc:
                errors["leonardo"] = str(exc)
                logger.warning(f"Leonardo AI health check failed: {exc}")

        total = len(self.dispatcher.providers) + (1 if leonardo is not None else 0)
        if not working:
            raise AllProvidersExhausted("health_check", errors)
        logger.info(f"AI service health check: {working}/{total} services working")
        return True
