"""
Image Resolution Pipeline.

Resolves a range of character numbers to images: cache first, then the
wiki for numbers worth looking up, then generation for a lone number that
is still missing. Remote lookups run concurrently in small batches.
"""
import asyncio
import time
from dataclasses import asdict, dataclass
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Tuple

from image_resolver.config import WIKI_IMAGE_DOMAINS
from image_resolver.config.settings import DEFAULT_WIKI_BASE_URL
from image_resolver.data_access.exceptions import StorageError
from image_resolver.data_access.image_cache_repository import ImageCacheRepository
from image_resolver.data_access.image_storage import ImageStorage, scraped_image_key
from image_resolver.exceptions import ImageDownloadError, ScrapeError
from image_resolver.models import GenerationResult, ImageOrigin, ImageResult
from image_resolver.services.admission_controller import AdmissionController
from image_resolver.services.image_extractor import extract_candidate_image
from image_resolver.services.image_fetcher import ImageFetcher
from image_resolver.services.lookup_classifier import is_worth_remote_lookup
from image_resolver.services.scrape_client import ScrapeClient
from image_resolver.utils.number_words import build_page_url
from image_resolver.utils.structured_logger import StructuredLogger, get_structured_logger

# Maximum remote lookups in flight at once
BATCH_SIZE = 5

NO_IMAGE_REASON = 'No image found on page'
SAVE_FAILED_REASON = 'Failed to save image'
UNEXPECTED_FAILURE_REASON = 'Unexpected error while resolving image'
GENERATION_FAILED_REASON = 'Failed to generate image'


class ImageGenerator(Protocol):
    """Generation collaborator: given a number, returns an image or a failure."""

    def generate(self, number: int) -> GenerationResult:
        ...


@dataclass
class ResolutionSummary:
    """
    Counters for one pipeline run.

    Attributes:
        cache_hits: Numbers served from the cache
        skipped: Cache misses the classifier ruled out
        scraped: Numbers dispatched to the scrape service
        found: Numbers resolved to a freshly stored image
        generated: Numbers resolved by generation
        remote_calls: Scrape calls that returned a document
        batches: Batches dispatched
        delay_ms: Admission delay applied
        cancelled: Whether remaining batches were abandoned
    """

    cache_hits: int = 0
    skipped: int = 0
    scraped: int = 0
    found: int = 0
    generated: int = 0
    remote_calls: int = 0
    batches: int = 0
    delay_ms: int = 0
    cancelled: bool = False

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


class ImageResolutionPipeline:
    """
    Orchestrates cache lookup, admission control, scraping and generation.

    All collaborators are passed in; the pipeline holds no state across runs
    except the summary of the last run.
    """

    def __init__(
        self,
        cache_repository: ImageCacheRepository,
        admission_controller: AdmissionController,
        scrape_client: ScrapeClient,
        image_fetcher: ImageFetcher,
        storage: ImageStorage,
        generator: Optional[ImageGenerator] = None,
        wiki_base_url: str = DEFAULT_WIKI_BASE_URL,
        inter_batch_pause_seconds: float = 1.0,
        allowed_image_domains: Iterable[str] = WIKI_IMAGE_DOMAINS,
        classifier: Callable[[int], bool] = is_worth_remote_lookup,
        extractor: Callable[..., Optional[str]] = extract_candidate_image,
        sleep: Callable[[float], object] = asyncio.sleep,
        logger: Optional[StructuredLogger] = None
    ):
        """
        Initialize the pipeline.

        Args:
            cache_repository: Cache index
            admission_controller: Admission controller for remote lookups
            scrape_client: Scrape service client
            image_fetcher: Image downloader
            storage: Image storage for scraped images
            generator: Optional generation collaborator for single numbers
            wiki_base_url: Wiki root used to build page URLs
            inter_batch_pause_seconds: Pause between scrape batches
            allowed_image_domains: Hosts extracted images may come from
            classifier: Predicate deciding which misses are looked up
            extractor: Picks an image URL from a scraped document
            sleep: Coroutine function used for delays and pauses
            logger: Optional structured logger
        """
        self.cache_repository = cache_repository
        self.admission_controller = admission_controller
        self.scrape_client = scrape_client
        self.image_fetcher = image_fetcher
        self.storage = storage
        self.generator = generator
        self.wiki_base_url = wiki_base_url
        self.inter_batch_pause_seconds = inter_batch_pause_seconds
        self.allowed_image_domains = list(allowed_image_domains)
        self.classifier = classifier
        self.extractor = extractor
        self.sleep = sleep
        self.logger = logger or get_structured_logger('ImageResolutionPipeline')
        self.last_summary = ResolutionSummary()

    def resolve_sync(
        self,
        lo: int,
        hi: int,
        is_single_number: bool,
        client_identity: str
    ) -> List[ImageResult]:
        """
        Run resolve() on a fresh event loop.

        Args:
            lo: First number of the range
            hi: Last number of the range
            is_single_number: Whether generation may fill a missing image
            client_identity: Caller identity for admission control

        Returns:
            Results sorted by number
        """
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            return loop.run_until_complete(
                self.resolve(lo, hi, is_single_number, client_identity)
            )
        finally:
            loop.close()

    async def resolve(
        self,
        lo: int,
        hi: int,
        is_single_number: bool,
        client_identity: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[ImageResult]:
        """
        Resolve every number in [lo, hi] to an image or a failure reason.

        Steps:
        1. Cache hits are returned with their stored image.
        2. Misses the classifier rules out are skipped without a remote call.
        3. The admission delay is awaited once before any remote lookup.
        4. Remaining numbers are scraped in batches of BATCH_SIZE, pausing
           between batches; a failure only affects its own number.
        5. Scrape calls that returned a document are recorded for the client.
        6. A lone number still without an image is sent to the generator.

        Cancellation is honoured between batches: numbers in undispatched
        batches are left out of the result.

        Args:
            lo: First number of the range
            hi: Last number of the range
            is_single_number: Whether generation may fill a missing image
            client_identity: Caller identity for admission control
            cancel_event: Optional event that stops further batches

        Returns:
            Results sorted ascending by number
        """
        summary = ResolutionSummary()
        self.last_summary = summary
        results: Dict[int, ImageResult] = {}
        started = time.time()

        cached = self.cache_repository.lookup_range(lo, hi)
        to_scrape: List[int] = []

        for number in range(lo, hi + 1):
            page_url = build_page_url(number, self.wiki_base_url)
            entry = cached.get(number)
            if entry is not None:
                summary.cache_hits += 1
                self.logger.log_lookup_decision(number, 'cache')
                results[number] = ImageResult.found(
                    number,
                    page_url,
                    self.cache_repository.public_url_for(entry),
                    ImageOrigin.CACHE
                )
            elif not self.classifier(number):
                summary.skipped += 1
                self.logger.log_lookup_decision(number, 'skip')
                results[number] = ImageResult.skipped(number, page_url)
            else:
                self.logger.log_lookup_decision(number, 'scrape')
                to_scrape.append(number)

        if to_scrape:
            await self._scrape_all(to_scrape, client_identity, results, summary, cancel_event)

        if is_single_number and lo == hi and self.generator is not None:
            current = results.get(lo)
            if current is not None and not current.has_image:
                results[lo] = await self._generate(lo, current)
                if results[lo].has_image:
                    summary.generated += 1

        self.logger.info(
            f'Resolved {len(results)} of {hi - lo + 1} numbers',
            operation='resolve',
            range_start=lo,
            range_end=hi,
            duration_ms=(time.time() - started) * 1000,
            **summary.to_dict()
        )

        return [results[number] for number in sorted(results)]

    async def _scrape_all(
        self,
        numbers: List[int],
        client_identity: str,
        results: Dict[int, ImageResult],
        summary: ResolutionSummary,
        cancel_event: Optional[asyncio.Event]
    ) -> None:
        summary.delay_ms = self.admission_controller.compute_delay(client_identity)
        if summary.delay_ms > 0:
            await self.sleep(summary.delay_ms / 1000)

        batches = [
            numbers[start:start + BATCH_SIZE]
            for start in range(0, len(numbers), BATCH_SIZE)
        ]

        for index, batch in enumerate(batches):
            if cancel_event is not None and cancel_event.is_set():
                summary.cancelled = True
                self.logger.warning(
                    'Resolution cancelled',
                    operation='resolve',
                    batches_dispatched=index,
                    batches_total=len(batches)
                )
                break

            if index > 0 and self.inter_batch_pause_seconds > 0:
                await self.sleep(self.inter_batch_pause_seconds)

            summary.batches += 1
            summary.scraped += len(batch)
            outcomes = await asyncio.gather(
                *(self._resolve_remote(number) for number in batch),
                return_exceptions=True
            )

            for number, outcome in zip(batch, outcomes):
                if isinstance(outcome, BaseException):
                    self.logger.error(
                        f'Unexpected failure resolving {number}',
                        operation='resolve_remote',
                        error=outcome,
                        number=number
                    )
                    result = ImageResult.failed(
                        number,
                        build_page_url(number, self.wiki_base_url),
                        UNEXPECTED_FAILURE_REASON
                    )
                    returned_document = False
                else:
                    result, returned_document = outcome

                results[number] = result
                if returned_document:
                    summary.remote_calls += 1
                if result.has_image:
                    summary.found += 1

        self.admission_controller.record_calls(client_identity, summary.remote_calls)

    async def _resolve_remote(self, number: int) -> Tuple[ImageResult, bool]:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self._resolve_remote_blocking, number)

    def _resolve_remote_blocking(self, number: int) -> Tuple[ImageResult, bool]:
        """
        Scrape, extract, download, store and cache one number.

        Returns:
            The result and whether the scrape service returned a document
        """
        page_url = build_page_url(number, self.wiki_base_url)

        try:
            document = self.scrape_client.fetch_document(page_url)
        except ScrapeError as e:
            self.logger.warning(
                f'Scrape failed for {number}',
                operation='scrape',
                number=number,
                error_message=str(e)
            )
            return ImageResult.failed(number, page_url, str(e)), False

        image_url = self.extractor(document, number, self.allowed_image_domains)
        if not image_url:
            return ImageResult.failed(number, page_url, NO_IMAGE_REASON), True

        try:
            image = self.image_fetcher.download(image_url)
        except ImageDownloadError as e:
            self.logger.warning(
                f'Download failed for {number}',
                operation='download',
                number=number,
                image_url=image_url,
                error_message=str(e)
            )
            return ImageResult.failed(number, page_url, str(e)), True

        key = scraped_image_key(number, image.content_type)
        try:
            self.storage.put_image(key, image.data, image.content_type)
        except StorageError:
            return ImageResult.failed(number, page_url, SAVE_FAILED_REASON), True

        self.cache_repository.upsert(number, key, image_url)

        return ImageResult.found(
            number,
            page_url,
            self.storage.public_url(key),
            ImageOrigin.FRESHLY_SCRAPED
        ), True

    async def _generate(self, number: int, current: ImageResult) -> ImageResult:
        self.logger.log_lookup_decision(number, 'generate')
        loop = asyncio.get_event_loop()
        try:
            generation = await loop.run_in_executor(None, self.generator.generate, number)
        except Exception as e:
            self.logger.error(
                f'Generation failed for {number}',
                operation='generate',
                error=e,
                number=number
            )
            return ImageResult.failed(number, current.source_page_url, GENERATION_FAILED_REASON)

        if generation.success and generation.image_url:
            return ImageResult.found(
                number,
                current.source_page_url,
                generation.image_url,
                ImageOrigin.AI_GENERATED
            )

        return ImageResult.failed(
            number,
            current.source_page_url,
            generation.error or GENERATION_FAILED_REASON
        )
