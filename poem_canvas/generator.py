"""
Poster generation workflow.

One request at a time runs strictly in sequence: optional OCR of an uploaded
image, analysis of the poem, background synthesis, then result assembly.
Progress is exposed as a small state machine (Idle, Loading, Succeeded,
Failed) that the view renders; any failure ends the run in Failed with a
readable message and nothing is retried.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Union

from poem_canvas.schema_models import GenerationResult, PoemAnalysis, PoemImage

logger = logging.getLogger(__name__)

EXTRACTING_MESSAGE = "Extracting poem from image..."
ANALYZING_MESSAGE = "Analyzing poem and generating background..."
NO_TEXT_IN_IMAGE_MESSAGE = "Could not extract any text from the image. Please try another one."
NO_POEM_MESSAGE = "Please provide a poem to analyze."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


class PosterGenerationError(Exception):
    pass


class EmptyPoemError(PosterGenerationError):
    """No usable poem text, typed or extracted."""


class PosterServices(Protocol):
    async def extract(self, image: PoemImage) -> str: ...

    async def analyze(self, poem_text: str) -> PoemAnalysis: ...

    async def synthesize(self, analysis: PoemAnalysis) -> bytes: ...


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    message: str = ""


@dataclass(frozen=True)
class Succeeded:
    result: GenerationResult


@dataclass(frozen=True)
class Failed:
    message: str


GenerationState = Union[Idle, Loading, Succeeded, Failed]


def error_message(error: BaseException) -> str:
    message = str(error).strip()
    return message or UNKNOWN_ERROR_MESSAGE


class PoemPosterGenerator:
    """Drives a single poster request through OCR, analysis and synthesis."""

    def __init__(
            self,
            services: PosterServices,
            on_change: Optional[Callable[[GenerationState], None]] = None
    ):
        self.services = services
        self.on_change = on_change
        self._state: GenerationState = Idle()

    @property
    def state(self) -> GenerationState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return isinstance(self._state, Loading)

    @property
    def result(self) -> Optional[GenerationResult]:
        return self._state.result if isinstance(self._state, Succeeded) else None

    @property
    def error(self) -> Optional[str]:
        return self._state.message if isinstance(self._state, Failed) else None

    @property
    def loading_message(self) -> str:
        return self._state.message if isinstance(self._state, Loading) else ""

    def _transition(self, state: GenerationState) -> None:
        self._state = state
        logger.info(f"Generation state -> {state.__class__.__name__}")
        if self.on_change is not None:
            self.on_change(state)

    async def generate(self, poem_text: str, image: Optional[PoemImage] = None) -> GenerationState:
        """
        Runs one request. Any earlier result or error is dropped first; the
        returned state is Succeeded or Failed.

        The generator never stays in Loading once this returns or raises: if
        the run is interrupted (cancellation, or a BaseException out of the
        observer) the state is forced to Failed before the interruption
        propagates.
        """
        if self.is_loading:
            raise RuntimeError("A poster is already being generated.")

        try:
            self._transition(Loading(EXTRACTING_MESSAGE if image is not None else ""))
            poem_to_analyze = poem_text

            if image is not None:
                extracted_text = await self.services.extract(image)
                if not extracted_text or not extracted_text.strip():
                    raise EmptyPoemError(NO_TEXT_IN_IMAGE_MESSAGE)
                poem_to_analyze = extracted_text

            if not poem_to_analyze or not poem_to_analyze.strip():
                raise EmptyPoemError(NO_POEM_MESSAGE)

            self._transition(Loading(ANALYZING_MESSAGE))
            result = await analyze_and_generate(self.services, poem_to_analyze)
        except PosterGenerationError as e:
            logger.warning(f"Poster request rejected: {e}")
            self._transition(Failed(error_message(e)))
        except Exception as e:
            logger.exception("Poster generation failed")
            self._transition(Failed(error_message(e)))
        else:
            self._transition(Succeeded(result))
        finally:
            if self.is_loading:
                # The observer is not notified here; it may be what was interrupted.
                logger.warning("Poster generation interrupted")
                self._state = Failed(UNKNOWN_ERROR_MESSAGE)
        return self._state


async def analyze_and_generate(services: PosterServices, poem_text: str) -> GenerationResult:
    """Analysis, then synthesis from that analysis, assembled into one result."""
    analysis = await services.analyze(poem_text)
    image_bytes = await services.synthesize(analysis)
    return GenerationResult.from_analysis(analysis, image_bytes)
