import logging
from typing import Optional

from langchain_core.output_parsers import PydanticOutputParser

from poem_canvas.chain_builder import BackgroundImageChain, PoemAnalysisChain, PoemExtractionChain
from poem_canvas.generator import analyze_and_generate
from poem_canvas.image_generation import ReplicateImageGenerationTool
from poem_canvas.llm_wrapper import GeminiLLM
from poem_canvas.prompts import ANALYST_INSTRUCTION, OCR_INSTRUCTION
from poem_canvas.schema_models import GenerationResult, PoemAnalysis, PoemImage

logger = logging.getLogger(__name__)


class PosterClient:
    """
    The AI services behind a poster, as the generator sees them:
    extract (OCR), analyze (structured poster direction) and synthesize
    (background image). Each call goes out once; errors propagate unchanged.
    """

    def __init__(
            self,
            extraction_chain: PoemExtractionChain,
            analysis_chain: PoemAnalysisChain,
            image_chain: BackgroundImageChain
    ):
        self.extraction_chain = extraction_chain
        self.analysis_chain = analysis_chain
        self.image_chain = image_chain

    async def extract(self, image: PoemImage) -> str:
        logger.info(f"Extracting poem from {image.mime_type} image ({len(image.data)} bytes)")
        result = await self.extraction_chain.ainvoke({"image": image})
        return result["poem_text"]

    async def analyze(self, poem_text: str) -> PoemAnalysis:
        logger.info("Analyzing poem")
        result = await self.analysis_chain.ainvoke({"poem_text": poem_text})
        return result["analysis"]

    async def synthesize(self, analysis: PoemAnalysis) -> bytes:
        logger.info(f"Generating '{analysis.art_style}' background, quiet area at {analysis.text_placement.value}")
        result = await self.image_chain.ainvoke({"analysis": analysis})
        return result["background_image"]

    async def analyze_and_generate(self, poem_text: str) -> GenerationResult:
        return await analyze_and_generate(self, poem_text)


def build_poster_client(model_name: Optional[str] = None) -> PosterClient:
    """Wires the Gemini chains and the Replicate tool with their instructions."""
    llm_kwargs = {"model_name": model_name} if model_name else {}
    return PosterClient(
        extraction_chain=PoemExtractionChain(
            llm=GeminiLLM(system_instruction=OCR_INSTRUCTION, **llm_kwargs)
        ),
        analysis_chain=PoemAnalysisChain(
            llm=GeminiLLM(
                system_instruction=ANALYST_INSTRUCTION,
                response_mime_type="application/json",
                **llm_kwargs
            ),
            output_parser=PydanticOutputParser(pydantic_object=PoemAnalysis)
        ),
        image_chain=BackgroundImageChain(image_tool=ReplicateImageGenerationTool()),
    )
