import asyncio
import json
import logging
from typing import Dict, Any, List

from langchain.chains.base import Chain
from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.tools import BaseTool

from poem_canvas.image_generation import url_to_bytes
from poem_canvas.llm_wrapper import GeminiLLM
from poem_canvas.prompts import ANALYSIS_PROMPT, IMAGE_PROMPT_TEMPLATE
from poem_canvas.schema_models import PoemAnalysis, PoemImage

logger = logging.getLogger(__name__)


# === Utility Functions ===
def clean_json_output(response_text: str) -> str:
    """Strip markdown code fences the model sometimes wraps around JSON."""
    cleaned_text = response_text.strip()
    if cleaned_text.startswith("```"):
        cleaned_text = cleaned_text[3:]
        if cleaned_text.lower().startswith("json"):
            cleaned_text = cleaned_text[4:]
        if cleaned_text.rstrip().endswith("```"):
            cleaned_text = cleaned_text.rstrip()[:-3]
    return cleaned_text.strip()


def parse_analysis(response_text: str, output_parser: PydanticOutputParser) -> PoemAnalysis:
    """
    Turns the analyst's raw reply into a PoemAnalysis.
    Any malformed JSON or missing key is fatal; there is no partial result.
    """
    cleaned_text = clean_json_output(response_text)
    try:
        parsed_json = json.loads(cleaned_text)
    except Exception as e:
        raise ValueError(f"Failed to load JSON from LLM output: {e}")

    if not isinstance(parsed_json, dict):
        raise ValueError(f"Failed to parse LLM output: expected a JSON object, got {type(parsed_json).__name__}")

    try:
        return output_parser.parse(json.dumps(parsed_json))
    except Exception as e:
        raise ValueError(f"Failed to parse LLM output: {e}")


def build_image_prompt(analysis: PoemAnalysis) -> str:
    """Formats the poster analysis into the image synthesis prompt."""
    return IMAGE_PROMPT_TEMPLATE.format(
        art_style=analysis.art_style,
        imagery=", ".join(analysis.imagery),
        atmosphere=analysis.atmosphere,
        emotions=", ".join(analysis.emotions),
        region=analysis.text_placement.region,
    ).strip()


# === CHAIN 1: OCR ===
class PoemExtractionChain(Chain):
    """
    Sends an uploaded photo or scan of a poem to Gemini and returns the text
    it reads, trimmed. An image without text yields an empty string.
    """
    llm: GeminiLLM

    @property
    def input_keys(self) -> List[str]:
        return ["image"]

    @property
    def output_keys(self) -> List[str]:
        return ["poem_text"]

    def _call(self, inputs: Dict[str, Any], run_manager=None) -> Dict[str, Any]:
        image: PoemImage = inputs["image"]
        response_text = self.llm.read_image(image.to_base64(), image.mime_type)
        return {"poem_text": (response_text or "").strip()}

    async def _acall(self, inputs: Dict[str, Any], run_manager=None) -> Dict[str, Any]:
        image: PoemImage = inputs["image"]
        response_text = await self.llm.aread_image(image.to_base64(), image.mime_type)
        return {"poem_text": (response_text or "").strip()}


# === CHAIN 2: Poem Analysis ===
class PoemAnalysisChain(Chain):
    """
    1. Calls Gemini with the poem, asking for free-verse formatting and poster direction.
    2. Cleans and parses the JSON reply against the `PoemAnalysis` schema.
    """
    llm: GeminiLLM
    output_parser: PydanticOutputParser

    @property
    def input_keys(self) -> List[str]:
        return ["poem_text"]

    @property
    def output_keys(self) -> List[str]:
        return ["analysis"]

    def _call(self, inputs: Dict[str, Any], run_manager=None) -> Dict[str, Any]:
        prompt = ANALYSIS_PROMPT.format(poem=inputs["poem_text"])
        response_text = self.llm.generate_content(prompt)
        logger.debug(f"{response_text=}")
        return {"analysis": parse_analysis(response_text, self.output_parser)}

    async def _acall(self, inputs: Dict[str, Any], run_manager=None) -> Dict[str, Any]:
        prompt = ANALYSIS_PROMPT.format(poem=inputs["poem_text"])
        response_text = await self.llm.agenerate_content(prompt)
        logger.debug(f"{response_text=}")
        return {"analysis": parse_analysis(response_text, self.output_parser)}


# === CHAIN 3: Background Image ===
class BackgroundImageChain(Chain):
    """
    1. Builds the synthesis prompt from the analysis (no text, pale palette,
       quiet area where the poem will sit).
    2. Calls the image tool for one portrait image and downloads its bytes.
    """
    image_tool: BaseTool

    @property
    def input_keys(self) -> List[str]:
        return ["analysis"]

    @property
    def output_keys(self) -> List[str]:
        return ["background_image"]

    def _call(self, inputs: Dict[str, Any], run_manager=None) -> Dict[str, Any]:
        prompt = build_image_prompt(inputs["analysis"])
        image_url = self.image_tool.run(prompt)
        return {"background_image": url_to_bytes(image_url)}

    async def _acall(self, inputs: Dict[str, Any], run_manager=None) -> Dict[str, Any]:
        prompt = build_image_prompt(inputs["analysis"])
        image_url = await asyncio.to_thread(self.image_tool.run, prompt)
        image_bytes = await asyncio.to_thread(url_to_bytes, image_url)
        return {"background_image": image_bytes}
