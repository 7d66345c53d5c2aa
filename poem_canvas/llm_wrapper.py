import os
import logging
from typing import Optional

from dotenv import load_dotenv
from langchain_google_genai import ChatGoogleGenerativeAI

load_dotenv()
api_key = os.getenv("GOOGLE_API_KEY")
DEFAULT_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

logger = logging.getLogger(__name__)


class GeminiLLM:
    """
    A wrapper for Google's Gemini LLM using ChatGoogleGenerativeAI.
    """

    def __init__(
            self,
            system_instruction: str,
            model_name: str = DEFAULT_MODEL,
            temperature: float = 0.0,
            response_mime_type: Optional[str] = None
    ):
        """
        Initializes the GeminiLLM wrapper.

        Parameters:
          system_instruction (str): Instructions for the model (OCR reader or poster analyst).
          model_name (str): The Google model name (e.g., "gemini-2.5-flash").
          temperature (float): Temperature setting for generation.
          response_mime_type (str): Set to "application/json" to ask for a JSON-only response.
        """
        self.system_instruction = system_instruction
        self.model_name = model_name
        self.temperature = temperature
        self.response_mime_type = response_mime_type
        llm_kwargs = {}
        if response_mime_type:
            llm_kwargs["response_mime_type"] = response_mime_type
        # The ChatGoogleGenerativeAI instance automatically reads GOOGLE_API_KEY from environment if not passed.
        self.llm = ChatGoogleGenerativeAI(
            model=self.model_name,
            temperature=self.temperature,
            google_api_key=api_key,
            **llm_kwargs
        )

    def _messages(self, content) -> list:
        # System instruction first, then the human turn.
        return [
            {"role": "system", "content": self.system_instruction},
            {"role": "human", "content": content}
        ]

    @staticmethod
    def _image_content(image_base64: str, mime_type: str) -> list:
        return [
            {"type": "text", "text": "Extract the poem from this image."},
            {"type": "image_url", "image_url": f"data:{mime_type};base64,{image_base64}"}
        ]

    def generate_content(self, prompt: str) -> str:
        """
        Generates content by combining the system instruction with the prompt.

        Parameters:
          prompt (str): The user-provided prompt or input.

        Returns:
          str: The generated response content.
        """
        logger.debug(f"Sending prompt to {self.model_name} ({len(prompt)} chars)")
        response = self.llm.invoke(self._messages(prompt))
        return response.content

    async def agenerate_content(self, prompt: str) -> str:
        """
        Asynchronous version to generate content.

        Parameters:
          prompt (str): The user prompt.

        Returns:
          str: The generated response content.
        """
        response = await self.llm.ainvoke(self._messages(prompt))
        return response.content

    def read_image(self, image_base64: str, mime_type: str) -> str:
        """
        Sends an inline image alongside the system instruction (multimodal request).

        Parameters:
          image_base64 (str): The image bytes, base64-encoded.
          mime_type (str): Declared MIME type of the image, e.g. "image/png".

        Returns:
          str: The model's text response.
        """
        logger.debug(f"Sending {mime_type} image to {self.model_name}")
        response = self.llm.invoke(self._messages(self._image_content(image_base64, mime_type)))
        return response.content

    async def aread_image(self, image_base64: str, mime_type: str) -> str:
        response = await self.llm.ainvoke(self._messages(self._image_content(image_base64, mime_type)))
        return response.content
