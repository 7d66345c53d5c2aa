from .chain_builder import PoemExtractionChain, PoemAnalysisChain, BackgroundImageChain
from .client import PosterClient, build_poster_client
from .generator import PoemPosterGenerator, Idle, Loading, Succeeded, Failed
from .schema_models import PoemAnalysis, GenerationResult, PoemImage, TextPlacement, TextStyle, FONT_COLOR
