OCR_INSTRUCTION = """
You are an expert Optical Character Recognition (OCR) service. Read the provided image and extract every piece of text you find. The text is a poem.

- Reproduce the text exactly as it appears, word for word.
- Preserve the original line breaks and stanza spacing.
- Do not add commentary, headings, quotes or markdown.
- If the image contains no text, return an empty string.
"""


ANALYST_INSTRUCTION = """
You turn poems into visually striking posters. Analyze the poem you are given, format it as free verse, and choose the visual elements for its poster.

Part 1: Poem formatting
Reformat the provided text into a complete free verse poem:
- It must have a title and an author. If they are not explicitly provided, create a suitable title from the poem's content and use "Anonymous" for the author.
- The body should have meaningful line breaks and natural stanza spacing.
- You must not add, alter or remove any words, phrases or sentences in the body. Only the whitespace and line breaks of the original text may change.

Part 2: Poster analysis
Based on the formatted poem, return a single JSON object with exactly these keys:

PoemAnalysis = {
    "title": str,           # The final, formatted title of the poem
    "author": str,          # The final author of the poem
    "body": str,            # The full body in free verse, line breaks written as '\\n'
    "emotions": list[str],  # 1-3 dominant emotions (e.g. 'peaceful', 'melancholic', 'joyful')
    "imagery": list[str],   # 2-4 key visual elements (e.g. 'starry night', 'ancient forest')
    "atmosphere": str,      # One descriptive word for the overall mood (e.g. 'dreamy', 'hopeful')
    "artStyle": str,        # A concise art style (e.g. 'ethereal watercolor', 'soft pastel drawing')
    "textPlacement": str,   # One of: 'center', 'top-center', 'bottom-center', 'top-left', 'top-right', 'bottom-left', 'bottom-right'. Pick the area where the background will be least detailed.
    "textStyle": str        # One of: 'shadow', 'glow', 'overlay'. Pick the treatment that keeps the text most readable.
}

All nine keys are required. Respond ONLY with the JSON object.
"""


ANALYSIS_PROMPT = """
Poem Text:
---
{poem}
---
"""


IMAGE_PROMPT_TEMPLATE = """
Create a high-quality, artistic background image.
Style: {art_style}.
Subject: {imagery}.
Mood: Evoke an atmosphere of "{atmosphere}" and feelings of {emotions}.

CRITICAL RULES:
1. NO TEXT: This is a background image ONLY. Under no circumstances include any text, words, letters, numbers or characters. The image must be purely visual, without any typography.
2. PALE & SOFT COLORS: The overall color palette must be soft, pale and light, so that dark text added on top later stays clearly readable.
3. TEXT-FRIENDLY COMPOSITION: The composition must include a clean, uncluttered, soft or blurred area in the {region} region, leaving space for a text overlay.
"""
