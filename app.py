import asyncio
import logging
import os

import nest_asyncio
import streamlit as st

from poem_canvas import PoemPosterGenerator, Loading, Succeeded, build_poster_client
from poem_canvas.generator import NO_POEM_MESSAGE
from poem_canvas.poem_input import PoemInput, TEXT_MODE, IMAGE_MODE
from poem_canvas.poster_rendering import render_poster, to_jpeg
from poem_canvas.schema_models import PoemImage

logging.basicConfig(
    level=os.getenv("POEM_CANVAS_LOG_LEVEL", "INFO"),
    format='%(asctime)s - %(name)s - [%(levelname)s] - %(message)s'
)
logger = logging.getLogger(__name__)

# Allow nested event loops in Streamlit
nest_asyncio.apply()

MODES = {"✍️ Write Poem": TEXT_MODE, "🖼️ Upload Image": IMAGE_MODE}


def switch_mode():
    # Switching tabs drops whatever was entered in the other one.
    st.session_state.poem_input.switch_mode(MODES[st.session_state.input_mode])
    st.session_state.poem_text = ""


def get_generator():
    if st.session_state.generator is None:
        try:
            st.session_state.generator = PoemPosterGenerator(build_poster_client())
        except Exception as e:
            logger.exception("Could not set up the AI services")
            st.error(f"⚠️ Could not connect to the AI services: {e}")
            return None
    return st.session_state.generator


def show_progress(placeholder):
    def on_change(state):
        if isinstance(state, Loading) and state.message:
            placeholder.info(f"⏳ {state.message}")
        else:
            placeholder.empty()
    return on_change


def show_result(result, poster_jpeg):
    st.subheader("🖼️ Your Masterpiece")
    col1, col2 = st.columns(2)
    with col1:
        st.markdown("**Artistic Background**")
        st.image(result.image_bytes)
        st.download_button(
            label="📥 Download Background",
            data=result.image_bytes,
            file_name="poem_canvas_background.jpg",
            mime="image/jpeg"
        )
    with col2:
        st.markdown("**Complete Poster**")
        st.image(poster_jpeg)
        st.download_button(
            label="📥 Download Poster",
            data=poster_jpeg,
            file_name="poem_canvas_poster.jpg",
            mime="image/jpeg"
        )


def main():
    st.title("Poem Canvas")
    st.write("Write a poem or upload a photo of one, and get back a poster with an AI-painted background.")

    if "poem_input" not in st.session_state:
        st.session_state.poem_input = PoemInput()
    if "generator" not in st.session_state:
        st.session_state.generator = None
    if "poster_jpeg" not in st.session_state:
        st.session_state.poster_jpeg = None

    poem_input = st.session_state.poem_input
    generator = st.session_state.generator
    busy = generator is not None and generator.is_loading

    st.radio("Input", list(MODES), key="input_mode", horizontal=True, on_change=switch_mode, disabled=busy)

    if poem_input.mode == TEXT_MODE:
        # A form commits the text area together with the click.
        with st.form("poem_form"):
            text = st.text_area(
                "📖 Poem",
                key="poem_text",
                height=240,
                placeholder="The woods are lovely, dark and deep,...",
                disabled=busy
            )
            submitted = st.form_submit_button("🚀 Generate Artwork", disabled=busy)
        poem_input.set_text(text)
        if submitted and not poem_input.can_submit(busy):
            st.warning(f"✍️ {NO_POEM_MESSAGE}")
            submitted = False
    else:
        uploaded = st.file_uploader(
            "📷 Upload an image of a poem",
            type=["png", "jpg", "jpeg", "webp"],
            disabled=busy
        )
        if uploaded is not None:
            try:
                poem_input.set_image(PoemImage(
                    data=uploaded.getvalue(),
                    mime_type=uploaded.type or "image/jpeg",
                    name=uploaded.name
                ))
            except OSError:
                st.error(f"⚠️ Could not read {uploaded.name} as an image. Please try another one.")
        elif poem_input.image is not None:
            poem_input.clear()
        if poem_input.preview is not None:
            st.image(poem_input.preview, caption="Poem preview")
        submitted = st.button("🚀 Generate Artwork", disabled=not poem_input.can_submit(busy))

    if submitted:
        generator = get_generator()
        if generator is None:
            return
        st.session_state.poster_jpeg = None
        status = st.empty()
        generator.on_change = show_progress(status)

        poem_text, image = poem_input.submission()
        with st.spinner("🎨 Working on your poster..."):
            state = asyncio.run(generator.generate(poem_text, image))

        if isinstance(state, Succeeded):
            st.session_state.poster_jpeg = to_jpeg(render_poster(state.result))

    # Final Output
    if generator is None:
        return
    if generator.error:
        st.error(f"⚠️ {generator.error}")
    elif generator.result and st.session_state.poster_jpeg:
        show_result(generator.result, st.session_state.poster_jpeg)


if __name__ == "__main__":
    main()
