"""
SmartBiz - Image Studio Tab
Upload a product photo and ask the image model to restyle it.
"""

import sys

import streamlit as st

from smartbiz.utils.ai_gateway import MissingAPIKeyError, OpenAIGateway
from smartbiz.utils.state_manager import get_state, set_state

IMAGE_TYPES = ['png', 'jpg', 'jpeg', 'webp']


def render_image_studio_tab(gateway=None):
    """Render the Product Image Studio."""
    st.header("✨ Product Image Studio")
    st.caption("Visualize product changes using Generative AI.")
    st.markdown(
        "Upload a product photo and describe how to modify the background or style.  \n"
        '_Example: "Place this product on a wooden table in a sunny garden" or "Add a retro film filter"_'
    )

    uploaded = st.file_uploader("Upload product image", type=IMAGE_TYPES, key='image_upload')
    if uploaded is not None:
        signature = (uploaded.name, uploaded.size)
        if get_state('image_signature') != signature:
            set_state('image_signature', signature)
            set_state('image_source', (uploaded.getvalue(), uploaded.type or 'image/jpeg'))
            # New photo, drop the previous edit
            set_state('image_result', None)

    prompt = st.text_area("Edit instructions", placeholder="Describe the changes you want...")

    source = get_state('image_source')
    generate = st.button(
        "🎨 Generate Edit", type="primary",
        disabled=source is None or not prompt.strip()
    )

    if generate:
        image_bytes, mime_type = source
        with st.spinner("Generating image..."):
            try:
                gateway = gateway or OpenAIGateway()
                edited = gateway.edit_product_image(image_bytes, prompt.strip(), mime_type)
            except MissingAPIKeyError as e:
                st.error(f"❌ {e}. Set OPENAI_API_KEY in the environment or .streamlit/secrets.toml.")
            except Exception as e:
                print(f"[ERROR] Image Studio: {e}", file=sys.stderr)
                st.error("Error generating image.")
            else:
                if edited:
                    set_state('image_result', edited)
                else:
                    st.warning("No image returned. Try a different prompt.")

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Original")
        if source is not None:
            st.image(source[0], width="stretch")
        else:
            st.info("💡 Click above to upload a product image")
    with col2:
        st.subheader("Generated")
        result = get_state('image_result')
        if result:
            st.image(result, width="stretch")
            st.download_button(
                label="💾 Download Image",
                data=result,
                file_name="product_edit.png",
                mime="image/png",
                width="stretch"
            )
        else:
            st.caption("The edited image will appear here.")
