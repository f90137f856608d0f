# --------------------------------------------------------------
# File: 4_Inspeccionar.py
# Description: Auditoría de sobres y firmas sin passphrase desde Streamlit.
# --------------------------------------------------------------

import streamlit as st

from secseal.errors import SecSealError
from secseal_api.services import inspect_envelope

# Presenta el título de la sección de auditoría.
st.title("🔍 Inspeccionar sobre")

envelope_text = st.text_area("Sobre o firma", key="insp_env")
if st.button("Inspeccionar", disabled=not envelope_text, key="btn_inspect"):
    try:
        metadata = inspect_envelope(envelope=envelope_text)
    except SecSealError as exc:
        st.error(f"[{exc.kind.value}] {exc}")
    else:
        st.json(metadata.model_dump(exclude={"recommendations"}))
        if metadata.estimated_plaintext_max is not None:
            st.write(
                "**Tamaño estimado del claro:**",
                f"{metadata.estimated_plaintext_min}-{metadata.estimated_plaintext_max} bytes",
            )
        for note in metadata.recommendations:
            st.warning(note)
        if not metadata.recommendations:
            st.info("Sin recomendaciones.")
