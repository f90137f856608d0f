# --------------------------------------------------------------
# File: 3_Firmas.py
# Description: Firmas separadas SCSIG1 y su verificación desde Streamlit.
# --------------------------------------------------------------

import streamlit as st

from secseal.errors import SecSealError
from secseal_api.services import compare_signature, new_signature

# Presenta el título de la sección de firmas.
st.title("✍️ Firmas")

uploaded = st.file_uploader("Archivo a firmar o verificar", type=None, key="sig_file")
passphrase = st.text_input("Passphrase", type="password", key="sig_pass")

tab_sign, tab_verify = st.tabs(["Firmar", "Verificar"])

with tab_sign:
    if st.button("Firmar", disabled=not (uploaded and passphrase), key="btn_sign"):
        try:
            signature = new_signature(input_bytes=uploaded.getvalue(), passphrase=passphrase)
        except SecSealError as exc:
            st.error(f"[{exc.kind.value}] {exc}")
        else:
            st.success("Firma generada (SCSIG1).")
            st.code(signature)
            st.download_button("Descargar firma", signature, file_name=f"{uploaded.name}.sig")

with tab_verify:
    signature_text = st.text_area("Firma SCSIG1", key="sig_text")
    ready = uploaded and passphrase and signature_text
    if st.button("Verificar", disabled=not ready, key="btn_verify"):
        valid = compare_signature(
            input_bytes=uploaded.getvalue(), signature=signature_text, passphrase=passphrase
        )
        if valid:
            st.success("✅ Firma válida")
        else:
            st.error("❌ Firma no válida")
