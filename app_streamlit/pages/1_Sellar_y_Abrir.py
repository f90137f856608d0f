# --------------------------------------------------------------
# File: 1_Sellar_y_Abrir.py
# Description: Sellado y apertura de secretos SCS1 con passphrase desde Streamlit.
# --------------------------------------------------------------

import streamlit as st

from secseal import config
from secseal.errors import SecSealError
from secseal_api.services import protect_secret, unprotect_secret

# Presenta el título de la sección de sellado.
st.title("🔏 Sellar y abrir")

tab_seal, tab_open = st.tabs(["Sellar", "Abrir"])

# Sección de sellado de un secreto en texto o fichero.
with tab_seal:
    secret_text = st.text_area("Secreto", key="seal_text")
    uploaded = st.file_uploader("...o selecciona un archivo", type=None, key="seal_file")
    passphrase = st.text_input("Passphrase", type="password", key="seal_pass")
    iterations = st.number_input(
        "Iteraciones PBKDF2",
        min_value=config.MIN_ITERATIONS,
        value=config.DEFAULT_ITERATIONS,
        step=10000,
        key="seal_iter",
    )

    disabled = (not passphrase) or (not secret_text and uploaded is None)
    if st.button("Sellar", disabled=disabled, key="btn_seal"):
        try:
            if uploaded is not None:
                envelope = protect_secret(
                    input_bytes=uploaded.read(), passphrase=passphrase, iterations=int(iterations)
                )
            else:
                envelope = protect_secret(
                    input_string=secret_text, passphrase=passphrase, iterations=int(iterations)
                )
        except SecSealError as exc:
            st.error(f"[{exc.kind.value}] {exc}")
        else:
            st.success("Secreto sellado (SCS1).")
            st.code(envelope)
            st.download_button("Descargar sobre", envelope, file_name="secret.scs1")

# Sección de apertura de un sobre SCS1 o SCSPK1.
with tab_open:
    envelope_text = st.text_area("Sobre", key="open_env")
    passphrase_o = st.text_input(
        "Passphrase (solo SCS1)", type="password", key="open_pass"
    )
    as_text = st.checkbox("Mostrar como texto UTF-8", value=True, key="open_as_text")

    if st.button("Abrir", disabled=not envelope_text, key="btn_open"):
        try:
            plaintext = unprotect_secret(
                envelope=envelope_text,
                passphrase=passphrase_o or None,
                as_text=as_text,
            )
        except UnicodeDecodeError:
            st.error("El contenido no es texto UTF-8; desmarca la opción de texto.")
        except SecSealError as exc:
            st.error(f"[{exc.kind.value}] {exc}")
        else:
            st.success("✅ Sobre verificado y abierto.")
            if as_text:
                st.code(plaintext)
            else:
                st.download_button("Descargar contenido", plaintext, file_name="secret.bin")
