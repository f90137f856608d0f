# --------------------------------------------------------------
# File: Home.py
# Description: Define la página principal de Streamlit con el resumen de SecSeal.
# --------------------------------------------------------------

import streamlit as st

from secseal import config

# Configura los metadatos de la página principal de la aplicación.
st.set_page_config(page_title="SecSeal", page_icon="🔐", layout="centered")

# Presenta el nombre del producto y su propósito general.
st.title("🔐 SecSeal")
st.write(
    "Sobres autenticados para secretos: PBKDF2 + AES-256-CBC + HMAC-SHA256 (SCS1), "
    "cifrado híbrido para certificados RSA (SCSPK1) y firmas separadas (SCSIG1)."
)
st.info("Empieza por **Sellar y Abrir** para proteger un secreto con una passphrase.")

# Muestra la configuración efectiva sin exponer secretos.
st.markdown("### Configuración")
st.write("**Iteraciones por defecto:**", config.DEFAULT_ITERATIONS)
st.write("**Almacén de máquina:**", config.MACHINE_STORE)
st.write("**Almacén de usuario:**", config.USER_STORE)
