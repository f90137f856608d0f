# --------------------------------------------------------------
# File: 2_Certificados.py
# Description: Emisión de certificados RSA locales y protección SCSPK1 desde Streamlit.
# --------------------------------------------------------------

import streamlit as st
from cryptography.hazmat.primitives import hashes

from secseal import config
from secseal.certificates import thumbprint_of
from secseal.errors import SecSealError
from secseal_api.pki import DirectoryCertificateStore, issue_self_signed_rsa_cert, save_certificate
from secseal_api.services import protect_for_certificate, unprotect_secret

# Presenta el título de la sección de certificados.
st.title("📜 Certificados")

tab_issue, tab_protect, tab_open = st.tabs(["Emitir", "Proteger", "Abrir"])

# Emisión de un certificado autofirmado en el almacén de usuario.
with tab_issue:
    common_name = st.text_input("Common Name", value="SecSeal local", key="cert_cn")
    key_size = st.selectbox("Tamaño de clave RSA", [2048, 3072, 4096], key="cert_size")
    if st.button("Emitir certificado", disabled=not common_name, key="btn_issue"):
        private_key, cert = issue_self_signed_rsa_cert(common_name, key_size=int(key_size))
        path = save_certificate(config.USER_STORE, cert, private_key)
        st.success(f"Guardado en: {path}")
        st.write("**Huella (SHA-1):**", thumbprint_of(cert))
        st.write("**Fingerprint SHA-256:**", cert.fingerprint(hashes.SHA256()).hex())
        st.write("**Validez:**", f"{cert.not_valid_before_utc} → {cert.not_valid_after_utc}")

    # Lista los certificados disponibles en ambos almacenes.
    st.markdown("### Certificados disponibles")
    for store in (
        DirectoryCertificateStore(config.MACHINE_STORE, name="machine"),
        DirectoryCertificateStore(config.USER_STORE, name="user"),
    ):
        for cert in store.certificates():
            st.write(f"**{store.name}** · {thumbprint_of(cert)} · {cert.subject.rfc4514_string()}")

# Protección de un secreto para el titular de un certificado.
with tab_protect:
    thumbprint = st.text_input("Huella del certificado", key="prot_thumb")
    secret_text = st.text_area("Secreto", key="prot_text")
    if st.button("Proteger", disabled=not (thumbprint and secret_text), key="btn_protect"):
        try:
            envelope = protect_for_certificate(input_string=secret_text, thumbprint=thumbprint)
        except SecSealError as exc:
            st.error(f"[{exc.kind.value}] {exc}")
        else:
            st.success("Secreto protegido (SCSPK1).")
            st.code(envelope)

# Apertura con la clave privada localizada por huella.
with tab_open:
    envelope_text = st.text_area("Sobre SCSPK1", key="pk_env")
    if st.button("Abrir", disabled=not envelope_text, key="btn_pk_open"):
        try:
            plaintext = unprotect_secret(envelope=envelope_text, as_text=True)
        except SecSealError as exc:
            st.error(f"[{exc.kind.value}] {exc}")
        else:
            st.success("✅ Sobre verificado y abierto.")
            st.code(plaintext)
