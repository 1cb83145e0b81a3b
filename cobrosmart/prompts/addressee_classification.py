"""Addressee classification prompt template."""

# =============================================================================
# ADDRESSEE CLASSIFICATION PROMPT
# =============================================================================

CLASSIFY_ADDRESSEE_PROMPT = """Clasifica si el destinatario es persona o entidad.
Nombre: "{name}"
Responde SOLO una palabra: person o entity."""
