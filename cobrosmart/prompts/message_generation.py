"""Collection message prompt templates."""

# =============================================================================
# MESSAGE GENERATION PROMPT
# =============================================================================

GENERATE_MESSAGE_PROMPT = """Variacion: {variation_id}

Genera UN mensaje de WhatsApp de cobranza en espanol rioplatense, humano y claro.
Maximo 280 caracteres (ideal 180-220). Sin amenazas legales.

**Remitente:**
- Nombre: {sender_name}
- Negocio: {sender_role}
- Firma: {signature}

**Destinatario:**
- Nombre: {debtor_name}
- Tipo: {addressee_type}
- Saludo a usar: "{addressee_line}"

**Cuenta:**
- Monto pendiente: {amount}
- Dias vencido: {days_overdue}
- Nota: {note}
- Historial: sent={sent}, no_response={no_response}, promise={promise}, paid={paid}, replied={replied}

**Estilo:**
- Tono solicitado: {tone} ({tone_description})
- Tratamiento: {pronoun}
- Regla para empresas: {entity_greeting_rule}
- Notas de estilo: {style_notes}
- {soft_line}

**Forma de pago:**
{payment_line}

**Ultimo mensaje enviado (NO lo repitas):**
{last_message}

Reglas obligatorias:
1) Empeza con el saludo indicado.
2) Inclui el monto pendiente.
3) CTA con estas dos opciones: "pagas hoy" o "coordinamos fecha".
4) {entity_line}
5) {ultimo_line}
6) Menciona la forma de pago de forma natural.
7) Cerra con la firma: {signature}

Devuelve solo el texto final del mensaje, sin comillas ni explicaciones."""


TONE_DESCRIPTIONS = {
    "amable": "cordial, recordatorio sin presion",
    "directo": "concreto y firme, sin rodeos",
    "ultimo": "ultimo aviso antes de frenar la cuenta",
}

SOFT_LINE = "Cliente sensible (VIP o pago previo): usa tono conciliador y evita dureza."
FIRM_LINE = "Mantene firmeza profesional sin amenazas."

ENTITY_LINE = (
    "Es una empresa u organizacion: no saludes por nombre de persona y pedi que te "
    "deriven con administracion o cuentas a pagar."
)
PERSON_LINE = "Es una persona: habla de forma directa y cercana."

ULTIMO_LINE = (
    'Inclui consecuencia suave: "para no cortar la cuenta corriente o seguir entregando". '
    "Nada de amenazas legales."
)
NO_CONSEQUENCE_LINE = "No menciones cortes ni bloqueo."
