from google.genai import types

detection_prompt = """
You are a specialized Audio Forensics AI participating in a Deepfake Detection Challenge.

TARGET: Classify the input audio as either 'AI_GENERATED' or 'HUMAN'.
LANGUAGE: {language}

EVALUATION CRITERIA:
1. Breath & Pauses: Real humans breathe. AI often forgets to breathe or places breaths unnaturally.
2. Prosody & Intonation: Human speech has irregular pitch curves. AI often produces flat or cyclic pitch patterns.
3. Spectral Artifacts: Metallic ringing, phasing, high-frequency buzz typical of vocoders.
4. Micro-details: Lip smacks, tongue clicks, throat clearing indicate HUMAN speech.
5. Background: Absolute digital silence between words can indicate AI_GENERATED.

OUTPUT: Return ONLY JSON with:
classification: "AI_GENERATED" or "HUMAN"
confidence: number between 0.0 and 1.0
explanation: short technical explanation
"""

# Mirrors ClassificationVerdict; the provider treats it as a bias, not a guarantee.
RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "classification": types.Schema(type=types.Type.STRING, enum=["AI_GENERATED", "HUMAN"]),
        "confidence": types.Schema(type=types.Type.NUMBER),
        "explanation": types.Schema(type=types.Type.STRING),
    },
    required=["classification", "confidence", "explanation"],
)

def build_prompt(language: str) -> str:
    return detection_prompt.format(language=language).strip()
