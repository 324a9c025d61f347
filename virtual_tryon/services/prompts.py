"""Prompt templates for Gemini image generation."""


MODEL_IMAGE_PROMPT = (
    "You are an expert fashion photographer AI. Transform the person in this image into a "
    "full-body fashion model photo suitable for an e-commerce website. The background must be "
    "a clean, neutral studio backdrop (light gray, #f0f0f0). The person should have a neutral, "
    "professional model expression. Preserve the person's identity, unique features, and body "
    "type, but place them in a standard, relaxed standing model pose. The final image must be "
    "photorealistic and have a 1:1 aspect ratio (square). Return ONLY the final image."
)


TRY_ON_PROMPT = """You are an expert virtual try-on AI. You will be given a 'model image' and one or more 'garment images'. Your task is to create a new photorealistic image where the person from the 'model image' is wearing the complete outfit from the 'garment images'.

**Crucial Rules:**
1.  **Combine Garments:** Intelligently combine all provided garments into a single, layered outfit. For example, a t-shirt should be under a jacket.
2.  **Complete Garment Replacement:** You MUST completely REMOVE and REPLACE any relevant clothing worn by the person in the 'model image' with the new garments. No part of the original clothing should be visible.
3.  **Preserve the Model & Background:** The person's face, hair, body shape, pose, and the entire background from the 'model image' MUST be preserved perfectly.
4.  **Realistic Fit:** Realistically fit the new outfit onto the person. It should adapt to their pose with natural folds, shadows, and lighting consistent with the original scene.
5.  **Aspect Ratio:** The final output image MUST have a 1:1 aspect ratio (square).
6.  **Output:** Return ONLY the final, edited image. Do not include any text."""


BACKGROUND_REMOVAL_PROMPT = (
    "You are an expert background removal AI. Given this image, perfectly isolate the main "
    "subject (e.g., clothing item, person) and return a new image with the subject on a "
    "transparent background. The output must be a PNG file. Return ONLY the final image."
)


def build_pose_prompt(pose_instruction: str) -> str:
    """Prompt that re-renders an image from a new camera perspective."""
    return (
        "You are an expert fashion photographer AI. Take this image and regenerate it from a "
        "different perspective. The person, clothing, and background style must remain identical. "
        f'The new perspective should be: "{pose_instruction}". The final image MUST have a 1:1 '
        "aspect ratio (square). Return ONLY the final image."
    )
