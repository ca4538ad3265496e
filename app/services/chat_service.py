import logging
from typing import Iterable, Optional

import requests

from app.config import settings
from app.models.training_data import TrainingData

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a professional AI flower expert and customer service agent for {store}. You are knowledgeable, helpful, and enthusiastic about flowers.

Your expertise includes:
- Flower types, meanings, and occasions
- Care instructions and tips
- Color combinations and arrangements
- Seasonal availability
- Wedding and event flowers
- Gift recommendations

When you recommend specific arrangements, list each one on its own lines as
"name: ...", "description: ...", "price: ...", "color: ...", "size: ...".

Our available products include fresh flower bouquets, arrangements, plants, and custom designs with prices ranging from $25-150.

Be conversational but professional, like talking to a friend who's also a flower expert."""

IMAGE_DESCRIPTION_PROMPT = (
    'I\'ve generated a custom flower arrangement image based on the request: "{request}". '
    "Please provide a detailed, enthusiastic description of this beautiful arrangement as if "
    "you're a professional florist. Include suggestions for occasions, care tips, and mention "
    "that customers can order this custom arrangement for approximately $75-95."
)

FALLBACK_REPLY = "Sorry, I could not process your request."


class ChatServiceError(Exception):
    status_code = 500


def build_system_prompt(training: Iterable[TrainingData] = ()) -> str:
    prompt = SYSTEM_PROMPT.format(store=settings.store_name)
    examples = [f"Q: {t.question}\nA: {t.answer}" for t in training]
    if examples:
        prompt += "\n\nAnswer in line with these store answers:\n\n" + "\n\n".join(examples)
    return prompt


def ask_flower_expert(message: str, training: Iterable[TrainingData] = (), system_prompt: Optional[str] = None) -> str:
    payload = {
        "model": settings.perplexity_model,
        "messages": [
            {"role": "system", "content": system_prompt or build_system_prompt(training)},
            {"role": "user", "content": message},
        ],
        "temperature": 0.2,
        "top_p": 0.9,
        "max_tokens": 1000,
        "frequency_penalty": 1,
        "presence_penalty": 0,
    }
    headers = {
        "Authorization": f"Bearer {settings.perplexity_api_key}",
        "Content-Type": "application/json",
    }

    try:
        response = requests.post(settings.perplexity_api_url, json=payload, headers=headers)
    except requests.RequestException as e:
        logger.error(f"Perplexity request failed: {e}")
        raise ChatServiceError(f"API call failed: {e}") from e

    if response.status_code >= 400:
        logger.error(f"Perplexity API failed ({response.status_code}): {response.text}")
        raise ChatServiceError(f"API call failed: {response.reason}")

    try:
        data = response.json()
        content = data["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError):
        logger.warning("Perplexity returned an unexpected payload")
        return FALLBACK_REPLY

    return content or FALLBACK_REPLY


def describe_generated_image(request: str, training: Iterable[TrainingData] = ()) -> str:
    return ask_flower_expert(IMAGE_DESCRIPTION_PROMPT.format(request=request), training)
