import logging
from typing import Any, Dict, List, Optional
from uuid import uuid4

import requests

from app.config import settings

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = (
    "Beautiful flower arrangement: {prompt}. Professional photography, high quality, "
    "vibrant colors, artistic composition, studio lighting"
)
IMAGE_TO_IMAGE_STRENGTH = 0.7


class ImageGenerationError(Exception):
    status_code = 500


def _auth_task() -> Dict[str, str]:
    return {"taskType": "authentication", "apiKey": settings.runware_api_key}


def _call_runware(tasks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {settings.runware_api_key}",
    }

    try:
        response = requests.post(
            settings.runware_api_url,
            json=[_auth_task(), *tasks],
            headers=headers,
        )
    except requests.RequestException as e:
        logger.error(f"Runware request failed: {e}")
        raise ImageGenerationError(f"Runware API error: {e}") from e

    if response.status_code >= 400:
        logger.error(f"Runware API failed ({response.status_code}): {response.text}")
        raise ImageGenerationError(f"Runware API error: {response.reason}")

    try:
        data = response.json()
    except ValueError as e:
        raise ImageGenerationError("Invalid response from Runware") from e

    if data.get("error"):
        raise ImageGenerationError(str(data["error"]))
    if data.get("errors"):
        first = data["errors"][0]
        raise ImageGenerationError(first.get("message", str(first)))

    return data.get("data") or []


def _find_task(results: List[Dict[str, Any]], task_type: str) -> Optional[Dict[str, Any]]:
    return next((item for item in results if item.get("taskType") == task_type), None)


def generate_image(
    prompt: str,
    use_image_to_image: bool = False,
    base_image_uuid: Optional[str] = None,
) -> Dict[str, Any]:
    """Run one imageInference task; with image-to-image the uploaded image seeds the result."""
    task_uuid = str(uuid4())
    task = {
        "taskType": "imageInference",
        "taskUUID": task_uuid,
        "positivePrompt": PROMPT_TEMPLATE.format(prompt=prompt),
        "width": 1024,
        "height": 1024,
        "model": settings.runware_model,
        "numberResults": 1,
        "outputFormat": "WEBP",
        "CFGScale": 7,
        "steps": 20,
        "scheduler": "FlowMatchEulerDiscreteScheduler",
    }
    if use_image_to_image and base_image_uuid:
        task["seedImage"] = base_image_uuid
        task["strength"] = IMAGE_TO_IMAGE_STRENGTH

    result = _find_task(_call_runware([task]), "imageInference")
    if not result or not result.get("imageURL"):
        raise ImageGenerationError("No image generated")

    logger.info(f"Image generated for task {task_uuid}")
    return {
        "image_url": result["imageURL"],
        "prompt": prompt,
        "taskUUID": result.get("taskUUID", task_uuid),
        "seed": result.get("seed"),
    }


def upload_image(image: str, task_uuid: str) -> Dict[str, Any]:
    result = _find_task(
        _call_runware([{"taskType": "imageUpload", "taskUUID": task_uuid, "image": image}]),
        "imageUpload",
    )
    if not result:
        raise ImageGenerationError("No upload response received from Runware")

    return {
        "imageUUID": result.get("imageUUID"),
        "taskUUID": result.get("taskUUID", task_uuid),
    }
