from pydantic import BaseModel
from typing import Optional


class GenerateImageRequest(BaseModel):
    prompt: Optional[str] = None
    useImageToImage: bool = False
    baseImageUUID: Optional[str] = None


class UploadImageRequest(BaseModel):
    image: Optional[str] = None  # base64 / data URI
    taskUUID: Optional[str] = None


class ImageStatusUpdate(BaseModel):
    status: str
