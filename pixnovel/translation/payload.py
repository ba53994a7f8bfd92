from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


class NovelImage(BaseModel):
    """An image uploaded alongside the novel text."""
    original_url: Optional[str] = Field(
        None, description="Full size image URL on the pixiv image host"
    )

    model_config = {
        "frozen": True,
    }

    @model_validator(mode="before")
    @classmethod
    def lift_original_url(cls, data: Any) -> Any:
        # Upstream payloads nest the URL as {"urls": {"original": ...}}
        if isinstance(data, dict) and "original_url" not in data:
            urls = data.get("urls")
            if isinstance(urls, dict) and "original" in urls:
                return {**data, "original_url": urls["original"]}
        return data


class NovelPayload(BaseModel):
    """The novel object embedded in a webview page."""
    text: str = Field("", description="Novel body in pixiv markup")
    images: Dict[str, NovelImage] = Field(
        default_factory=dict, description="Uploaded images keyed by image id"
    )

    model_config = {
        "frozen": True,
    }

    @field_validator("text", mode="before")
    @classmethod
    def null_text_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("images", mode="before")
    @classmethod
    def empty_images(cls, value: Any) -> Any:
        # PHP-style serializers emit [] for an empty map
        if value is None or value == []:
            return {}
        return value


ImageMap = Dict[str, NovelImage]
