"""
Process configuration for the watermark hook, read once from the environment.
"""
import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, ConfigDict

DEFAULT_ENVIRONMENT_ID = "master"
DEFAULT_LOCALE = "es"


class WatermarkSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Missing values are not validated here; the Contentful and image calls
    # surface them as errors.
    space_id: Optional[str] = None
    watermark_image_url: Optional[str] = None
    cma_access_token: Optional[str] = None
    environment_id: str = DEFAULT_ENVIRONMENT_ID
    locale: str = DEFAULT_LOCALE

    @classmethod
    def from_env(cls) -> "WatermarkSettings":
        return cls(
            space_id=os.environ.get("SPACE_ID"),
            watermark_image_url=os.environ.get("WATERMARK_IMAGE_URL"),
            cma_access_token=os.environ.get("CMA_ACCESS_TOKEN"),
            environment_id=os.environ.get("CONTENTFUL_ENVIRONMENT") or DEFAULT_ENVIRONMENT_ID,
            locale=os.environ.get("CONTENTFUL_LOCALE") or DEFAULT_LOCALE,
        )


@lru_cache(maxsize=1)
def get_settings() -> WatermarkSettings:
    """Settings for the lifetime of the worker process."""
    return WatermarkSettings.from_env()
