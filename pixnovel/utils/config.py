import os
import yaml
import logging
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field

DOTENV_PATH = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(DOTENV_PATH)

CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"

DEFAULT_IMG_PROXY = "https://i.pixiv.re"


class TranslatorConfig(BaseModel):
    """Configuration of the novel translator."""
    img_proxy: Optional[str] = Field(
        None, description="Replacement for the pixiv image origin"
    )
    img_proxy_env_var: Optional[str] = Field(
        "PIXIV_IMG_PROXY", description="Environment variable overriding img_proxy"
    )
    debug: bool = Field(False, description="Enable debug logging")

    def resolved_img_proxy(self) -> str:
        """
        Resolve the image proxy base.
        A set environment variable wins, even when empty. An empty img_proxy
        is a literal empty base; only an unset one falls back to the default.
        """
        if self.img_proxy_env_var:
            env_val = os.getenv(self.img_proxy_env_var)
            if env_val is not None:
                return env_val
        if self.img_proxy is None:
            return DEFAULT_IMG_PROXY
        return self.img_proxy


def setup_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # bs4 and scrapy are chatty at debug level
    for name in ("scrapy", "bs4"):
        logging.getLogger(name).setLevel(logging.WARNING)


def load_config(config_path: str = CONFIG_PATH) -> TranslatorConfig:
    with open(config_path, "r") as f:
        yaml_config = yaml.safe_load(f) or {}

    config = TranslatorConfig.model_validate(yaml_config)

    # Setup logging based on config
    setup_logging(debug=config.debug)

    return config
