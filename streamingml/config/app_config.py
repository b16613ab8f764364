#!filepath: streamingml/config/app_config.py
import os

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .log_config import LogConfig
from .classifier_config import ClassifierConfig

# env var -> (section, key)
_ENV_OVERRIDES = {
    "STREAMINGML_LOG_LEVEL": ("log", "level"),
    "STREAMINGML_LOG_DIR": ("log", "dir"),
    "STREAMINGML_PREDICTION_SAMPLES": ("classifier", "prediction_samples"),
    "STREAMINGML_POSTERIOR": ("classifier", "posterior"),
    "STREAMINGML_CONFIDENCE_METRIC": ("classifier", "confidence_metric"),
}


def default_config_path() -> str:
    """
    streamingml/config/base.yml（随包发布，不依赖当前工作目录）
    """
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), "base.yml")


class AppConfig(BaseModel):
    log: LogConfig = Field(default_factory=LogConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)

    @classmethod
    def load(cls, path: str | None = None, env_file: str | None = None) -> "AppConfig":
        """
        加载 YAML 配置 + .env
        - 默认使用包内 config/base.yml
        - 环境变量覆盖 YAML
        """
        # 1) 先加载 .env（不覆盖已存在的环境变量）
        load_dotenv(env_file)

        # 2) 决定配置文件路径
        if path is None:
            path = default_config_path()

        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file not found: {path}")

        # 3) 读取 YAML
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        # 4) 从 env 注入覆盖项
        for env_key, (section, key) in _ENV_OVERRIDES.items():
            value = os.getenv(env_key)
            if value is not None:
                raw.setdefault(section, {})[key] = value

        return cls(**raw)
