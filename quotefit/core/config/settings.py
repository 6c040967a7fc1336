"""配置管理模块 - 处理quotefit的配置"""

from __future__ import annotations

import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from quotefit.core.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = Path.home() / ".quotefit" / "config.toml"


@dataclass
class FetchConfig:
    """行情服务配置"""

    base_url: str = "https://www.alphavantage.co/query"
    timeout: float = 30.0
    api_key: str | None = None
    output_size: str = "compact"


@dataclass
class ModelConfig:
    """拟合与图表数据配置"""

    default_spline_count: int = 5
    density_bins: int = 30
    density_grid_size: int = 200


@dataclass
class LoggingConfig:
    """日志配置"""

    level: str = "WARNING"
    file: str | None = None
    # 控制台输出JSON行; 日志文件始终为JSON
    serialize: bool = False


@dataclass
class QuoteFitConfig:
    """quotefit主配置"""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> QuoteFitConfig:
        """从字典创建配置"""
        try:
            return cls(
                fetch=FetchConfig(**config_dict.get("fetch", {})),
                model=ModelConfig(**config_dict.get("model", {})),
                logging=LoggingConfig(**config_dict.get("logging", {})),
            )
        except TypeError as exc:
            raise ConfigurationError(f"Unknown configuration key: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "fetch": asdict(self.fetch),
            "model": asdict(self.model),
            "logging": asdict(self.logging),
        }


def _deep_update(d: dict[str, Any], u: dict[str, Any]) -> dict[str, Any]:
    for k, v in u.items():
        if isinstance(v, dict):
            d[k] = _deep_update(d.get(k, {}), v)
        else:
            d[k] = v
    return d


class ConfigManager:
    """配置管理器"""

    def __init__(self, config_path: Path | None = None, *, use_env: bool = True):
        """初始化配置管理器

        Args:
            config_path: 配置文件路径，如果为None则使用默认路径
            use_env: 是否用环境变量覆盖文件配置
        """
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self.use_env = use_env
        self.config = self._load_config()

    def _load_config(self) -> QuoteFitConfig:
        """加载配置"""
        config_dict: dict[str, Any] = {}
        if self.config_path.exists():
            try:
                with open(self.config_path, "rb") as f:
                    config_dict = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                # 配置文件损坏时退回默认配置
                logger.warning("Failed to load config from {}: {}", self.config_path, e)
                config_dict = {}

        if self.use_env:
            _deep_update(config_dict, load_config_from_env())
        return QuoteFitConfig.from_dict(config_dict)

    def get_config(self) -> QuoteFitConfig:
        """获取当前配置"""
        return self.config

    def update_config(self, **updates: Any) -> None:
        """更新配置"""
        config_dict = _deep_update(self.config.to_dict(), updates)
        self.config = QuoteFitConfig.from_dict(config_dict)


def _env_number(name: str, cast: type) -> Any:
    raw = os.getenv(name)
    if raw is None:
        return None
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a {cast.__name__}, got {raw!r}") from exc


def load_config_from_env() -> dict[str, Any]:
    """从环境变量加载配置"""
    config: dict[str, Any] = {}

    # 行情服务配置
    fetch_config: dict[str, Any] = {}
    api_key = os.getenv("QUOTEFIT_API_KEY") or os.getenv("ALPHAVANTAGE_API_KEY")
    if api_key:
        fetch_config["api_key"] = api_key
    if os.getenv("QUOTEFIT_BASE_URL"):
        fetch_config["base_url"] = os.getenv("QUOTEFIT_BASE_URL")
    timeout = _env_number("QUOTEFIT_FETCH_TIMEOUT", float)
    if timeout is not None:
        fetch_config["timeout"] = timeout

    if fetch_config:
        config["fetch"] = fetch_config

    # 模型配置
    spline_count = _env_number("QUOTEFIT_SPLINE_COUNT", int)
    if spline_count is not None:
        config["model"] = {"default_spline_count": spline_count}

    # 日志配置
    logging_config: dict[str, Any] = {}
    if os.getenv("QUOTEFIT_LOG_LEVEL"):
        logging_config["level"] = os.getenv("QUOTEFIT_LOG_LEVEL")
    if os.getenv("QUOTEFIT_LOG_FILE"):
        logging_config["file"] = os.getenv("QUOTEFIT_LOG_FILE")

    if logging_config:
        config["logging"] = logging_config

    return config
