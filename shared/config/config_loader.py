"""配置加载。

支持 YAML 配置、环境变量占位符 `${VAR}` 展开，以及 .env/.env.local 自动加载；
解析结果交给 `shared.config.schema.AppConfig` 做严格校验。
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from shared.config.schema import AppConfig


_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")
_ENV_FILES = (".env", ".env.local")


def _parse_env_line(line: str) -> tuple[str, str] | None:
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    if not key:
        return None
    return key, value.strip().strip('"').strip("'")


def _env_files(cfg_path: Path) -> list[Path]:
    """配置文件所在目录及其上一级（仓库根目录）下的 .env / .env.local。"""
    dirs = [cfg_path.parent, cfg_path.parent.parent]
    return [d / name for d in dirs for name in _ENV_FILES]


def _load_envs(cfg_path: Path) -> None:
    """加载 .env 文件；已存在的环境变量不会被覆盖。"""
    for env_file in _env_files(cfg_path):
        if not env_file.is_file():
            continue
        for line in env_file.read_text(encoding="utf-8").splitlines():
            pair = _parse_env_line(line)
            if pair is not None:
                os.environ.setdefault(*pair)


def _substitute(match: re.Match) -> str:
    var_name = match.group(1)
    if var_name not in os.environ:
        raise ValueError(f"Missing environment variable: {var_name}")
    return os.environ[var_name]


def _expand_env(value: Any) -> Any:
    """递归展开字符串里的 `${VAR}`；dict/list 逐项处理。"""
    if isinstance(value, str):
        return _PLACEHOLDER.sub(_substitute, value)
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def parse_config(raw_cfg: dict[str, Any]) -> AppConfig:
    """校验 raw dict 并返回 AppConfig；校验失败统一转成 ValueError。"""
    if not isinstance(raw_cfg, dict):
        raise ValueError("Config root must be a dict")
    try:
        return AppConfig.model_validate(raw_cfg)
    except ValidationError as exc:
        problems = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()))
            problems.append(f"{loc}: {err.get('msg')}")
        raise ValueError("Invalid config: " + "; ".join(problems)) from exc


def load_config(path: str | Path, load_env: bool = True, expand_env: bool = True) -> AppConfig:
    """从 YAML 读取并解析配置。

    Parameters
    ----------
    path:
        配置文件路径。
    load_env:
        是否自动加载 .env/.env.local。
    expand_env:
        是否展开 `${VAR}` 占位符。

    Returns
    -------
    AppConfig
        解析后的配置对象。

    Raises
    ------
    FileNotFoundError
        配置文件不存在。
    ValueError
        缺失环境变量或配置不符合 schema。
    """
    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")

    if load_env:
        _load_envs(cfg_path)

    with cfg_path.open("r", encoding="utf-8") as f:
        raw_cfg: dict[str, Any] = yaml.safe_load(f) or {}

    if expand_env:
        raw_cfg = _expand_env(raw_cfg)
    return parse_config(raw_cfg)
