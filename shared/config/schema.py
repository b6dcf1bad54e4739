"""配置架构定义（Pydantic Schema）。

目标：
- 让配置成为“强类型 + 可演进”的边界协议；
- 启动阶段尽早失败，避免 typo/类型错误在长时间扫描中“隐蔽爆炸”；
- 业务代码只读属性，不做 `cfg.get(...)` 与深层字典索引。
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DataConfig(BaseModel):
    """输入数据配置。"""
    path: Optional[str] = None
    volume_scale: float = 100_000_000
    initial_capacity: int = Field(default=1024, gt=0)
    model_config = ConfigDict(extra="forbid")


class RunnerConfig(BaseModel):
    """扫描执行配置。"""
    workers: int = 1
    families: List[str] = Field(default_factory=list)
    model_config = ConfigDict(extra="forbid")


class ReportConfig(BaseModel):
    """报告输出配置。"""
    output_dir: str = "results"
    top_n: int = Field(default=10, gt=0)
    export_csv: bool = True
    sample_trades: int = Field(default=20, ge=0)
    model_config = ConfigDict(extra="forbid")


class SweepFamilyConfig(BaseModel):
    """单个策略族的网格覆盖：`params`（笛卡尔积）与 `combos`（显式组合）二选一。"""
    params: Optional[Dict[str, List[Any]]] = None
    combos: Optional[List[Dict[str, Any]]] = None
    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _exactly_one(self) -> "SweepFamilyConfig":
        if (self.params is None) == (self.combos is None):
            raise ValueError("sweep entry must define exactly one of params/combos")
        return self

    def as_grid_spec(self) -> dict[str, Any]:
        if self.combos is not None:
            return {"combos": self.combos}
        return {"params": self.params}


class AppConfig(BaseModel):
    """应用总配置。"""
    data: DataConfig = Field(default_factory=DataConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    sweep: Dict[str, SweepFamilyConfig] = Field(default_factory=dict)
    factors: List[Dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    def grid_overrides(self) -> dict[str, dict[str, Any]]:
        return {name: entry.as_grid_spec() for name, entry in self.sweep.items()}
