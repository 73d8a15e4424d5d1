"""
Index-Private Marlin 설정
==========================

  | 필드                       | 기본값 | 환경 변수                                 |
  |----------------------------|--------|-------------------------------------------|
  | parallel                   | False  | ZKP_MARLIN_PARALLEL                       |
  | max_workers                | None   | ZKP_MARLIN_MAX_WORKERS                    |
  | hiding                     | True   | ZKP_MARLIN_HIDING                         |
  | diagnostic                 | False  | ZKP_MARLIN_DIAGNOSTIC                     |
  | min_constraint_domain_size | 2      | ZKP_MARLIN_MIN_CONSTRAINT_DOMAIN_SIZE     |
  | min_nonzero_domain_size    | 2      | ZKP_MARLIN_MIN_NONZERO_DOMAIN_SIZE        |

parallel: 독립적인 계산(행렬-벡터 곱, 보간, 커밋)을 스레드 풀로 처리한다.
  결과 바이트열은 순차 실행과 동일하다.
hiding: 커밋먼트에 블라인딩 다항식을 더하고 witness를 마스킹한다.
diagnostic: 검증 실패 시 실패한 검사 이름을 예외와 로그에 남긴다.
min_*_domain_size: 도메인 크기를 공개된 버킷으로 올려서
  회로 크기 정보 노출을 줄인다.
"""

import os
from dataclasses import dataclass, asdict, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class MarlinConfig:
    parallel: bool = False
    max_workers: Optional[int] = None
    hiding: bool = True
    diagnostic: bool = False
    min_constraint_domain_size: int = 2
    min_nonzero_domain_size: int = 2

    def validate(self) -> None:
        if self.max_workers is not None and self.max_workers <= 0:
            raise ValueError(f"max_workers must be positive (got {self.max_workers}).")
        for name, v in (("min_constraint_domain_size", self.min_constraint_domain_size),
                        ("min_nonzero_domain_size", self.min_nonzero_domain_size)):
            if v < 1:
                raise ValueError(f"{name} must be at least 1 (got {v}).")

    def with_overrides(self, **kwargs) -> "MarlinConfig":
        cfg = replace(self, **kwargs)
        cfg.validate()
        return cfg

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_env(cls, base: Optional["MarlinConfig"] = None,
                 prefix: str = "ZKP_MARLIN_") -> "MarlinConfig":
        """환경 변수로 base 설정을 덮어쓴다."""
        cfg = base or cls()
        max_workers = os.getenv(f"{prefix}MAX_WORKERS")
        new_cfg = cls(
            parallel=_getenv_bool(f"{prefix}PARALLEL", cfg.parallel),
            max_workers=(_getenv_int(f"{prefix}MAX_WORKERS", 0)
                         if max_workers not in (None, "") else cfg.max_workers),
            hiding=_getenv_bool(f"{prefix}HIDING", cfg.hiding),
            diagnostic=_getenv_bool(f"{prefix}DIAGNOSTIC", cfg.diagnostic),
            min_constraint_domain_size=_getenv_int(
                f"{prefix}MIN_CONSTRAINT_DOMAIN_SIZE", cfg.min_constraint_domain_size),
            min_nonzero_domain_size=_getenv_int(
                f"{prefix}MIN_NONZERO_DOMAIN_SIZE", cfg.min_nonzero_domain_size),
        )
        new_cfg.validate()
        return new_cfg


DEFAULT_CONFIG = MarlinConfig()


def resolve(config: Optional[MarlinConfig]) -> MarlinConfig:
    """None이면 환경 변수 기반 설정을 사용한다."""
    if config is None:
        return MarlinConfig.from_env()
    return config


# -------------------------- Loaders --------------------------


def _getenv_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(str(v).replace("_", ""))
    except ValueError as e:
        raise ValueError(f"Invalid int for {name}: {v!r}") from e


def _getenv_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    s = v.strip().lower()
    if s in ("1", "true", "yes", "on"):
        return True
    if s in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid bool for {name}: {v!r}")
