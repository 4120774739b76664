# waterlogic/core/config.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, List, Union

from pydantic import Field, AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from waterlogic.services.engine.constants import EngineConfig, DEFAULT_CONFIG


class Settings(BaseSettings):
    """애플리케이션 환경 설정."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    # =========================================================
    # 1. 프로젝트 기본 정보
    # =========================================================
    PROJECT_NAME: str = Field(
        default="WaterLogic Proposal API", description="Swagger UI 등에 표시될 프로젝트 이름"
    )
    API_V1_STR: str = Field(default="/api/v1", description="API 버전 Prefix")

    APP_ENV: Literal["local", "dev", "test", "prod"] = Field(
        default="local",
        description="애플리케이션 실행 환경 (local/dev/test/prod)",
    )

    # =========================================================
    # 2. 보안 / CORS
    # =========================================================
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = Field(
        default=[], description="CORS 허용 도메인 목록 (예: http://localhost:3000)"
    )

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        """문자열로 들어온 CORS 설정을 리스트로 변환"""
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # =========================================================
    # 3. 데이터베이스 / 로그
    # =========================================================
    DB_URL: str = Field(
        default="sqlite:///./.data/waterlogic.db",
        description="SQLAlchemy DB URL (평가 실행 이력 저장용)",
    )

    LOG_DIR: str = Field(default=".logs", description="로그 파일 디렉터리")
    LOG_LEVEL: str = Field(default="INFO", description="콘솔 로그 레벨")

    # =========================================================
    # 4. 엔진 상수 오버라이드 (None이면 기본값 사용)
    # =========================================================
    ELECTRICITY_RATE: float | None = Field(default=None, description="전력 단가 (£/kWh)")
    DISCOUNT_RATE: float | None = Field(default=None, description="NPV 할인율")
    PROJECT_LIFESPAN_YEARS: int | None = Field(default=None, description="NPV 평가 기간 (년)")
    OPEX_ESCALATION_RATE: float | None = Field(default=None, description="OPEX 연간 상승률")
    MARGIN_MIN: float | None = Field(default=None, ge=0, description="가격 탐색 최소 마진")
    MARGIN_MAX: float | None = Field(default=None, ge=0, description="가격 탐색 최대 마진")
    MARGIN_STEP: float | None = Field(default=None, gt=0, description="가격 탐색 마진 간격")
    GRID_CARBON_FACTOR: float | None = Field(
        default=None, description="전력 탄소 배출계수 (kgCO2/kWh)"
    )

    # =========================================================
    # 5. 편의 프로퍼티 / 변환
    # =========================================================
    @property
    def log_dir_path(self) -> Path:
        """로그 디렉터리 절대 경로 (Path 객체)."""
        return Path(self.LOG_DIR).resolve()

    def engine_config(self) -> EngineConfig:
        """환경변수 오버라이드를 반영한 엔진 상수 묶음."""
        overrides = {
            "electricity_rate": self.ELECTRICITY_RATE,
            "discount_rate": self.DISCOUNT_RATE,
            "project_lifespan_years": self.PROJECT_LIFESPAN_YEARS,
            "opex_escalation_rate": self.OPEX_ESCALATION_RATE,
            "margin_min": self.MARGIN_MIN,
            "margin_max": self.MARGIN_MAX,
            "margin_step": self.MARGIN_STEP,
            "grid_carbon_factor": self.GRID_CARBON_FACTOR,
        }
        return DEFAULT_CONFIG.with_overrides(
            **{k: v for k, v in overrides.items() if v is not None}
        )


@lru_cache
def get_settings() -> Settings:
    """FastAPI Depends용 싱글톤 Settings 인스턴스."""
    return Settings()


# 전역 설정 객체
settings = get_settings()
