# waterlogic/core/logger.py
import sys

from loguru import logger

from waterlogic.core.config import settings

SERVER_LOG = "waterlogic_server.log"
ENGINE_LOG = "waterlogic_engine.log"

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{line} - {message}"


def _engine_only(record) -> bool:
    return record["name"].startswith("waterlogic.services.engine")


def setup_logging() -> str:
    """
    loguru sink 초기화.
    - stderr: settings.LOG_LEVEL 이상
    - waterlogic_server.log: 전체 DEBUG (자정 회전, 10일 보관, zip)
    - waterlogic_engine.log: 평가 엔진 로그만 (선정/가격/진단 추적용)
    """
    log_dir = settings.log_dir_path
    log_dir.mkdir(parents=True, exist_ok=True)

    # 재호출 시 sink 중복 방지 (TestClient lifespan 반복 등)
    logger.remove()

    logger.add(sys.stderr, level=settings.LOG_LEVEL, format=_CONSOLE_FORMAT)

    server_log = log_dir / SERVER_LOG
    logger.add(
        str(server_log),
        rotation="00:00",
        retention="10 days",
        compression="zip",
        level="DEBUG",
        enqueue=True,
        encoding="utf-8",
        format=_FILE_FORMAT,
    )
    logger.add(
        str(log_dir / ENGINE_LOG),
        rotation="00:00",
        retention="10 days",
        compression="zip",
        level="INFO",
        enqueue=True,
        encoding="utf-8",
        filter=_engine_only,
        format=_FILE_FORMAT,
    )

    return str(server_log)
