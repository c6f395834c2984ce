# logging_config.py
import logging
import uuid
from typing import Optional

import structlog


def configure_logging(level: str = 'INFO', log_file: Optional[str] = None) -> None:
    """structlog JSON 로거 설정 (CLI / 파이프라인 시작 시 1회 호출)"""
    log_level = getattr(logging, level.upper())
    logging.basicConfig(filename=log_file, level=log_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def bind_run_context(**context) -> str:
    """실행 단위 컨텍스트(run_id 등)를 모든 로그에 바인딩

    Returns:
        생성된 run_id
    """
    run_id = context.pop('run_id', None) or uuid.uuid4().hex[:12]
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(run_id=run_id, **context)
    return run_id
