import logging

from app.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str | None = None) -> None:
    root = logging.getLogger()
    resolved_level = (level or get_settings().log_level).upper()
    root.setLevel(resolved_level)
    if any(getattr(handler, "_smart_grid_handler", False) for handler in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._smart_grid_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    logging.getLogger("app").info("logging configured level=%s", resolved_level)
