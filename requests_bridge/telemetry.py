# requests_bridge/telemetry.py
import logging
from pythonjsonlogger import jsonlogger

# uvicorn installs its own handlers; route them through the JSON handler instead
_HOST_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def configure_logging(level="INFO", debug: bool = False):
    if debug:
        level = "DEBUG"
    handler = logging.StreamHandler()
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "name": "logger"},
        )
    )
    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    for name in _HOST_LOGGERS:
        host_logger = logging.getLogger(name)
        host_logger.handlers.clear()
        host_logger.propagate = True
    logger = logging.getLogger("requests_bridge")
    logger.setLevel(level)
    return logger
