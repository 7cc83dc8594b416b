import logging
import os
import sys

CONSOLE_HANDLER_NAME = "tobacco_inventory.console"


class NamespaceFilter(logging.Filter):
    """Passes records whose logger name starts with one of ``allowed_namespaces``."""

    def __init__(self, allowed_namespaces=None):
        super().__init__()
        self.allowed_namespaces = tuple(allowed_namespaces or ())

    def filter(self, record):
        if not self.allowed_namespaces:
            return True
        return record.name.startswith(self.allowed_namespaces)


def parse_namespaces(raw: str) -> list:
    """Splits a comma separated LOG_NAMESPACES value, dropping blank entries."""
    return [ns.strip() for ns in (raw or "").split(",") if ns.strip()]


log_formatter = logging.Formatter(
    fmt="%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

app_logger = logging.getLogger("tobacco_inventory")


def configure_logging() -> logging.Handler:
    """
    Applies LOG_LEVEL and LOG_NAMESPACES to the package logger.

    The stdout handler is installed under a fixed name and replaces any
    handler of that name, so calling this again (or re-importing the module)
    never stacks duplicate handlers.
    """
    app_logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(CONSOLE_HANDLER_NAME)
    handler.setFormatter(log_formatter)

    # --- Namespace-based Filter ---
    # Comma separated logger prefixes, e.g.
    #   LOG_NAMESPACES=tobacco_inventory.features.reports,tobacco_inventory.main
    # An empty value lets every record through.
    handler.addFilter(NamespaceFilter(parse_namespaces(os.getenv("LOG_NAMESPACES", ""))))

    for existing in [h for h in app_logger.handlers if h.get_name() == CONSOLE_HANDLER_NAME]:
        app_logger.removeHandler(existing)
    app_logger.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return handler


# Modules use logging.getLogger(__name__), so loggers such as
# "tobacco_inventory.features.reports.service" inherit from the package logger
# unless a level is set for their own namespace.
console_handler = configure_logging()
