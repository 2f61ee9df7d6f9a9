# destitutes/logging_setup.py
import logging

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install one stream handler on the root logger. Safe to call on every Streamlit rerun."""
    root = logging.getLogger()
    root.setLevel(level.upper())
    if any(getattr(h, "_doi", False) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._doi = True
    root.addHandler(handler)
    # firebase/google clients are chatty at INFO
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
