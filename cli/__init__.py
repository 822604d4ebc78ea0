# CLI Interface

from .app import run_cli
from .logging_setup import setup_logging
