"""Logging utility for the waitlist API"""
import logging
import os
import sys

log_level = os.environ.get('LOG_LEVEL', 'INFO').upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger('waitlist_api')


def get_logger(name: str) -> logging.Logger:
    """Child logger under the app logger, e.g. waitlist_api.d1"""
    return logger.getChild(name)


def mask_email(email: str) -> str:
    """Keep only the domain so log lines never carry a full address."""
    _, _, domain = (email or "").rpartition("@")
    return f"***@{domain}" if domain else "***"
