from .assistant import Assistant
from .logger import setup_logger
