import logging
import sys
from typing import Union


DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: Union[str, int] = logging.INFO, fmt: str = DEFAULT_FORMAT) -> None:
    """
    Set up root logging for command line use.

    Library code only ever obtains loggers; handlers are installed here.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=fmt,
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )
