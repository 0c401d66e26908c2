import logging
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(log_filename: Optional[str] = None, level: int = logging.INFO) -> None:
    """
    Configure the root logger.
    Logs go to ``log_filename`` (appending) when set, to the console otherwise.
    """
    if log_filename:
        logging.basicConfig(
            level=level,
            format=LOG_FORMAT,
            filename=log_filename,
            filemode="a",
            force=True,
        )
        print(f"Start logging to file {log_filename}")
        logging.getLogger(__name__).info("=====Start logging=====")
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
        print("Start logging to console")
