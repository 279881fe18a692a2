import logging

# Configure basic logging


def get_logger(name: str | None = None, log_level: int = logging.INFO) -> logging.Logger:
    logging.basicConfig(
        level=log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logger = logging.getLogger(name or "zrxpy")
    logger.setLevel(log_level)
    return logger
