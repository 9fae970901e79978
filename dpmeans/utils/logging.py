import logging
from typing import Any, Dict


def setup_logger(level: int = logging.INFO) -> logging.Logger:
    """
    Создаёт и настраивает корневой логгер проекта ``dpmeans``.

    :param level: минимальный уровень логирования
    :return: настроенный экземпляр :class:`logging.Logger`
    """
    logger = logging.getLogger("dpmeans")
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # Чтобы сообщения не дублировались через root-логгер
    logger.propagate = False

    return logger


def format_dataset_prefix(meta: Dict[str, Any]) -> str:
    """
    Префикс для логов по метаданным датасета и параметрам fit.

    Ожидается словарь с ключами ``N``, ``D`` и опциональными ``K`` (истинное
    число кластеров, если известно) и ``lam``.
    """
    parts = [f"N={meta['N']}", f"D={meta['D']}"]
    if meta.get("K") is not None:
        parts.append(f"K_true={meta['K']}")
    if meta.get("lam") is not None:
        parts.append(f"lam={meta['lam']:g}")
    return "[" + " ".join(parts) + "]"
