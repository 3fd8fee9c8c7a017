import logging
import threading
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings

logger = logging.getLogger("tsid.config")

NODE_COUNT = 1024

EXPLICIT = "explicit"
SETTINGS = "settings"
DEFAULT = "default"


class Settings(BaseSettings):
    """Process settings, read from the environment first and `.env` second."""

    TSID_NODE: Optional[int] = None
    TSID_EPOCH: Optional[int] = None
    TSID_ON_EXHAUSTED: str = "wait"
    TSID_ON_CLOCK_REGRESSION: str = "fail"
    TSID_RANDOM_START: bool = False
    TSID_LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


class FactoryConfig(BaseModel):
    """Fully resolved node and epoch for one factory, with where each came from."""

    model_config = ConfigDict(frozen=True)

    node: int
    epoch: int
    node_source: str = EXPLICIT
    epoch_source: str = EXPLICIT


def explicit_source(node: Optional[int] = None, epoch: Optional[int] = None) -> dict:
    """Values passed in code by the caller. Highest precedence."""
    return {"node": node, "epoch": epoch, "name": EXPLICIT}


def settings_source(settings: Optional[Settings] = None) -> dict:
    """Values from the environment, falling back to the `.env` file."""
    settings = settings or Settings()
    return {"node": settings.TSID_NODE, "epoch": settings.TSID_EPOCH, "name": SETTINGS}


def derive_default_node() -> int:
    """Derives a node number from the current OS thread id.

    This is not unique across processes or hosts. Deployments with more than
    one producer must set the node explicitly.
    """
    return threading.get_native_id() % NODE_COUNT


def _first_value(key: str, sources) -> tuple:
    for source in sources:
        value = source.get(key)
        if value is not None:
            return value, source.get("name", EXPLICIT)
    return None, DEFAULT


def resolve_config(*sources: Mapping) -> FactoryConfig:
    """Resolves node and epoch from an ordered list of sources.

    Each source is a mapping that may carry "node" and "epoch". Sources are
    consulted in the order given and the first non-None value wins. With no
    value anywhere the epoch falls back to 0 (Unix epoch) and the node to
    `derive_default_node()`. Values are validated by FactoryConfig, so text
    or fractional numbers raise pydantic.ValidationError.

    Example:
        >>> resolve_config(explicit_source(node=7), settings_source())

    Args:
        *sources: Mappings in precedence order, highest first.

    Returns:
        FactoryConfig: The resolved configuration.
    """
    node, node_source = _first_value("node", sources)
    epoch, epoch_source = _first_value("epoch", sources)

    if node is None:
        node = derive_default_node()
        logger.warning(
            "No TSID node configured, derived node %d from the thread id. "
            "This is not unique across processes or hosts; set TSID_NODE.",
            node,
        )
    if epoch is None:
        epoch = 0

    return FactoryConfig(
        node=node, epoch=epoch, node_source=node_source, epoch_source=epoch_source
    )
