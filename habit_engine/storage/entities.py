"""Typed load/save of entity blobs through a StateStore"""
import logging
from typing import Callable, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from habit_engine.exceptions import HabitEngineError, PersistenceUnavailable
from habit_engine.storage.base import StateStore

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def load_model(
    store: StateStore,
    key: str,
    model_cls: Type[M],
    default_factory: Optional[Callable[[], M]] = None
) -> M:
    """
    Load an entity, falling back to defaults only when nothing was ever stored

    Raises:
        PersistenceUnavailable: store failed or the blob doesn't validate
    """
    try:
        blob = store.load(key)
    except HabitEngineError:
        raise
    except Exception as e:
        raise PersistenceUnavailable(
            message=f"Could not load {key}: {e}",
            key=key,
            operation="load",
            cause=e
        )

    if blob is None:
        logger.info(f"No stored {key}, starting from defaults")
        return default_factory() if default_factory else model_cls()

    try:
        return model_cls.model_validate(blob)
    except PydanticValidationError as e:
        raise PersistenceUnavailable(
            message=f"Stored {key} does not match {model_cls.__name__}",
            key=key,
            operation="load",
            cause=e
        )


def save_model(store: StateStore, key: str, model: BaseModel) -> None:
    """
    Persist an entity as one blob

    Raises:
        PersistenceUnavailable: store failed
    """
    try:
        store.save(key, model.model_dump(mode="json"))
    except HabitEngineError:
        raise
    except Exception as e:
        raise PersistenceUnavailable(
            message=f"Could not save {key}: {e}",
            key=key,
            operation="save",
            cause=e
        )
