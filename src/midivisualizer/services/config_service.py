"""Observable configuration: the style selector the UI, dispatcher and synth share."""

import logging
from pathlib import Path
from threading import Lock
from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from midivisualizer.protocols import ConfigEvent, ConfigObserver
from midivisualizer.utils import ObserverManager, PydanticPersistence

logger = logging.getLogger(__name__)

ConfigType = TypeVar("ConfigType", bound=BaseModel)


class ConfigService(Generic[ConfigType]):
    """
    Holds one Pydantic config instance and broadcasts every change.

    Every mutation rebuilds the model through `model_validate`, so an
    invalid value never becomes visible. Observers receive the event
    together with a copy of the resulting config as `config=...`:

        CONFIG_UPDATED  keys=[...], values={...}, config=...
        CONFIG_RESET    config=...
        CONFIG_LOADED   path=..., config=...
        CONFIG_SAVED    path=..., config=...

    Threading:
        Reads and writes are guarded by a lock. Observers are called after
        the lock is released.

    Example:
        ```python
        service = ConfigService[AppConfig](AppConfig, AppConfig.load_or_default())
        service.register_observer(dispatcher)
        service.set("animation_speed", 1.5)
        ```
    """

    def __init__(
        self,
        config_type: Type[ConfigType],
        initial_config: ConfigType,
        default_path: Optional[Path] = None,
    ):
        """
        Initialize the configuration service.

        Args:
            config_type: The Pydantic model class (e.g., AppConfig)
            initial_config: The starting configuration
            default_path: Path used by save()/load() when none is given
        """
        self._config_type = config_type
        self._config = initial_config
        self._default_path = default_path
        self._lock = Lock()
        self._observers = ObserverManager[ConfigObserver](lock=self._lock, observer_type_name="config")

        logger.info(f"ConfigService initialized with {config_type.__name__}")

    # =================================================================
    # Event System
    # =================================================================

    def register_observer(self, observer: ConfigObserver) -> None:
        """Register an observer to receive configuration events."""
        self._observers.register(observer)

    def unregister_observer(self, observer: ConfigObserver) -> None:
        """Unregister an observer."""
        self._observers.unregister(observer)

    def _notify_observers(self, event: ConfigEvent, **kwargs: Any) -> None:
        self._observers.notify("on_config_event", event, **kwargs)

    # =================================================================
    # Access
    # =================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Get one configuration value, or `default` for unknown keys."""
        with self._lock:
            return getattr(self._config, key, default)

    def get_all(self) -> dict[str, Any]:
        """All configuration values as a plain dictionary."""
        with self._lock:
            return self._config.model_dump()

    def get_config(self) -> ConfigType:
        """Deep copy of the current configuration."""
        with self._lock:
            return self._config.model_copy(deep=True)

    @property
    def default_path(self) -> Optional[Path]:
        return self._default_path

    # =================================================================
    # Mutation
    # =================================================================

    def set(self, key: str, value: Any) -> None:
        """
        Set a single configuration value.

        Raises:
            AttributeError: If the model has no field `key`
            ValidationError: If the value fails validation (config unchanged)
        """
        self.update({key: value})

    def update(self, values: dict[str, Any]) -> None:
        """
        Set several values at once; either all of them apply or none does.

        Raises:
            AttributeError: If any key is not a field of the model
            ValidationError: If the resulting config fails validation
        """
        with self._lock:
            unknown = [key for key in values if key not in self._config_type.model_fields]
            if unknown:
                raise AttributeError(
                    f"'{self._config_type.__name__}' has no field(s) {', '.join(unknown)}"
                )

            merged = self._config.model_dump()
            merged.update(values)
            try:
                self._config = self._config_type.model_validate(merged)
            except ValidationError as e:
                logger.error(f"Rejected config update {values}: {e}")
                raise
            snapshot = self._config.model_copy(deep=True)

        logger.debug(f"Config updated: {values}")
        self._notify_observers(
            ConfigEvent.CONFIG_UPDATED, keys=list(values), values=dict(values), config=snapshot
        )

    def reset(self) -> None:
        """Replace the configuration with the model defaults."""
        with self._lock:
            self._config = self._config_type()
            snapshot = self._config.model_copy(deep=True)

        logger.info(f"Config reset to defaults: {self._config_type.__name__}")
        self._notify_observers(ConfigEvent.CONFIG_RESET, config=snapshot)

    # =================================================================
    # Persistence
    # =================================================================

    def _resolve_path(self, path: Optional[Path]) -> Path:
        file_path = path or self._default_path
        if file_path is None:
            raise ValueError("No path specified and no default_path set")
        return Path(file_path)

    def load(self, path: Optional[Path] = None) -> None:
        """
        Replace the configuration with the contents of a JSON file.

        Raises:
            ValueError: If no path is given and no default path is set
            FileNotFoundError: If the file doesn't exist
            ConfigFileInvalidError: If the file is not valid JSON
            ConfigValidationError: If a value fails validation
        """
        file_path = self._resolve_path(path)
        new_config = PydanticPersistence.load_json(file_path, self._config_type)

        with self._lock:
            self._config = new_config
            snapshot = self._config.model_copy(deep=True)

        logger.info(f"Config loaded from {file_path}")
        self._notify_observers(ConfigEvent.CONFIG_LOADED, path=file_path, config=snapshot)

    def save(self, path: Optional[Path] = None) -> None:
        """
        Write the configuration to a JSON file.

        Raises:
            ValueError: If no path is given and no default path is set
        """
        file_path = self._resolve_path(path)
        with self._lock:
            snapshot = self._config.model_copy(deep=True)

        PydanticPersistence.save_json(snapshot, file_path)

        logger.info(f"Config saved to {file_path}")
        self._notify_observers(ConfigEvent.CONFIG_SAVED, path=file_path, config=snapshot)
