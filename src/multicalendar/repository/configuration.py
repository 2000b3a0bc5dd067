# SPDX-License-Identifier: MIT

from copy import deepcopy
from pathlib import Path
from typing import Optional, cast

from yaml import dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader  # noqa: F401
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from multicalendar import configuration


class ConfigurationRepository:
    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path if path is not None else configuration.APP_CONFIG_PATH
        self._config: Optional[configuration.Configuration] = None
        self.is_dirty = False

    @property
    def config(self) -> configuration.Configuration:
        if self._config is None:
            self.__load_data()
        if self._config is None:
            raise ValueError()
        return self._config

    def __load_data(self) -> None:
        raw_config = None
        if self.path.is_file():
            raw_config = load(self.path.read_text(), Loader=Loader)

        # Keys missing from older files fall back to their defaults
        config = configuration.default_configuration()
        if raw_config is not None:
            if not isinstance(raw_config, dict):
                raise ValueError(f"{self.path} does not hold a mapping")
            config.update(
                {key: value for key, value in raw_config.items() if key in config}  # type: ignore[typeddict-item]
            )
        configuration.validate_configuration(config)
        self._config = config

    def __save_data(self, config: configuration.Configuration) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(dump(dict(config), Dumper=Dumper))

    def flush(self) -> bool:
        if self._config is not None and self.is_dirty:
            self.__save_data(self._config)
            self.is_dirty = False
            return True
        return False

    def get_config(self) -> configuration.Configuration:
        return deepcopy(self.config)

    def update_config(
        self,
        past_months_to_render: Optional[int] = None,
        future_months_to_render: Optional[int] = None,
        day_cell_width: Optional[int] = None,
        day_cell_height: Optional[int] = None,
        event_row_height: Optional[int] = None,
        resource_row_height: Optional[int] = None,
        column_gap: Optional[int] = None,
        overscan: Optional[int] = None,
        fetch_debounce_ms: Optional[int] = None,
        resize_settle_ms: Optional[int] = None,
        allow_selection: Optional[bool] = None,
        allow_select_in_past: Optional[bool] = None,
        show_header: Optional[bool] = None,
    ) -> None:
        updates = {
            "past_months_to_render": past_months_to_render,
            "future_months_to_render": future_months_to_render,
            "day_cell_width": day_cell_width,
            "day_cell_height": day_cell_height,
            "event_row_height": event_row_height,
            "resource_row_height": resource_row_height,
            "column_gap": column_gap,
            "overscan": overscan,
            "fetch_debounce_ms": fetch_debounce_ms,
            "resize_settle_ms": resize_settle_ms,
            "allow_selection": allow_selection,
            "allow_select_in_past": allow_select_in_past,
            "show_header": show_header,
        }
        config = cast(configuration.Configuration, dict(self.config))
        for key, value in updates.items():
            if value is not None:
                config[key] = value  # type: ignore[literal-required]
        configuration.validate_configuration(config)

        self._config = config
        self.is_dirty = True


CONFIGURATION_REPO = ConfigurationRepository()
