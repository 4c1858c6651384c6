from __future__ import annotations

import os
from collections.abc import Callable, Generator

import pytest

from app.config import AppSettings, LayoutSettings
from domain.models import ColumnSize


def _clear_efl_env() -> None:
    for key in list(os.environ):
        if key.startswith("EFL_"):
            os.environ.pop(key, None)


_clear_efl_env()


@pytest.fixture(autouse=True)
def clear_efl_env() -> Generator[None, None, None]:
    _clear_efl_env()
    yield
    _clear_efl_env()


@pytest.fixture
def column() -> ColumnSize:
    # 100 units per hour keeps expected coordinates readable.
    return ColumnSize(width=300.0, height=2400.0)


@pytest.fixture
def layout_settings() -> LayoutSettings:
    return LayoutSettings(
        column_width=300.0,
        column_height=2400.0,
        time_budget_seconds=15.0,
        domain_strategy="sub_optimal",
        log_level="INFO",
    )


@pytest.fixture
def layout_settings_factory(
    layout_settings: LayoutSettings,
) -> Callable[..., LayoutSettings]:
    def _factory(**overrides: object) -> LayoutSettings:
        return layout_settings.model_copy(update=overrides)

    return _factory


@pytest.fixture
def app_settings(layout_settings: LayoutSettings) -> AppSettings:
    return AppSettings(layout=layout_settings)


@pytest.fixture
def app_settings_factory(
    layout_settings_factory: Callable[..., LayoutSettings],
) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        return AppSettings(layout=layout_settings_factory(**overrides))

    return _factory
