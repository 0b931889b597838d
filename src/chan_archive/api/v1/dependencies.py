"""Shared API dependencies for the render endpoints."""

from typing import Annotated

from fastapi import Depends

from chan_archive.core.hooks import HookRegistry, get_hook_registry
from chan_archive.core.settings import Settings, settings
from chan_archive.services.uri import PathUriBuilder


def get_settings() -> Settings:
    """Return the application settings."""
    return settings


def get_uri_builder() -> PathUriBuilder:
    """Return a URI builder rooted at the configured base URL."""
    return PathUriBuilder(settings.base_url)


SettingsDep = Annotated[Settings, Depends(get_settings)]
UriBuilderDep = Annotated[PathUriBuilder, Depends(get_uri_builder)]
HooksDep = Annotated[HookRegistry, Depends(get_hook_registry)]
