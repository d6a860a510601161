"""Application layer module.

Contains the catalog console, which orchestrates the catalog components
and converts domain errors into user notifications.
"""

from storeadmin.application.catalog_console import (
    CatalogConsole,
    Notification,
    NotificationLevel,
    build_console,
    build_gateway,
)

__all__ = [
    "CatalogConsole",
    "Notification",
    "NotificationLevel",
    "build_console",
    "build_gateway",
]
