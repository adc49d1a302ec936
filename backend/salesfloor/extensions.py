# Overview: Flask extension instance holding the store service for the running app.

from __future__ import annotations

from flask import Flask, current_app

from .services.store_service import StoreService


class SalesFloor:
    """
    Flask extension that owns one StoreService per application.

    Follows the init_app pattern so the instance can be created at import
    time and bound inside create_app().
    """

    def __init__(self, app: Flask | None = None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        store = StoreService.from_config(app.config)
        app.extensions["salesfloor"] = store
        app.logger.info(
            "Store '%s' ready; receipts in %s",
            store.name,
            store.config.receipt_output_dir,
        )


def get_store() -> StoreService:
    return current_app.extensions["salesfloor"]


salesfloor = SalesFloor()
