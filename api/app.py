"""Flask REST API exposing the expense record store."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from iexpense.config import Settings
from iexpense.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from iexpense.models import Category, ExpenseRecord
from iexpense.services import ExpenseStore, SaveResult
from iexpense.storage import FileStorage, KeyValueStorage
from iexpense.validators import record_from_payload


def create_app(
    data_dir: Optional[Path] = None,
    key: Optional[str] = None,
    *,
    storage: Optional[KeyValueStorage] = None,
    settings: Optional[Settings] = None,
) -> Flask:
    app = Flask(__name__)
    settings = settings or Settings.from_env()

    if settings.is_dev:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    elif settings.allowed_origins:
        CORS(app, resources={r"/*": {"origins": settings.allowed_origins}}, supports_credentials=True)
    else:
        CORS(app)

    backend = storage or FileStorage(Path(data_dir or settings.data_dir))
    store = ExpenseStore(backend, key or settings.storage_key)
    app.extensions["iexpense_store"] = store

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _with_warning(payload: Dict[str, Any], result: SaveResult) -> Dict[str, Any]:
        if not result:
            app.logger.warning("Expense change was not saved: %s", result.error)
            payload["warning"] = f"Change kept in memory but not saved: {result.error}"
        return payload

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _items(records: Iterable[ExpenseRecord]) -> list:
        return [record.to_dict() for record in records]

    @app.get("/expenses")
    def list_expenses():
        category = request.args.get("category") or request.args.get("type")
        if category:
            records = store.category_view(category)
            total = store.total(category)
        else:
            records = list(store.records)
            total = store.total()
        return _success({"items": _items(records), "total": f"{total:.2f}"})

    @app.post("/expenses")
    def create_expense():
        record = record_from_payload(_json_body())
        result = store.add(record)
        return _success(_with_warning(record.to_dict(), result), 201)

    @app.get("/expenses/<expense_id>")
    def get_expense(expense_id: str):
        return _success(store.get(expense_id).to_dict())

    @app.delete("/expenses/<expense_id>")
    def delete_expense(expense_id: str):
        result = store.delete(expense_id)
        if not result:
            return _success(_with_warning({"id": expense_id}, result))
        return _success({}, 204)

    @app.post("/expenses/remove")
    def remove_expenses():
        indices = _json_body().get("indices")
        if not isinstance(indices, list) or not all(
            isinstance(index, int) and not isinstance(index, bool) for index in indices
        ):
            raise ValidationError("indices must be a list of integers")
        result = store.remove(indices)
        return _success(_with_warning({"items": _items(store.records)}, result))

    @app.get("/summary")
    def summary():
        categories = {
            category.value: {
                "count": len(store.category_view(category)),
                "total": f"{store.total(category):.2f}",
            }
            for category in Category
        }
        return _success({
            "categories": categories,
            "count": len(store),
            "total": f"{store.total():.2f}",
        })

    return app
