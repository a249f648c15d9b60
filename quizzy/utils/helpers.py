"""
Helpers shared by the resource routers
"""
import uuid
from fastapi import HTTPException
from typing import Any, Dict, List, Optional


def new_id() -> str:
    """Identifier for a newly created record"""
    return uuid.uuid4().hex


def find_record(collection: List[Any], record_id: Any) -> Optional[Dict[str, Any]]:
    """First dict in the collection whose id matches, compared as strings"""
    key = str(record_id)
    for record in collection:
        if isinstance(record, dict) and str(record.get("id")) == key:
            return record
    return None


def get_or_404(collection: List[Any], record_id: Any, label: str) -> Dict[str, Any]:
    record = find_record(collection, record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return record


def remove_record(collection: List[Any], record_id: Any) -> bool:
    """Filter the record out in place; True if something was removed"""
    key = str(record_id)
    kept = [r for r in collection if not (isinstance(r, dict) and str(r.get("id")) == key)]
    removed = len(kept) != len(collection)
    collection[:] = kept
    return removed


def validation_error(details: List[str]) -> HTTPException:
    """400 carrying every violation at once"""
    return HTTPException(
        status_code=400,
        detail={"error": "Validation failed", "details": details}
    )
