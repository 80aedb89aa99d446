"""Data Router - undo/redo, import/export, backup/restore and theme."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from ...manager import ContactManager, Intent
from ...transfer import export_filename
from ..dependencies import get_manager, serialize_view
from ..models import ImportRequest

router = APIRouter()

MEDIA_TYPES = {"csv": "text/csv", "json": "application/json"}


@router.post("/history/undo")
def undo(manager: ContactManager = Depends(get_manager)) -> dict:
    changed = manager.dispatch(Intent.UNDO)
    return {"changed": changed, **serialize_view(manager.current_view())}


@router.post("/history/redo")
def redo(manager: ContactManager = Depends(get_manager)) -> dict:
    changed = manager.dispatch(Intent.REDO)
    return {"changed": changed, **serialize_view(manager.current_view())}


@router.get("/export")
def export_contacts(
    format: str = Query("csv", pattern="^(csv|json)$"),
    manager: ContactManager = Depends(get_manager),
) -> Response:
    content = manager.dispatch(Intent.EXPORT, format=format)
    return Response(
        content=content,
        media_type=MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{export_filename(format)}"'},
    )


@router.post("/import")
def import_contacts(
    request: ImportRequest,
    manager: ContactManager = Depends(get_manager),
) -> dict:
    result = manager.dispatch(Intent.IMPORT, text=request.content, format=request.format)
    return {"imported": len(result.contacts), "warnings": result.warnings}


@router.post("/backup")
def backup(manager: ContactManager = Depends(get_manager)) -> dict:
    snapshot = manager.dispatch(Intent.BACKUP)
    return {
        "version": snapshot.version,
        "timestamp": snapshot.timestamp,
        "count": len(snapshot.contacts),
    }


@router.post("/restore")
def restore(manager: ContactManager = Depends(get_manager)) -> dict:
    snapshot = manager.dispatch(Intent.RESTORE)
    return {"restoredFrom": snapshot.timestamp, **serialize_view(manager.current_view())}


@router.get("/theme")
def get_theme(manager: ContactManager = Depends(get_manager)) -> dict:
    return {"theme": manager.theme}


@router.post("/theme/toggle")
def toggle_theme(manager: ContactManager = Depends(get_manager)) -> dict:
    return {"theme": manager.dispatch(Intent.TOGGLE_THEME)}
