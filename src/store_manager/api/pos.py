"""Point-of-sale endpoints used by the Store Manager screen."""

import base64
import binascii
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from store_manager.api.admin import require_admin
from store_manager.api.pos_models import (
    FocusRequest,
    ImageScanRequest,
    KeystrokesRequest,
    ScanRequest,
    StartSessionRequest,
    TemporaryProductRequest,
)
from store_manager.containers import AppContainer
from store_manager.domain.notices import Notice
from store_manager.domain.sessions import CustomerSession, cart_total
from store_manager.errors import CameraUnavailableError
from store_manager.services.store_manager import SaleResult, ScanResult

router = APIRouter(prefix="/pos", tags=["pos"], dependencies=[Depends(require_admin)])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.get("/state")
async def pos_state(request: Request) -> dict[str, object]:
    """Return sessions, dialog state and camera status."""
    container = _container(request)
    manager = container.store_manager
    camera = container.camera_scanner
    active_id = manager.registry.active_id
    return {
        "sessions": [
            _session_payload(session) for session in manager.registry.list_sessions()
        ],
        "active_session_id": str(active_id) if active_id else None,
        "dialog": manager.dialog,
        "pending_barcode": manager.pending_barcode,
        "camera": {"running": camera.running, "warning": camera.warning},
        "notices": [_notice_payload(notice) for notice in manager.notices],
    }


@router.post("/sessions")
async def start_session(
    body: StartSessionRequest, request: Request
) -> dict[str, object]:
    """Open a new customer session and make it active."""
    manager = _container(request).store_manager
    notice = manager.start_session(body.name)
    active_id = manager.registry.active_id
    return {
        "notice": _notice_payload(notice),
        "active_session_id": str(active_id) if active_id else None,
    }


@router.delete("/sessions/{session_id}")
async def end_session(session_id: UUID, request: Request) -> dict[str, object]:
    """Close a session and discard its cart."""
    notice = _container(request).store_manager.end_session(session_id)
    return {"notice": _notice_payload(notice)}


@router.post("/sessions/{session_id}/activate")
async def activate_session(session_id: UUID, request: Request) -> dict[str, object]:
    """Route scanner input to a session."""
    notice = _container(request).store_manager.set_active(session_id)
    return {"notice": _notice_payload(notice)}


@router.delete("/sessions/{session_id}/cart/{product_id}")
async def remove_cart_item(
    session_id: UUID, product_id: str, request: Request
) -> dict[str, object]:
    """Remove a product line from a session's cart."""
    manager = _container(request).store_manager
    notice = manager.remove_item(session_id, product_id)
    return {
        "notice": _notice_payload(notice),
        "session": _session_payload(manager.registry.get(session_id)),
    }


@router.post("/sessions/{session_id}/complete")
async def complete_sale(session_id: UUID, request: Request) -> dict[str, object]:
    """Finalize the sale for a session."""
    result = _container(request).store_manager.complete_sale(session_id)
    return _sale_payload(result)


@router.post("/scan")
async def scan_manual(body: ScanRequest, request: Request) -> dict[str, object]:
    """Process a manually entered barcode."""
    result = _container(request).input_router.submit_manual(body.barcode)
    return {"result": _scan_payload(result)}


@router.post("/keys")
async def scan_keystrokes(
    body: KeystrokesRequest, request: Request
) -> dict[str, object]:
    """Feed keyboard-wedge keystrokes to the hardware scanner channel."""
    input_router = _container(request).input_router
    results = []
    for key in body.keys:
        result = input_router.handle_key(key)
        if result is not None:
            results.append(_scan_payload(result))
    return {"results": results, "pending": input_router.keystrokes.pending}


@router.post("/scan/image")
async def scan_image(body: ImageScanRequest, request: Request) -> dict[str, object]:
    """Decode a barcode photo, optionally falling back to the AI reader."""
    try:
        image_bytes = base64.b64decode(body.image_base64, validate=True)
    except binascii.Error as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid image data"
        ) from exc
    result = await _container(request).input_router.submit_image(
        image_bytes, use_ai_fallback=body.use_ai_fallback
    )
    if result is None:
        return {
            "result": None,
            "notice": _notice_payload(
                Notice.warning(
                    "No barcode found",
                    "Could not read a barcode from the image. Try a clearer photo.",
                )
            ),
        }
    return {"result": _scan_payload(result)}


@router.post("/focus")
async def set_focus(body: FocusRequest, request: Request) -> dict[str, bool]:
    """Tell the hardware channel whether a text field has focus."""
    _container(request).input_router.text_field_focused = body.text_field
    return {"text_field": body.text_field}


@router.post("/dialogs/{kind}")
async def open_dialog(kind: str, request: Request) -> dict[str, object]:
    """Record that a dialog is open on the screen."""
    manager = _container(request).store_manager
    manager.open_dialog(kind)
    return {"dialog": manager.dialog}


@router.delete("/dialogs")
async def dismiss_dialog(request: Request) -> dict[str, object]:
    """Close the open dialog."""
    manager = _container(request).store_manager
    manager.dismiss_dialog()
    return {"dialog": None}


@router.post("/unknown/temporary")
async def sell_temporary(
    body: TemporaryProductRequest, request: Request
) -> dict[str, object]:
    """Sell the pending unknown barcode as a temporary item."""
    result = _container(request).store_manager.sell_as_temporary(body.name, body.price)
    return {"result": _scan_payload(result)}


@router.get("/unknown/form")
async def product_form(request: Request) -> dict[str, object]:
    """Open the product form seeded with the pending barcode."""
    seed = _container(request).store_manager.open_product_form()
    if seed is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No unknown product is waiting to be resolved",
        )
    return {"form": seed}


@router.post("/unknown/inventory")
async def add_to_inventory(
    request: Request, fields: dict[str, object] = Body(...)
) -> dict[str, object]:
    """Create a catalog product for the pending barcode and add it to the cart."""
    result = _container(request).store_manager.add_to_inventory(fields)
    return {"result": _scan_payload(result)}


@router.post("/camera/start")
async def start_camera(request: Request) -> dict[str, object]:
    """Start the live camera scanner."""
    camera = _container(request).camera_scanner
    try:
        await camera.start()
    except CameraUnavailableError:
        return {
            "running": False,
            "notice": _notice_payload(
                Notice.warning("Camera access required", camera.warning or "")
            ),
        }
    return {"running": camera.running}


@router.post("/camera/stop")
async def stop_camera(request: Request) -> dict[str, object]:
    """Stop the camera and release the device."""
    camera = _container(request).camera_scanner
    await camera.stop()
    return {"running": camera.running}


@router.get("/receipt", response_class=PlainTextResponse)
async def print_receipt(request: Request) -> PlainTextResponse:
    """Render the most recently staged bill for printing."""
    receipt_service = _container(request).receipt_service
    payload = receipt_service.load_staged()
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No bill data found. Please complete a sale first.",
        )
    return PlainTextResponse(receipt_service.render_text(payload))


def _notice_payload(notice: Notice) -> dict[str, str]:
    return {"level": notice.level, "title": notice.title, "message": notice.message}


def _session_payload(session: CustomerSession) -> dict[str, object]:
    return {
        "id": str(session.id),
        "name": session.name,
        "items": [
            {
                "product_id": line.product_id,
                "name": line.name,
                "unit_price": line.unit_price,
                "quantity": line.quantity,
                "image_ref": line.image_ref,
            }
            for line in session.lines
        ],
        "total": cart_total(session.lines),
    }


def _scan_payload(result: ScanResult | None) -> dict[str, object] | None:
    if result is None:
        return None
    payload: dict[str, object] = {"notice": _notice_payload(result.notice)}
    if result.line is not None:
        payload["line"] = {
            "product_id": result.line.product_id,
            "name": result.line.name,
            "quantity": result.line.quantity,
        }
    if result.prompt is not None:
        payload["prompt"] = {
            "barcode": result.prompt.barcode,
            "options": list(result.prompt.options),
        }
    return payload


def _sale_payload(result: SaleResult) -> dict[str, object]:
    payload: dict[str, object] = {"notice": _notice_payload(result.notice)}
    if result.receipt is not None:
        payload["order_id"] = result.receipt.order.id
        payload["total"] = result.receipt.order.total
        payload["print_path"] = result.receipt.print_path
    return payload
