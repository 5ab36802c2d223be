"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial

from supabase import create_client

from store_manager.adapters.json_file_storage import JsonFileStorage
from store_manager.adapters.openai_barcode_client import OpenAIBarcodeReaderClient
from store_manager.adapters.opencv_camera import OpenCVFrameSource
from store_manager.adapters.supabase_activity_repository import (
    SupabaseActivityRepository,
)
from store_manager.adapters.supabase_catalog_repository import (
    SupabaseCatalogRepository,
)
from store_manager.adapters.supabase_order_repository import SupabaseOrderRepository
from store_manager.adapters.zxing_decoder import ZxingBarcodeDecoder
from store_manager.config import Settings
from store_manager.services.audit import ActivityService
from store_manager.services.barcode_reader import BarcodeReaderService
from store_manager.services.cart import CartService
from store_manager.services.checkout import SaleFinalizer
from store_manager.services.receipts import ReceiptService
from store_manager.services.resolution import ProductResolver
from store_manager.services.scanner import BarcodeInputRouter, CameraScanner
from store_manager.services.sessions import SessionRegistry
from store_manager.services.storage import LocalStorage
from store_manager.services.store_manager import StoreManager
from store_manager.services.temporary_products import TemporaryProductCache


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    storage: LocalStorage
    store_manager: StoreManager
    input_router: BarcodeInputRouter
    camera_scanner: CameraScanner
    receipt_service: ReceiptService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    storage = JsonFileStorage.create(resolved_settings.storage_dir)
    registry = SessionRegistry(storage)
    registry.load()
    temporary_products = TemporaryProductCache(storage)
    catalog_repository = SupabaseCatalogRepository(supabase_client)
    order_repository = SupabaseOrderRepository(supabase_client)
    activity_service = ActivityService(SupabaseActivityRepository(supabase_client))
    store_manager = StoreManager(
        registry=registry,
        cart_service=CartService(
            registry=registry,
            placeholder_image_url=resolved_settings.placeholder_image_url,
        ),
        resolver=ProductResolver(
            temporary_products=temporary_products,
            catalog_repository=catalog_repository,
        ),
        temporary_products=temporary_products,
        catalog_repository=catalog_repository,
        finalizer=SaleFinalizer(
            registry=registry,
            order_repository=order_repository,
            activity_service=activity_service,
            storage=storage,
        ),
    )
    openai_client = OpenAIBarcodeReaderClient.create(
        resolved_settings.openai_api_key, resolved_settings.openai_timeout_seconds
    )
    barcode_reader = BarcodeReaderService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    decoder = ZxingBarcodeDecoder()
    input_router = BarcodeInputRouter(
        on_barcode=store_manager.process_barcode,
        is_dialog_open=lambda: store_manager.dialog_open,
        decoder=decoder,
        barcode_reader=barcode_reader,
        idle_seconds=resolved_settings.scanner_idle_ms / 1000,
        min_length=resolved_settings.scanner_min_length,
    )
    camera_scanner = CameraScanner(
        frame_source_factory=partial(
            OpenCVFrameSource.open, resolved_settings.camera_device
        ),
        decoder=decoder,
        on_barcode=input_router.emit_from_camera,
        repeat_window_seconds=resolved_settings.camera_repeat_window_seconds,
    )
    receipt_service = ReceiptService(
        storage=storage,
        store_name=resolved_settings.store_name,
        store_address=resolved_settings.store_address,
        store_phone=resolved_settings.store_phone,
    )

    async def close_resources() -> None:
        await camera_scanner.stop()
        input_router.close()
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        storage=storage,
        store_manager=store_manager,
        input_router=input_router,
        camera_scanner=camera_scanner,
        receipt_service=receipt_service,
        close_resources=close_resources,
    )
