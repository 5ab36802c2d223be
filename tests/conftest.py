"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from store_manager.config import Settings
from store_manager.containers import AppContainer
from store_manager.domain.orders import OrderRecord
from store_manager.domain.products import CatalogProduct, ProductDraft
from store_manager.domain.sessions import CartLine
from store_manager.services.audit import ActivityRepository, ActivityService
from store_manager.services.barcode_reader import (
    BarcodeReaderClient,
    BarcodeReaderService,
)
from store_manager.services.cart import CartService
from store_manager.services.checkout import OrderRepository, SaleFinalizer
from store_manager.services.receipts import ReceiptService
from store_manager.services.resolution import CatalogRepository, ProductResolver
from store_manager.services.scanner import (
    BarcodeDecoder,
    BarcodeInputRouter,
    CameraScanner,
    FrameSource,
)
from store_manager.services.sessions import SessionRegistry
from store_manager.services.storage import InMemoryStorage
from store_manager.services.store_manager import StoreManager
from store_manager.services.temporary_products import TemporaryProductCache

PLACEHOLDER_IMAGE = "https://placehold.co/100x100.png"


@dataclass
class InMemoryCatalogRepository(CatalogRepository):
    """In-memory catalog keyed by barcode."""

    products: dict[str, CatalogProduct] = field(default_factory=dict)
    lookups: list[str] = field(default_factory=list)
    fail_lookups: bool = False
    fail_creates: bool = False

    def add(self, barcode: str, name: str, price: float) -> CatalogProduct:
        product = CatalogProduct(
            id=f"prod_{len(self.products) + 1}",
            name=name,
            price=price,
            barcode=barcode,
            image=f"https://img.test/{barcode}.png",
        )
        self.products[barcode] = product
        return product

    def lookup_by_barcode(self, barcode: str) -> CatalogProduct | None:
        self.lookups.append(barcode)
        if self.fail_lookups:
            raise RuntimeError("catalog unavailable")
        return self.products.get(barcode)

    def create_product(self, draft: ProductDraft) -> CatalogProduct:
        if self.fail_creates:
            raise RuntimeError("insert failed")
        product = CatalogProduct(
            id=str(uuid4()),
            name=draft.name,
            price=draft.price,
            barcode=draft.barcode,
            image=str(draft.image),
            description=draft.description,
            category=draft.category,
            brand=draft.brand,
            stock_quantity=draft.stock_quantity,
        )
        self.products[draft.barcode] = product
        return product


@dataclass
class InMemoryOrderRepository(OrderRepository):
    """In-memory order repository for tests."""

    orders: list[OrderRecord] = field(default_factory=list)
    fail: bool = False

    def create_order(
        self, customer_name: str, items: list[CartLine], total: float
    ) -> OrderRecord:
        if self.fail:
            raise RuntimeError("database unavailable")
        order = OrderRecord(
            id=f"ORD{len(self.orders) + 1:03d}",
            customer_name=customer_name,
            items=items,
            total=total,
            status="Delivered",
            payment_method="In-Store",
            created_at=datetime(2026, 10, 19, 14, 5, tzinfo=UTC),
        )
        self.orders.append(order)
        return order


@dataclass
class InMemoryActivityRepository(ActivityRepository):
    """In-memory activity repository for tests."""

    events: list[dict[str, object]] = field(default_factory=list)
    fail: bool = False

    def create_activity(self, action: str, details: str | None, user_agent: str) -> None:
        if self.fail:
            raise RuntimeError("activity insert failed")
        self.events.append(
            {"action": action, "details": details, "user_agent": user_agent}
        )


@dataclass
class FakeTimer:
    delay: float
    callback: Callable[[], object]
    due: float
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class FakeScheduler:
    """Manually advanced clock for idle-timer tests."""

    now: float = 0.0
    timers: list[FakeTimer] = field(default_factory=list)

    def call_later(self, delay: float, callback: Callable[[], object]) -> FakeTimer:
        timer = FakeTimer(delay=delay, callback=callback, due=self.now + delay)
        self.timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        self.now += seconds
        for timer in list(self.timers):
            if not timer.cancelled and timer.due <= self.now:
                timer.cancelled = True
                timer.callback()

    @property
    def pending(self) -> list[FakeTimer]:
        return [timer for timer in self.timers if not timer.cancelled]


@dataclass
class FakeFrameSource(FrameSource):
    """Plays back a fixed list of frames, then returns None."""

    frames: list[object] = field(default_factory=list)
    released: bool = False

    def read(self) -> object | None:
        if self.frames:
            return self.frames.pop(0)
        return None

    def release(self) -> None:
        self.released = True


@dataclass
class FakeBarcodeDecoder(BarcodeDecoder):
    """Frames and images are plain strings; 'boom' raises, '' finds nothing."""

    images: dict[bytes, str] = field(default_factory=dict)

    def decode_frame(self, frame: object) -> str | None:
        if frame == "boom":
            raise RuntimeError("decoder crashed")
        return str(frame) or None

    def decode_image(self, image_bytes: bytes) -> str | None:
        return self.images.get(image_bytes)


@dataclass
class FakeBarcodeReaderClient(BarcodeReaderClient):
    """Fake LLM client returning a fixed payload."""

    payload: dict[str, object] = field(default_factory=lambda: {"barcode": "8964000123"})
    calls: int = 0

    async def read(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.calls += 1
        return self.payload


@dataclass
class PosFixture:
    """A fully wired point-of-sale stack over in-memory collaborators."""

    storage: InMemoryStorage
    registry: SessionRegistry
    catalog: InMemoryCatalogRepository
    orders: InMemoryOrderRepository
    activity: InMemoryActivityRepository
    temporary_products: TemporaryProductCache
    cart_service: CartService
    resolver: ProductResolver
    finalizer: SaleFinalizer
    manager: StoreManager


def build_pos(storage: InMemoryStorage | None = None) -> PosFixture:
    storage = storage or InMemoryStorage()
    registry = SessionRegistry(storage)
    registry.load()
    catalog = InMemoryCatalogRepository()
    orders = InMemoryOrderRepository()
    activity = InMemoryActivityRepository()
    temporary_products = TemporaryProductCache(storage)
    cart_service = CartService(registry, placeholder_image_url=PLACEHOLDER_IMAGE)
    resolver = ProductResolver(temporary_products, catalog)
    finalizer = SaleFinalizer(
        registry=registry,
        order_repository=orders,
        activity_service=ActivityService(activity),
        storage=storage,
    )
    manager = StoreManager(
        registry=registry,
        cart_service=cart_service,
        resolver=resolver,
        temporary_products=temporary_products,
        catalog_repository=catalog,
        finalizer=finalizer,
    )
    return PosFixture(
        storage=storage,
        registry=registry,
        catalog=catalog,
        orders=orders,
        activity=activity,
        temporary_products=temporary_products,
        cart_service=cart_service,
        resolver=resolver,
        finalizer=finalizer,
        manager=manager,
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        admin_token="admin-token",
        openai_api_key="openai-key",
        storage_dir=str(tmp_path / "storage"),
    )


@pytest.fixture
def pos() -> PosFixture:
    return build_pos()


@pytest.fixture
def container(settings: Settings, pos: PosFixture) -> AppContainer:
    manager = pos.manager
    decoder = FakeBarcodeDecoder()
    input_router = BarcodeInputRouter(
        on_barcode=manager.process_barcode,
        is_dialog_open=lambda: manager.dialog_open,
        decoder=decoder,
        barcode_reader=BarcodeReaderService(
            client=FakeBarcodeReaderClient(),
            model=settings.openai_model,
            reasoning_effort=settings.openai_reasoning_effort,
            store=settings.openai_store,
        ),
    )
    camera_scanner = CameraScanner(
        frame_source_factory=FakeFrameSource,
        decoder=decoder,
        on_barcode=input_router.emit_from_camera,
        poll_interval_seconds=0,
    )
    receipt_service = ReceiptService(
        storage=pos.storage,
        store_name=settings.store_name,
        store_address=settings.store_address,
        store_phone=settings.store_phone,
    )

    async def close_resources() -> None:
        await camera_scanner.stop()
        input_router.close()

    return AppContainer(
        settings=settings,
        storage=pos.storage,
        store_manager=manager,
        input_router=input_router,
        camera_scanner=camera_scanner,
        receipt_service=receipt_service,
        close_resources=close_resources,
    )
