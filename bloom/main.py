from __future__ import annotations

import asyncio
import logging
from typing import Annotated, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from . import schemas
from .catalog import Catalog, get_catalog
from .config import Settings, get_settings
from .errors import StoreError, UnknownMenuItem
from .intake import place_reservation, send_contact_message
from .models import Collection, next_status
from .notifier import LineNotifier
from .ordering import OrderSubmission
from .pricing import tax_amount, total_with_tax
from .session import CustomerSession, SessionRegistry, resolve_view
from .staff import StaffSyncView
from .store import Store, build_store
from .streaming import ChangeStream

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, store: Store | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Bloom Café Orders", version="0.1.0")
    app.state.settings = settings
    app.state.store = store
    app.state.catalog = get_catalog()
    app.state.sessions = SessionRegistry(settings.max_sessions, notice_seconds=settings.notice_seconds)
    app.state.staff = None
    app.state.notifier = None
    app.state.poller = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def on_startup() -> None:
        logging.basicConfig(level=settings.log_level.upper())
        if app.state.store is None:
            if settings.store_backend == "database":
                from .database import init_db

                init_db()
            app.state.store = build_store(settings)
        app.state.staff = StaffSyncView(app.state.store, tax_rate=settings.tax_rate)
        await app.state.staff.activate()
        if settings.line_channel_access_token:
            app.state.notifier = LineNotifier(
                app.state.store,
                settings.line_channel_access_token,
                settings.line_target_ids,
                tax_rate=settings.tax_rate,
            )
            app.state.notifier.attach()
        if settings.staff_poll_interval:
            app.state.poller = asyncio.create_task(app.state.staff.poll(settings.staff_poll_interval))

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        if app.state.poller is not None:
            app.state.poller.cancel()
        if app.state.notifier is not None:
            app.state.notifier.detach()
        if app.state.staff is not None:
            await app.state.staff.deactivate()
        if app.state.store is not None:
            await app.state.store.close()

    _register_routes(app)
    return app


# -------------------------
# Dependencies
# -------------------------

def get_store(request: Request) -> Store:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_menu(request: Request) -> Catalog:
    return request.app.state.catalog


async def get_staff_view(request: Request) -> StaffSyncView:
    view: StaffSyncView = request.app.state.staff
    if not view.active:
        await view.activate()
    return view


def get_customer_session(request: Request, response: Response) -> CustomerSession:
    settings: Settings = request.app.state.settings
    registry: SessionRegistry = request.app.state.sessions
    cookie = request.cookies.get(settings.session_cookie_name)
    session = registry.get_or_start(cookie, request.query_params)
    if session.id != cookie:
        response.set_cookie(settings.session_cookie_name, session.id, httponly=True, samesite="lax")
    return session


StoreDep = Annotated[Store, Depends(get_store)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
CatalogDep = Annotated[Catalog, Depends(get_menu)]
StaffDep = Annotated[StaffSyncView, Depends(get_staff_view)]
SessionDep = Annotated[CustomerSession, Depends(get_customer_session)]


def _cart_read(session: CustomerSession, settings: Settings) -> schemas.CartRead:
    cart = session.cart
    subtotal = cart.subtotal()
    return schemas.CartRead(
        table_id=session.table_id,
        lines=[
            schemas.CartLineRead(
                name=line.name,
                category=line.item.category.value,
                quantity=line.quantity,
                unit_price=line.item.price,
                line_total=line.line_total,
            )
            for line in cart.lines
        ],
        item_count=cart.item_count(),
        subtotal=subtotal,
        tax=tax_amount(subtotal, settings.tax_rate),
        total=total_with_tax(subtotal, settings.tax_rate),
    )


def _staff_order(view: StaffSyncView, order) -> schemas.StaffOrderRead:
    return schemas.StaffOrderRead(
        **order.model_dump(),
        next_action=view.order_action(order),
        total=view.display_total(order),
    )


def _dashboard(view: StaffSyncView) -> schemas.DashboardResponse:
    return schemas.DashboardResponse(
        is_loading=view.is_loading,
        orders=[_staff_order(view, order) for order in view.orders],
        reservations=view.reservations,
        messages=view.messages,
        active_order_count=view.active_order_count,
        unread_message_count=view.unread_message_count,
        reservation_count=view.reservation_count,
        notices=[schemas.NoticeRead.model_validate(notice) for notice in view.notices.active()],
    )


def _register_routes(app: FastAPI) -> None:
    @app.get("/health")
    def health_check() -> dict:
        return {"status": "ok"}

    # -------------------------
    # Storefront
    # -------------------------

    @app.get("/", response_model=schemas.StorefrontResponse)
    def storefront(request: Request, session: SessionDep, settings: SettingsDep):
        return schemas.StorefrontResponse(
            view=resolve_view(request.url.path),
            table_id=session.table_id,
            cart=_cart_read(session, settings),
        )

    @app.get("/menu", response_model=schemas.MenuResponse)
    def menu(catalog: CatalogDep):
        return schemas.MenuResponse(
            groups={
                group: {
                    category: [
                        schemas.MenuItemRead(
                            name=item.name,
                            category=item.category.value,
                            price=item.price,
                            description=item.description,
                        )
                        for item in items
                    ]
                    for category, items in sections.items()
                }
                for group, sections in catalog.grouped().items()
            }
        )

    @app.get("/cart", response_model=schemas.CartRead)
    def read_cart(session: SessionDep, settings: SettingsDep):
        return _cart_read(session, settings)

    @app.post("/cart/items", response_model=schemas.CartRead)
    def add_cart_item(
        payload: schemas.CartItemAdd,
        session: SessionDep,
        settings: SettingsDep,
        catalog: CatalogDep,
    ):
        try:
            item = catalog.require(payload.name)
        except UnknownMenuItem as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        session.cart.add_item(item)
        return _cart_read(session, settings)

    @app.patch("/cart/items/{name}", response_model=schemas.CartRead)
    def update_cart_item(
        name: str,
        payload: schemas.CartQuantityUpdate,
        session: SessionDep,
        settings: SettingsDep,
    ):
        session.cart.update_quantity(name, payload.delta)
        return _cart_read(session, settings)

    @app.delete("/cart/items/{name}", response_model=schemas.CartRead)
    def remove_cart_item(name: str, session: SessionDep, settings: SettingsDep):
        session.cart.remove_item(name)
        return _cart_read(session, settings)

    @app.delete("/cart", response_model=schemas.CartRead)
    def clear_cart(session: SessionDep, settings: SettingsDep):
        session.cart.clear()
        return _cart_read(session, settings)

    @app.post(
        "/cart/checkout",
        response_model=schemas.OrderPlacedResponse,
        status_code=status.HTTP_201_CREATED,
        responses={204: {"description": "Cart was empty, nothing placed"}},
    )
    async def checkout(
        session: SessionDep,
        settings: SettingsDep,
        store: StoreDep,
        payload: Annotated[Optional[schemas.CheckoutRequest], Body()] = None,
    ):
        submission = OrderSubmission(store, confirmation_ttl=settings.order_confirmation_seconds)
        table_id = (payload.table_id if payload else None) or session.table_id
        result = await submission.submit(session.cart, table_id)
        if result is None:
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        if result.busy:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.error)
        if not result.ok:
            session.notices.push("Order not placed", result.error)
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=result.error)
        session.is_cart_modal_open = False
        session.confirmation = result.confirmation
        return schemas.OrderPlacedResponse(
            order=result.order,
            total=total_with_tax(result.order.subtotal, settings.tax_rate),
            confirmation=schemas.NoticeRead.model_validate(result.confirmation),
        )

    @app.get("/notices", response_model=schemas.NoticesResponse)
    def read_notices(session: SessionDep):
        confirmation = session.active_confirmation(session.notices.clock())
        return schemas.NoticesResponse(
            notices=[schemas.NoticeRead.model_validate(notice) for notice in session.notices.active()],
            order_placed=schemas.NoticeRead.model_validate(confirmation) if confirmation else None,
        )

    @app.delete("/notices/{notice_id}", status_code=status.HTTP_204_NO_CONTENT)
    def dismiss_notice(notice_id: str, session: SessionDep):
        session.notices.dismiss(notice_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.post("/reservations", response_model=schemas.ReservationRecord, status_code=status.HTTP_201_CREATED)
    async def create_reservation(payload: schemas.ReservationCreate, session: SessionDep, store: StoreDep):
        try:
            reservation = await place_reservation(store, payload)
        except StoreError as exc:
            logger.warning("Reservation for %s failed: %s", payload.email, exc)
            session.notices.push("Could not book your table", "Please try again in a moment.")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Could not book your table"
            ) from exc
        session.notices.push("Table booked!", f"See you on {reservation.date.isoformat()}.")
        return reservation

    @app.post("/contact", response_model=schemas.ContactMessageRecord, status_code=status.HTTP_201_CREATED)
    async def create_contact_message(payload: schemas.ContactMessageCreate, session: SessionDep, store: StoreDep):
        try:
            message = await send_contact_message(store, payload)
        except StoreError as exc:
            logger.warning("Contact message from %s failed: %s", payload.email, exc)
            session.notices.push("Could not send your message", "Please try again in a moment.")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Could not send your message"
            ) from exc
        session.notices.push("Message sent!", "We'll get back to you within 24 hours.")
        return message

    # -------------------------
    # Staff controller
    # -------------------------

    @app.get("/controller", response_model=schemas.DashboardResponse)
    async def dashboard(view: StaffDep):
        return _dashboard(view)

    @app.get(
        "/controller/stream",
        response_class=StreamingResponse,
        responses={200: {"content": {"text/event-stream": {}}}},
    )
    async def dashboard_stream(view: StaffDep, store: StoreDep):
        stream = ChangeStream(
            store,
            lambda: {
                "active_orders": view.active_order_count,
                "unread_messages": view.unread_message_count,
                "reservations": view.reservation_count,
            },
        )
        stream.open()
        return StreamingResponse(stream.events(), media_type="text/event-stream")

    @app.post("/controller/orders/{order_id}/advance", response_model=schemas.StaffOrderRead)
    async def advance_order(
        order_id: str,
        view: StaffDep,
        payload: Annotated[Optional[schemas.OrderAdvance], Body()] = None,
    ):
        order = await _find_or_reload(view, Collection.ORDERS, order_id)
        seen_status = payload.seen_status if payload else None
        target = next_status(seen_status or order.status)
        if target is None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Order already served")
        result = await view.advance_order(order_id, seen_status)
        current = view.find(Collection.ORDERS, order_id)
        if result is None:
            if current is not None and current.status is not target and next_status(current.status) is not target:
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Order has moved on")
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Could not update order")
        return _staff_order(view, current or order.model_copy(update={"status": result}))

    @app.post("/controller/messages/{message_id}/read", response_model=schemas.ContactMessageRecord)
    async def mark_message_read(message_id: str, view: StaffDep):
        await _find_or_reload(view, Collection.CONTACT_MESSAGES, message_id)
        if not await view.mark_message_read(message_id):
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Could not update message")
        return view.find(Collection.CONTACT_MESSAGES, message_id)

    @app.delete("/controller/reservations/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def cancel_reservation(reservation_id: str, view: StaffDep, confirm: bool = Query(False)):
        await _find_or_reload(view, Collection.RESERVATIONS, reservation_id)
        if not confirm:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Confirmation required")
        if not await view.cancel_reservation(reservation_id, lambda _prompt: confirm):
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Could not cancel reservation")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.delete("/controller/{collection}", response_model=schemas.ClearResponse)
    async def clear_collection(collection: Collection, view: StaffDep, confirm: bool = Query(False)):
        if not confirm:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Confirmation required")
        deleted = await view.clear_all(collection, lambda _prompt: confirm)
        if deleted is None:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=f"Could not clear {collection.value}")
        return schemas.ClearResponse(collection=collection.value, deleted=deleted)


async def _find_or_reload(view: StaffSyncView, collection: Collection, record_id: str):
    record = view.find(collection, record_id)
    if record is None:
        await view.reload(collection)
        record = view.find(collection, record_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Record not found")
    return record


app = create_app()
