from __future__ import annotations
from datetime import datetime
from typing import Optional
from fasthtml.common import *
from monsterui.all import *

from bidboard.core import BatchResult, PropertyRecord, Status
from bidboard.timeleft import format_time_left, live_minutes_left
from .api import run_live_batch


def format_price(price: int) -> str:
    """Finnish digit grouping: 1234567 -> '1 234 567' (no-break spaces)."""
    return f"{price:,}".replace(",", "\u00a0")


def _price_cell(p: PropertyRecord):
    if p.current_price > 0:
        return Span(f"{format_price(p.current_price)} €", cls="badge badge-primary")
    return Span("No bids (0 €)", cls="badge")


def _time_left_cell(p: PropertyRecord, now: Optional[datetime] = None):
    minutes = live_minutes_left(p, now)
    label = format_time_left(minutes)
    if not label:
        return Span("")
    if minutes < 0:
        cls = "text-error"
    elif minutes == 0:
        cls = "text-warning"
    else:
        cls = "text-success"
    return Span(label, cls=cls)


def _status_cell(p: PropertyRecord):
    cls = "badge badge-error" if p.status.is_ended else "badge badge-success"
    if p.status == Status.ERROR:
        cls = "badge badge-warning"
    return Span(p.status.value, cls=cls)


def properties_table(result: BatchResult, now: Optional[datetime] = None):
    rows = [
        Tr(
            Td(p.property_number),
            Td(f"#{p.id}"),
            Td(_price_cell(p)),
            Td(_time_left_cell(p, now)),
            Td(_status_cell(p)),
            Td(A("View Auction", href=p.url, target="_blank", cls="link")),
        )
        for p in result.properties
    ]
    return Div(
        Table(
            Thead(
                Tr(
                    Td("Property"),
                    Td("ID"),
                    Td("Current Price"),
                    Td("Time Left"),
                    Td("Status"),
                    Td("Link"),
                )
            ),
            Tbody(*rows),
            cls="table table-zebra w-full",
            id="properties-table",
        ),
        Div(cls="flex justify-between mt-4")(
            H3("Total: ", Span(f"{format_price(result.total)} €", id="total-amount")),
            P(f"Last updated: {result.timestamp}", id="last-updated"),
        ),
    )


def add_ui_routes(app, rt):
    @rt("/")
    def get():
        return Titled(
            Container(
                Div(cls="flex items-center justify-between mb-4")(
                    H1("Auction Dashboard"),
                    A("API Docs", href="/api/docs", target="_blank", cls="link"),
                ),
                Card(
                    Div(cls="flex items-center justify-between")(
                        H3("Properties"),
                        Button(
                            "Refresh",
                            cls=ButtonT.primary,
                            hx_get="/table_partial",
                            hx_target="#data-container",
                            hx_swap="innerHTML",
                            hx_indicator="#loading",
                        ),
                    ),
                    P("Loading live auction data…", id="loading", cls="htmx-indicator"),
                    Div(
                        id="data-container",
                        hx_get="/table_partial",
                        hx_trigger="load",
                        hx_swap="innerHTML",
                        hx_indicator="#loading",
                    ),
                ),
            ),
        )

    @rt("/table_partial")
    async def get():
        result = await run_live_batch()
        return properties_table(result)
