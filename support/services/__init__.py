from .tickets import (
    TicketClosedError,
    TicketError,
    add_reply,
    cancel_ticket,
    open_ticket,
    set_ticket_status,
    ticket_stats,
)

__all__ = [
    "TicketClosedError",
    "TicketError",
    "add_reply",
    "cancel_ticket",
    "open_ticket",
    "set_ticket_status",
    "ticket_stats",
]
