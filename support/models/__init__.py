from .ticket import SupportTicket, TicketReply

__all__ = ["SupportTicket", "TicketReply"]
