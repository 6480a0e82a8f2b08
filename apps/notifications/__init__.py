"""Notifications app package.

Booking emails (per product type, each from its own mailbox) and WhatsApp
click-to-chat links. Delivery happens after the booking transaction
commits and is best effort.
"""
