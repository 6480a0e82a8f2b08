"""Bookings app package.

One booking model serves tours and experiences. ``services`` is the
repository that creates bookings, reads them back and moves them through
the status machine in ``domain.status``; the views add ownership checks
and hand committed bookings to the notification dispatcher.
"""
