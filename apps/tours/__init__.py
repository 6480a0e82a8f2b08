"""Tours catalogue.

Tours, their day-by-day itinerary and included/excluded services. The
booking repository reads prices and itinerary details from here; the
catalogue itself is maintained through the Django admin.
"""
