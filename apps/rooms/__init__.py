"""Rooms app package.

Holds the catalogue of bookable rooms (type, capacity, own base rate).
Availability and locking over these rooms live in the bookings app.
"""
