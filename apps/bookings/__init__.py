"""Bookings app package.

This app encapsulates the booking domain: availability checks over
(room, night) cells, short-lived reservation holds, final validation and
the commit of a priced booking. Double bookings are prevented by the hold
mechanism plus a fresh conflict check inside the committing transaction.
"""
