"""Properties app package.

This app encapsulates property listings, their accommodation groups and
accommodations, the availability engine that checks requested stays against
booked dates, and the availability-aware search.
"""
