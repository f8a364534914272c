"""Queue management application for bank branches and hospitals.

This package contains models, services, serializers, views and route
registrations for tickets, counters, rooms and the administration
resources used by kiosks, serving screens and hall displays.
"""
