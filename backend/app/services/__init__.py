# Services package init
"""
Trophy API - Services Layer
=============================

Service Inventory:
    - validation:    Presence checks on the create-trophy body
    - trophy_store:  TrophyStore, insert / list / delete over the Database handle

Why services are separate from routes:
    Both can be tested without HTTP, and routes stay limited to status codes
    and serialization.
"""
