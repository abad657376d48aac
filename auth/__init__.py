"""auth/ -- Authentication and authorization package for the car inventory API.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or inventory/.
api/ and inventory/ import from auth/, not the other way around.
"""
