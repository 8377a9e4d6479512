"""
FastAPI routers grouped by domain (auth, friends, songs, setlists, notifications).

Each module exposes an APIRouter that create_app includes. Routers only parse
requests and delegate to services; the ServiceError handler in app.py turns
failures into HTTP responses.
"""
