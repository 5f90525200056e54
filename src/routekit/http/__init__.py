"""HTTP primitives shared by routers, handlers, and the server."""
