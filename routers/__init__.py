"""API routers, one module per area. Each endpoint calls one workflow and unwraps its result."""
