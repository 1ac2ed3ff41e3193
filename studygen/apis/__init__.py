"""HTTP routers, one per artifact type plus the title endpoint."""
