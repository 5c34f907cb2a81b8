"""HTTP routers of the admin API, one module per screen."""
