"""HTTP routers for hosting the generation flow."""
