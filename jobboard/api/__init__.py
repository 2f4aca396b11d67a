"""REST adapter exposing the announcement repository over HTTP."""
