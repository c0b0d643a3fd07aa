"""HTTP primitives — Request, Response, Headers, QueryParams."""
